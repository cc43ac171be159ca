"""Runtime configuration, optionally loaded from a YAML file."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from ps2emu import LOG_VERSION
from ps2emu.errors import InputFormatError
from ps2emu.models.enums import NoDataPolicy, PortType


class Ps2emuConfig(BaseModel):
    """Device, sysfs and recording settings for the record/replay tools."""

    device_path: Path = Path("/dev/ps2emu")
    port_type: PortType = PortType.I8042
    no_data_policy: NoDataPolicy = NoDataPolicy.SKIP

    kmsg_path: Path = Path("/dev/kmsg")
    i8042_platform_dir: Path = Path("/sys/devices/platform/i8042")
    i8042_debug_param: Path = Path("/sys/module/i8042/parameters/debug")
    record_kbd: bool = False
    record_aux: bool = True
    output_log_version: int = Field(LOG_VERSION, ge=0, le=LOG_VERSION)


def load_config(path: Path | None = None) -> Ps2emuConfig:
    """Load configuration from YAML, or return defaults when no path is given."""
    if path is None:
        return Ps2emuConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise InputFormatError(f"While opening config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise InputFormatError(f"Invalid YAML in {path}: {e}") from e

    try:
        return Ps2emuConfig.model_validate(data or {})
    except ValidationError as e:
        raise InputFormatError(f"Invalid config {path}: {e}") from e
