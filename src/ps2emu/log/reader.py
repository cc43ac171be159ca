"""Section-aware reader for ps2emu-record logs."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ps2emu import LOG_VERSION
from ps2emu.errors import ChannelError, InputFormatError, VersionUnsupportedError
from ps2emu.log.format import LineType, get_line_type, parse_event, parse_header, parse_section
from ps2emu.models.enums import Section
from ps2emu.models.event import Event
from ps2emu.models.log import ReplayLog

logger = logging.getLogger(__name__)


def read_log(lines: Iterable[str], max_version: int = LOG_VERSION) -> ReplayLog:
    """Parse a complete log into its ordered event lists.

    The header is checked before any body line is consumed. Any malformed
    line aborts the whole read; no partial log is ever returned.

    Args:
        lines: Log lines, header first (trailing newlines are ignored)
        max_version: Highest log version accepted

    Returns:
        ReplayLog with either a flat list (version 0) or Init/Main lists
    """
    it = iter(lines)
    version = parse_header(next(it, None))
    if version > max_version:
        raise VersionUnsupportedError(version, max_version)

    if version < 1:
        events = _read_flat(it)
        logger.debug("Read version %d log with %d events", version, len(events))
        return ReplayLog(version=version, events=events)

    init_events, main_events = _read_sectioned(it)
    logger.debug(
        "Read version %d log with %d init and %d main events",
        version, len(init_events), len(main_events),
    )
    return ReplayLog(version=version, init_events=init_events, main_events=main_events)


def _read_flat(lines: Iterable[str]) -> list[Event]:
    events: list[Event] = []
    for line_number, line in enumerate(lines, 2):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        events.append(parse_event(line, line_number))
    return events


def _read_sectioned(lines: Iterable[str]) -> tuple[list[Event], list[Event]]:
    destinations: dict[Section, list[Event]] = {Section.INIT: [], Section.MAIN: []}
    current: list[Event] | None = None

    for line_number, line in enumerate(lines, 2):
        line = line.rstrip("\r\n")
        line_type, body = get_line_type(line)

        if line_type == LineType.EVENT:
            if current is None:
                raise InputFormatError("Event appears before any section marker", line_number)
            current.append(parse_event(body, line_number))
        elif line_type == LineType.SECTION:
            current = destinations[parse_section(body, line_number)]
        else:
            raise InputFormatError(f"Invalid line {line!r}", line_number)

    return destinations[Section.INIT], destinations[Section.MAIN]


def load_log(path: Path, max_version: int = LOG_VERSION) -> ReplayLog:
    """Read and parse a log file from disk."""
    logger.info("Reading event log %s", path)
    try:
        with open(path, encoding="utf-8") as f:
            return read_log(f, max_version=max_version)
    except OSError as e:
        raise ChannelError(f"While reading {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise InputFormatError(f"{path} is not a text log: {e}") from e
