"""Switch the i8042 driver's debug output on and off through sysfs."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from ps2emu.errors import ChannelError

logger = logging.getLogger(__name__)

START_MARKER_FORMAT = "ps2emu: Start recording {}\n"


def _write(path: Path, data: str) -> None:
    try:
        with open(path, "w") as f:
            f.write(data)
    except OSError as e:
        raise ChannelError(f"While writing to {path}: {e}") from e


class I8042Debugger:
    """Controls i8042 debugging for a recording session.

    Devices are detached before debugging is enabled and rescanned after,
    so their initialization handshake ends up in the trace.
    """

    def __init__(
        self,
        platform_dir: Path = Path("/sys/devices/platform/i8042"),
        debug_param: Path = Path("/sys/module/i8042/parameters/debug"),
        kmsg_path: Path = Path("/dev/kmsg"),
    ) -> None:
        self.platform_dir = platform_dir
        self.debug_param = debug_param
        self.kmsg_path = kmsg_path

    def serio_ports(self) -> list[Path]:
        try:
            entries = sorted(self.platform_dir.iterdir())
        except OSError as e:
            raise ChannelError(f"While opening {self.platform_dir}: {e}") from e
        return [p for p in entries if p.name.startswith("serio")]

    def enable(self) -> int:
        """Enable debugging and mark the start of the recording.

        Returns:
            Start time written in the kernel log marker (monotonic microseconds)
        """
        ports = self.serio_ports()
        try:
            for port in ports:
                _write(port / "drvctl", "none")

            start_time = time.monotonic_ns() // 1000
            _write(self.kmsg_path, START_MARKER_FORMAT.format(start_time))
            _write(self.debug_param, "1\n")

            for port in ports:
                _write(port / "drvctl", "rescan")
        except ChannelError:
            self._restore(ports)
            raise

        logger.info("Enabled i8042 debugging on %d ports (start %d)", len(ports), start_time)
        return start_time

    def disable(self) -> bool:
        """Turn debugging back off; failures are logged, not raised."""
        try:
            _write(self.debug_param, "0\n")
        except ChannelError as e:
            logger.warning("Failed to disable i8042 debugging: %s", e)
            return False
        logger.info("Disabled i8042 debugging")
        return True

    def _restore(self, ports: list[Path]) -> None:
        """Reattach drivers after a failed enable, logging further failures."""
        for port in ports:
            try:
                _write(port / "drvctl", "rescan")
            except ChannelError as e:
                logger.warning("Failed to rescan %s: %s", port.name, e)
        self.disable()
