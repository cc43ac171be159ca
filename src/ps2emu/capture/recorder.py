"""Turn i8042 debug output into a replay log."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TextIO

from ps2emu import LOG_VERSION
from ps2emu.capture.classifier import iter_classified
from ps2emu.capture.parser import StartMarker, parse_classified
from ps2emu.errors import NoEventsError
from ps2emu.log.format import format_event_line, format_header, format_section_line
from ps2emu.models.enums import KEYBOARD_PORT, EventType, Section
from ps2emu.models.event import Event

logger = logging.getLogger(__name__)

Message = Event | StartMarker


class KernelLogRecorder:
    """Records PS/2 traffic from a kernel log stream.

    Keyboard traffic is off by default since it can contain passwords and
    other things typed by the user.
    """

    def __init__(
        self,
        record_kbd: bool = False,
        record_aux: bool = True,
        log_version: int = LOG_VERSION,
    ) -> None:
        if not record_kbd and not record_aux:
            raise ValueError("Nothing to record: both KBD and AUX recording are disabled")
        if not 0 <= log_version <= LOG_VERSION:
            raise ValueError(f"Cannot write log version {log_version}")
        self.record_kbd = record_kbd
        self.record_aux = record_aux
        self.log_version = log_version

    def messages(self, lines: Iterable[str]) -> Iterator[Message]:
        """Yield every Event and StartMarker in the stream, in order."""
        for _, message in self._numbered(lines):
            yield message

    def _numbered(self, lines: Iterable[str]) -> Iterator[tuple[int, Message]]:
        for classified in iter_classified(lines):
            message = parse_classified(classified)
            if message is not None:
                yield classified.line_number, message

    def seek_start(self, messages: Iterator[Message], start_time: int) -> None:
        """Consume messages up to the start marker written for ``start_time``."""
        for message in messages:
            if isinstance(message, StartMarker) and message.time == start_time:
                logger.debug("Found start marker %d", start_time)
                return
        raise NoEventsError("Reached EOF of the kernel log and got no events")

    def wants(self, event: Event) -> bool:
        """Apply the KBD/AUX port filters to one event.

        Only keyboards send kbd-data, and interrupts name their port, so both
        can be attributed. Commands, parameters and returns go to AUX devices.
        """
        if event.type == EventType.KBD_DATA:
            return self.record_kbd
        if event.is_interrupt:
            if event.port == KEYBOARD_PORT:
                return self.record_kbd
            return self.record_aux
        return self.record_aux

    def record(
        self,
        lines: Iterable[str],
        out: TextIO,
        start_time: int | None = None,
    ) -> int:
        """Write a replay log for the traffic in ``lines``.

        Args:
            lines: Kernel log lines (e.g. /dev/kmsg or a saved dmesg)
            out: Text stream receiving the log
            start_time: If set, skip everything before the matching start marker

        Returns:
            Number of events written
        """
        numbered = self._numbered(lines)
        if start_time is not None:
            self.seek_start((message for _, message in numbered), start_time)

        print(format_header(self.log_version), file=out, flush=True)
        if self.log_version >= 1:
            print(format_section_line(Section.MAIN), file=out, flush=True)

        origin: int | None = None
        last_time = 0
        written = 0
        for line_number, message in numbered:
            if isinstance(message, StartMarker):
                continue
            if not self.wants(message):
                continue
            if origin is None:
                origin = message.time
            elif message.time < origin + last_time:
                # Timestamps restart when a log holds several boot sessions
                logger.warning(
                    "line %d: time %d is before the previous event, continuing from %d",
                    line_number, message.time, last_time,
                )
                origin = message.time - last_time
            event = message.shifted(origin)
            last_time = event.time
            line = format_event_line(event, self.log_version)
            print(line, file=out, flush=True)
            written += 1

        logger.info("Recorded %d events", written)
        return written
