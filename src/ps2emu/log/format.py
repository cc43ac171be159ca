"""Text grammar of ps2emu-record logs.

A log starts with a version header and continues with one line per event::

    # ps2emu-record V1
    S: init
    E: 1200 interrupt fa 1 12
    S: main
    E: 1500 command f4
    E: 1800 interrupt - - 12

Version 0 logs carry no sections and no ``E:`` prefixes: every body line is
a bare event string.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import ValidationError

from ps2emu.errors import InputFormatError
from ps2emu.models.enums import EventType, Section
from ps2emu.models.event import Event

HEADER_PREFIX = "# ps2emu-record V"
EVENT_PREFIX = "E: "
SECTION_PREFIX = "S: "

_HEADER_RE = re.compile(r"^# ps2emu-record V(\d+)\s*$")
_NO_VALUE = "-"


class LineType(StrEnum):
    EVENT = "event"
    SECTION = "section"
    INVALID = "invalid"


def format_header(version: int) -> str:
    return f"{HEADER_PREFIX}{version}"


def parse_header(line: str | None) -> int:
    """Return the log version declared by a header line."""
    if line is None:
        raise InputFormatError("Invalid log file version: reached unexpected EOF", 1)
    match = _HEADER_RE.match(line.rstrip("\r\n"))
    if not match:
        raise InputFormatError(f"Invalid log file version: {line.strip()!r}", 1)
    return int(match.group(1))


def format_event(event: Event) -> str:
    """Render an event as ``<time> <label> <data> [<port> <irq>]``."""
    data = f"{event.data:02x}" if event.has_data else _NO_VALUE
    parts = [str(event.time), event.type.value, data]
    if event.is_interrupt:
        parts.append(str(event.port) if event.port is not None else _NO_VALUE)
        parts.append(str(event.irq) if event.irq is not None else _NO_VALUE)
    return " ".join(parts)


def _optional_int(token: str, base: int, what: str, line_number: int | None) -> int | None:
    if token == _NO_VALUE:
        return None
    try:
        return int(token, base)
    except ValueError:
        raise InputFormatError(f"Invalid {what} {token!r}", line_number) from None


def parse_event(text: str, line_number: int | None = None) -> Event:
    """Parse an event string produced by :func:`format_event`."""
    tokens = text.split()
    if len(tokens) < 3:
        raise InputFormatError(f"Truncated event {text.strip()!r}", line_number)

    time_str, label, data_str, *rest = tokens
    try:
        event_type = EventType(label)
    except ValueError:
        raise InputFormatError(f"Unknown event type {label!r}", line_number) from None

    expected_rest = 2 if event_type == EventType.INTERRUPT else 0
    if len(rest) != expected_rest:
        raise InputFormatError(
            f"{label} event takes {3 + expected_rest} fields, got {len(tokens)}", line_number
        )

    time = _optional_int(time_str, 10, "time", line_number)
    if time is None:
        raise InputFormatError("Event is missing its time", line_number)
    fields: dict = {
        "type": event_type,
        "time": time,
        "data": _optional_int(data_str, 16, "data byte", line_number),
    }
    if rest:
        fields["port"] = _optional_int(rest[0], 10, "port", line_number)
        fields["irq"] = _optional_int(rest[1], 10, "irq", line_number)

    try:
        return Event(**fields)
    except ValidationError as e:
        raise InputFormatError(f"Invalid event: {e.errors()[0]['msg']}", line_number) from e


def format_event_line(event: Event, version: int) -> str:
    """Render a body line for a log of the given version."""
    if version < 1:
        return format_event(event)
    return EVENT_PREFIX + format_event(event)


def format_section_line(section: Section) -> str:
    return SECTION_PREFIX + section.value


def get_line_type(line: str) -> tuple[LineType, str]:
    """Classify a version 1+ body line and return the text after its prefix."""
    if line.startswith(EVENT_PREFIX):
        return LineType.EVENT, line[len(EVENT_PREFIX):]
    if line.startswith(SECTION_PREFIX):
        return LineType.SECTION, line[len(SECTION_PREFIX):]
    return LineType.INVALID, line


def parse_section(name: str, line_number: int | None = None) -> Section:
    try:
        return Section(name.strip().lower())
    except ValueError:
        raise InputFormatError(f"Unknown section {name.strip()!r}", line_number) from None
