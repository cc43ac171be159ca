"""Event parser for the i8042 driver debug trace.

Handles the two event shapes the driver prints::

    [12345] 1c <- i8042 (interrupt,0,1)
    [12345] Interrupt 12, without any data

and the start marker ps2emu-record writes to the kernel log itself::

    Start recording 889317218
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from pydantic import ValidationError

from ps2emu.capture.classifier import ClassifiedLine, LineTag
from ps2emu.errors import InputFormatError
from ps2emu.models.enums import EventType
from ps2emu.models.event import Event

logger = logging.getLogger(__name__)

_NORMAL_EVENT_RE = re.compile(
    r"^\[(?P<time>\d+)\]\s+(?P<data>[0-9a-fA-F]{1,2})\s+[-<][->]\s+\S+\s+\((?P<label>[^)]*)\)"
)
_NO_DATA_INTERRUPT_RE = re.compile(
    r"^\[(?P<time>\d+)\]\s+Interrupt\s+(?P<irq>\d+),\s+without any data"
)
_START_MARKER_RE = re.compile(r"^Start recording (?P<time>\d+)")

_SIMPLE_LABELS = {
    "command": EventType.COMMAND,
    "parameter": EventType.PARAMETER,
    "return": EventType.RETURN,
    "kbd-data": EventType.KBD_DATA,
}


@dataclass(frozen=True)
class StartMarker:
    """Where a fresh recording begins inside a long-running kernel log."""

    time: int


def _parse_int_arg(value: str, what: str, line_number: int) -> int:
    try:
        return int(value.strip(), 10)
    except ValueError:
        raise InputFormatError(
            f"Failed to parse {what} from interrupt event: {value!r}", line_number
        ) from None


def parse_normal_event(payload: str, line_number: int = 0) -> Event | None:
    """Parse ``[time] hex dir driver (label[,args])``.

    Returns None when the payload has a different shape or an unknown label.
    Raises InputFormatError for an interrupt with missing or non-numeric
    port/irq arguments.
    """
    match = _NORMAL_EVENT_RE.match(payload)
    if not match:
        return None

    time = int(match.group("time"))
    data = int(match.group("data"), 16)
    label, *args = match.group("label").split(",")
    label = label.strip()

    if label == "interrupt":
        if len(args) < 2:
            raise InputFormatError(
                "Got interrupt event, but had less arguments than expected", line_number
            )
        port = _parse_int_arg(args[0], "port number", line_number)
        irq = _parse_int_arg(args[1], "IRQ", line_number)
        return _build(line_number, type=EventType.INTERRUPT, time=time, data=data, port=port, irq=irq)

    event_type = _SIMPLE_LABELS.get(label)
    if event_type is None:
        logger.debug("Skipping i8042 trace with label %r", label)
        return None
    return _build(line_number, type=event_type, time=time, data=data)


def parse_interrupt_without_data(payload: str, line_number: int = 0) -> Event | None:
    """Parse ``[time] Interrupt irq, without any data``."""
    match = _NO_DATA_INTERRUPT_RE.match(payload)
    if not match:
        return None
    return _build(
        line_number,
        type=EventType.INTERRUPT,
        time=int(match.group("time")),
        irq=int(match.group("irq")),
    )


def parse_start_marker(payload: str) -> StartMarker | None:
    match = _START_MARKER_RE.match(payload)
    if not match:
        return None
    return StartMarker(time=int(match.group("time")))


def parse_classified(line: ClassifiedLine) -> Event | StartMarker | None:
    """Turn a classified kernel log line into an Event or StartMarker.

    Returns None for trace noise the recorder does not care about.
    """
    if line.tag == LineTag.DRIVER_TRACE:
        event = parse_normal_event(line.payload, line.line_number)
        if event is None:
            event = parse_interrupt_without_data(line.payload, line.line_number)
        return event
    return parse_start_marker(line.payload)


def _build(line_number: int, **fields) -> Event:
    try:
        return Event(**fields)
    except ValidationError as e:
        raise InputFormatError(f"Invalid event: {e.errors()[0]['msg']}", line_number) from e
