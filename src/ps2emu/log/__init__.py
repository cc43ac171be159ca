"""Reading and writing ps2emu-record event logs."""

from ps2emu.log.format import format_event, format_event_line, format_header, parse_event
from ps2emu.log.reader import load_log, read_log

__all__ = [
    "format_event",
    "format_event_line",
    "format_header",
    "load_log",
    "parse_event",
    "read_log",
]
