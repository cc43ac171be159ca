"""Find which subsystem wrote a kernel log line."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum


class LineTag(StrEnum):
    """Tags searched for in kernel log lines, in priority order."""

    DRIVER_TRACE = "i8042: "
    TOOL_MARKER = "ps2emu: "


_SEARCH_ORDER = (LineTag.DRIVER_TRACE, LineTag.TOOL_MARKER)


@dataclass(frozen=True)
class ClassifiedLine:
    tag: LineTag
    payload: str
    line_number: int = 0


def classify_line(line: str, line_number: int = 0) -> ClassifiedLine | None:
    """Tag a raw line by the first known tag it contains.

    The driver trace tag wins if both tags appear on one line. Returns None
    for lines from any other subsystem.
    """
    for tag in _SEARCH_ORDER:
        pos = line.find(tag.value)
        if pos != -1:
            payload = line[pos + len(tag.value):].rstrip("\r\n")
            return ClassifiedLine(tag=tag, payload=payload, line_number=line_number)
    return None


def iter_classified(lines: Iterable[str]) -> Iterator[ClassifiedLine]:
    """Yield classified lines, silently dropping unrelated kernel traffic."""
    for line_number, line in enumerate(lines, 1):
        classified = classify_line(line, line_number)
        if classified is not None:
            yield classified
