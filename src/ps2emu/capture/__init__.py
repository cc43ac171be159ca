"""Capture side: classify and parse i8042 kernel debug output."""

from ps2emu.capture.classifier import ClassifiedLine, LineTag, classify_line
from ps2emu.capture.parser import StartMarker, parse_classified
from ps2emu.capture.recorder import KernelLogRecorder

__all__ = [
    "ClassifiedLine",
    "KernelLogRecorder",
    "LineTag",
    "StartMarker",
    "classify_line",
    "parse_classified",
]
