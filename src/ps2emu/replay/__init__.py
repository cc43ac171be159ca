"""Timed replay of recorded PS/2 traffic."""

from ps2emu.replay.engine import ReplayEngine
from ps2emu.replay.report import ListReport, ReplayReport

__all__ = ["ListReport", "ReplayEngine", "ReplayReport"]
