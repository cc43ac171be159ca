"""Domain models shared by capture and replay."""

from ps2emu.models.enums import KEYBOARD_PORT, EventType, NoDataPolicy, PortType, Section
from ps2emu.models.event import Event
from ps2emu.models.log import EventList, ReplayLog

__all__ = [
    "Event",
    "EventList",
    "EventType",
    "KEYBOARD_PORT",
    "NoDataPolicy",
    "PortType",
    "ReplayLog",
    "Section",
]
