"""Shared enumerations for ps2emu domain objects."""

from enum import IntEnum, StrEnum


class EventType(StrEnum):
    """Kind of traffic captured on the i8042 controller.

    Values double as the labels used in both the driver trace and
    the replay log.
    """

    INTERRUPT = "interrupt"
    COMMAND = "command"
    PARAMETER = "parameter"
    RETURN = "return"
    KBD_DATA = "kbd-data"


class Section(StrEnum):
    """Replay phase of a version 1+ log."""

    INIT = "init"
    MAIN = "main"


class NoDataPolicy(StrEnum):
    """What the replay engine sends for an interrupt recorded without data."""

    SKIP = "skip"
    ZERO = "zero"


class PortType(IntEnum):
    """Serio port types from linux/serio.h."""

    XT = 0x00
    I8042 = 0x01
    RS232 = 0x02
    HIL_MLC = 0x03
    PS_PSTHRU = 0x05
    I8042_XL = 0x06


# i8042 port index of the keyboard (KBD) port; every other index is AUX.
KEYBOARD_PORT = 0
