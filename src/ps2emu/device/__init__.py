"""Virtual PS/2 device command protocol."""

from ps2emu.device.protocol import (
    DeviceChannel,
    DeviceCommand,
    DeviceSession,
    FileDeviceChannel,
    encode_command,
)

__all__ = [
    "DeviceChannel",
    "DeviceCommand",
    "DeviceSession",
    "FileDeviceChannel",
    "encode_command",
]
