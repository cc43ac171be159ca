"""Command protocol of the ps2emu virtual i8042 device.

Every command is a fixed two byte frame ``{type: u8, data: u8}``. Bytes read
back from the device are raw, unframed output of the emulated driver stack.
"""

from __future__ import annotations

import logging
import struct
from enum import IntEnum
from pathlib import Path
from typing import BinaryIO, Protocol

from ps2emu.errors import ChannelError, ProtocolStateError
from ps2emu.models.enums import PortType

logger = logging.getLogger(__name__)

_FRAME = struct.Struct("BB")


class DeviceCommand(IntEnum):
    BEGIN = 0
    SET_PORT_TYPE = 1
    SEND_INTERRUPT = 2


def encode_command(command: DeviceCommand, data: int) -> bytes:
    """Pack a command frame; data must fit in one byte."""
    if not 0 <= data <= 0xFF:
        raise ValueError(f"Command data must be a byte, got {data}")
    return _FRAME.pack(int(command), data)


class DeviceChannel(Protocol):
    """Two-operation view of the device used by the replay engine."""

    def send(self, command: DeviceCommand, data: int) -> None: ...

    def receive_byte(self) -> int: ...


class FileDeviceChannel:
    """Unbuffered channel over a character device such as ``/dev/ps2emu``."""

    def __init__(self, handle: BinaryIO, name: str = "device") -> None:
        self._handle = handle
        self.name = name

    @classmethod
    def open(cls, path: Path) -> FileDeviceChannel:
        try:
            handle = open(path, "r+b", buffering=0)
        except OSError as e:
            raise ChannelError(f"While opening {path}: {e}") from e
        return cls(handle, name=str(path))

    def send(self, command: DeviceCommand, data: int) -> None:
        frame = encode_command(command, data)
        try:
            written = self._handle.write(frame)
        except OSError as e:
            raise ChannelError(f"While writing {command.name} to {self.name}: {e}") from e
        if written is not None and written != len(frame):
            raise ChannelError(
                f"Short write of {command.name} to {self.name} ({written} of {len(frame)} bytes)"
            )

    def receive_byte(self) -> int:
        try:
            data = self._handle.read(1)
        except OSError as e:
            raise ChannelError(f"While reading from {self.name}: {e}") from e
        if not data:
            raise ChannelError(f"{self.name} closed while waiting for data")
        return data[0]

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> FileDeviceChannel:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class DeviceSession:
    """Enforces the SET_PORT_TYPE → BEGIN → traffic ordering on a channel."""

    def __init__(self, channel: DeviceChannel) -> None:
        self.channel = channel
        self.port_type: PortType | None = None
        self.started = False

    def set_port_type(self, port_type: PortType = PortType.I8042) -> None:
        if self.started:
            raise ProtocolStateError("Port type cannot change after BEGIN")
        try:
            self.channel.send(DeviceCommand.SET_PORT_TYPE, int(port_type))
        except ChannelError as e:
            raise ChannelError(f"While setting port type: {e}") from e
        self.port_type = port_type

    def begin(self) -> None:
        if self.port_type is None:
            raise ProtocolStateError("SET_PORT_TYPE must be sent before BEGIN")
        if self.started:
            raise ProtocolStateError("Device already started")
        try:
            self.channel.send(DeviceCommand.BEGIN, int(self.port_type))
        except ChannelError as e:
            raise ChannelError(f"While starting device: {e}") from e
        self.started = True
        logger.debug("Device started with port type %s", self.port_type.name)

    def start(self, port_type: PortType = PortType.I8042) -> None:
        self.set_port_type(port_type)
        self.begin()

    def send_interrupt(self, data: int) -> None:
        self._require_started()
        self.channel.send(DeviceCommand.SEND_INTERRUPT, data)

    def receive_byte(self) -> int:
        self._require_started()
        return self.channel.receive_byte()

    def _require_started(self) -> None:
        if not self.started:
            raise ProtocolStateError("BEGIN must be sent before device traffic")
