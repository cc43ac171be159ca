"""Exception taxonomy shared by the capture and replay sides."""


class Ps2emuError(Exception):
    """Base class for all ps2emu failures."""


class InputFormatError(Ps2emuError):
    """A log line, header, section name or config value could not be parsed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class VersionUnsupportedError(Ps2emuError):
    """The log was written by a newer ps2emu-record than we understand."""

    def __init__(self, found: int, supported: int) -> None:
        self.found = found
        self.supported = supported
        super().__init__(
            f"Log version is too new (found {found}, we only support up to {supported})"
        )


class NoEventsError(Ps2emuError):
    """The input ended before the requested recording start point was found."""


class ChannelError(Ps2emuError):
    """I/O failure on a log source or on the device channel."""


class ProtocolStateError(Ps2emuError):
    """A device command was issued out of the required order."""


class DataMismatchWarning(UserWarning):
    """The emulated driver produced a byte other than the recorded one."""

    def __init__(self, index: int, expected: int, received: int) -> None:
        self.index = index
        self.expected = expected
        self.received = received
        super().__init__(
            f"event #{index}: expected {expected:02x}, received {received:02x}"
        )
