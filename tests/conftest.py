"""Shared test fixtures."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ps2emu.device.protocol import DeviceCommand, DeviceSession
from ps2emu.errors import ChannelError
from ps2emu.models.enums import EventType
from ps2emu.models.event import Event

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeClock:
    """Monotonic clock that only moves when the engine sleeps or I/O takes time."""

    def __init__(self, start: int = 1_000_000) -> None:
        self.now = start
        self.sleeps: list[int] = []

    def __call__(self) -> int:
        return self.now

    def sleep(self, duration: int) -> None:
        assert duration > 0
        self.sleeps.append(duration)
        self.now += duration


class FakeChannel:
    """In-memory device channel recording every frame sent."""

    def __init__(
        self,
        replies: list[int] | None = None,
        clock: FakeClock | None = None,
        fail_after_sends: int | None = None,
    ) -> None:
        self.replies = list(replies or [])
        self.sent: list[tuple[DeviceCommand, int]] = []
        self.send_times: list[int] = []
        self.clock = clock
        self.fail_after_sends = fail_after_sends

    def send(self, command: DeviceCommand, data: int) -> None:
        if self.fail_after_sends is not None and len(self.sent) >= self.fail_after_sends:
            raise ChannelError("write failed")
        self.sent.append((command, data))
        if self.clock is not None:
            self.send_times.append(self.clock())

    def receive_byte(self) -> int:
        if not self.replies:
            raise ChannelError("device closed while waiting for data")
        return self.replies.pop(0)

    @property
    def interrupts(self) -> list[int]:
        return [data for command, data in self.sent if command == DeviceCommand.SEND_INTERRUPT]


@pytest.fixture(autouse=True)
def _reset_ps2emu_logging():
    yield
    logger = logging.getLogger("ps2emu")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def channel(clock) -> FakeChannel:
    return FakeChannel(clock=clock)


@pytest.fixture
def session(channel) -> DeviceSession:
    s = DeviceSession(channel)
    s.start()
    return s


@pytest.fixture
def kmsg_path() -> Path:
    return FIXTURES_DIR / "kmsg_session.log"


@pytest.fixture
def replay_v1_path() -> Path:
    return FIXTURES_DIR / "replay_v1.log"


@pytest.fixture
def replay_v0_path() -> Path:
    return FIXTURES_DIR / "replay_v0.log"


def interrupt(time: int, data: int | None = 0x00, port: int | None = 1, irq: int = 12) -> Event:
    if data is None:
        port = None
    return Event(type=EventType.INTERRUPT, time=time, data=data, port=port, irq=irq)


def received(time: int, data: int, event_type: EventType = EventType.RETURN) -> Event:
    return Event(type=event_type, time=time, data=data)
