"""Replay engine — drive the virtual device with the recorded timing."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from ps2emu.device.protocol import DeviceSession
from ps2emu.errors import ChannelError, DataMismatchWarning
from ps2emu.models.enums import NoDataPolicy, Section
from ps2emu.models.event import Event
from ps2emu.models.log import ReplayLog
from ps2emu.replay.report import ListReport, ReplayReport

logger = logging.getLogger(__name__)


def monotonic_us() -> int:
    return time.monotonic_ns() // 1000


def sleep_us(duration: int) -> None:
    time.sleep(duration / 1_000_000)


class ReplayEngine:
    """Replays event lists against a started device session.

    Each list gets its own timing origin, taken when that list starts.
    Interrupts are sent no earlier than their recorded offset; everything
    else is a byte the emulated driver must produce, which is read back and
    compared.
    """

    def __init__(
        self,
        session: DeviceSession,
        clock: Callable[[], int] = monotonic_us,
        sleep: Callable[[int], None] = sleep_us,
        no_data_policy: NoDataPolicy = NoDataPolicy.SKIP,
    ) -> None:
        """Initialize engine.

        Args:
            session: Device session; BEGIN must already have been sent
            clock: Monotonic clock returning microseconds
            sleep: Blocks for the given number of microseconds
            no_data_policy: How to replay interrupts recorded without data
        """
        self.session = session
        self._clock = clock
        self._sleep = sleep
        self.no_data_policy = no_data_policy

    def replay(self, log: ReplayLog) -> ReplayReport:
        """Replay every list of the log in order.

        A ChannelError aborts the list being replayed and is re-raised;
        later lists are not attempted.
        """
        report = ReplayReport(log_version=log.version)
        for section, events in log.lists():
            logger.info("Replaying %s sequence (%d events)...", _describe(section), len(events))
            report.lists.append(self.replay_list(events, section))
        return report

    def replay_list(self, events: Sequence[Event], section: Section | None = None) -> ListReport:
        report = ListReport(section=section)
        start_time = self._clock()

        for index, event in enumerate(events):
            try:
                if event.is_interrupt:
                    self._simulate_interrupt(start_time, event, report)
                else:
                    self._simulate_receive(index, event, report)
            except ChannelError:
                logger.error(
                    "Channel failure at event #%d of the %s sequence; aborting",
                    index, _describe(section),
                )
                raise
            report.events_replayed += 1

        return report

    def _simulate_interrupt(self, start_time: int, event: Event, report: ListReport) -> None:
        elapsed = self._clock() - start_time
        if elapsed < event.time:
            self._sleep(event.time - elapsed)
        else:
            report.max_lateness_us = max(report.max_lateness_us, elapsed - event.time)

        if event.has_data:
            data = event.data
        elif self.no_data_policy == NoDataPolicy.ZERO:
            data = 0
        else:
            logger.warning(
                "Skipping interrupt without data (irq %s) at %d us", event.irq, event.time
            )
            report.no_data_skipped += 1
            return

        self.session.send_interrupt(data)
        report.interrupts_sent += 1

    def _simulate_receive(self, index: int, event: Event, report: ListReport) -> None:
        data = self.session.receive_byte()
        report.bytes_received += 1

        if data == event.data:
            logger.debug("Received expected data %02x", data)
            return

        mismatch = DataMismatchWarning(index, event.data, data)
        logger.warning("Expected %02x, received %02x (%s)", event.data, data, event.type.value)
        report.mismatches.append(mismatch)


def _describe(section: Section | None) -> str:
    if section is None:
        return "event"
    return "initialization" if section == Section.INIT else "event"
