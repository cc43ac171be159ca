"""Tests for the kernel log recorder."""

import io
import logging

import pytest

from ps2emu.capture.parser import StartMarker
from ps2emu.capture.recorder import KernelLogRecorder
from ps2emu.errors import InputFormatError, NoEventsError
from ps2emu.log.reader import read_log
from ps2emu.models.enums import EventType, Section
from ps2emu.models.event import Event

START = 889317218


def _record(path, start_time=START, **kwargs) -> str:
    out = io.StringIO()
    recorder = KernelLogRecorder(**kwargs)
    with open(path) as lines:
        recorder.record(lines, out, start_time=start_time)
    return out.getvalue()


class TestKernelLogRecorder:
    def test_default_records_aux_only(self, kmsg_path):
        output = _record(kmsg_path)
        assert output.splitlines() == [
            "# ps2emu-record V1",
            "S: main",
            "E: 0 command d4",
            "E: 10 parameter f4",
            "E: 100 interrupt fa 1 12",
            "E: 300 interrupt - - 12",
            "E: 400 interrupt 08 1 12",
        ]

    def test_keyboard_only(self, kmsg_path):
        output = _record(kmsg_path, record_kbd=True, record_aux=False)
        assert output.splitlines()[2:] == [
            "E: 0 interrupt 1c 0 1",
            "E: 10 kbd-data 1c",
        ]

    def test_without_start_marker_reads_everything(self, kmsg_path):
        output = _record(kmsg_path, start_time=None)
        lines = output.splitlines()
        assert lines[2] == "E: 0 command f5"
        assert lines[3] == "E: 1900 command d4"

    def test_legacy_output_version(self, kmsg_path):
        output = _record(kmsg_path, log_version=0)
        lines = output.splitlines()
        assert lines[0] == "# ps2emu-record V0"
        assert lines[1] == "0 command d4"

    def test_output_reads_back(self, kmsg_path):
        log = read_log(io.StringIO(_record(kmsg_path)))
        assert log.init_events == []
        assert [e.type for e in log.main_events] == [
            EventType.COMMAND,
            EventType.PARAMETER,
            EventType.INTERRUPT,
            EventType.INTERRUPT,
            EventType.INTERRUPT,
        ]
        assert log.lists()[1][0] == Section.MAIN

    def test_missing_start_marker_raises(self, kmsg_path):
        with pytest.raises(NoEventsError):
            _record(kmsg_path, start_time=1)

    def test_malformed_interrupt_aborts(self):
        lines = ["i8042: [1] 1c -> i8042 (interrupt,abc,5)\n"]
        with pytest.raises(InputFormatError):
            KernelLogRecorder().record(lines, io.StringIO())

    def test_time_going_backwards_keeps_relative_timing(self, caplog):
        lines = [
            "i8042: [5000] d4 -> i8042 (command)\n",
            "i8042: [100] f4 -> i8042 (parameter)\n",
            "i8042: [150] fa <- i8042 (interrupt,1,12)\n",
        ]
        out = io.StringIO()
        with caplog.at_level(logging.WARNING, logger="ps2emu.capture.recorder"):
            KernelLogRecorder().record(lines, out)
        assert out.getvalue().splitlines()[2:] == [
            "E: 0 command d4",
            "E: 0 parameter f4",
            "E: 50 interrupt fa 1 12",
        ]
        assert "line 2: time 100 is before the previous event" in caplog.text

    def test_returns_count(self, kmsg_path):
        with open(kmsg_path) as lines:
            assert KernelLogRecorder().record(lines, io.StringIO(), start_time=START) == 5

    def test_nothing_to_record(self):
        with pytest.raises(ValueError, match="Nothing to record"):
            KernelLogRecorder(record_kbd=False, record_aux=False)

    def test_unsupported_output_version(self):
        with pytest.raises(ValueError):
            KernelLogRecorder(log_version=2)


class TestMessages:
    def test_messages_in_order(self, kmsg_path):
        with open(kmsg_path) as lines:
            messages = list(KernelLogRecorder().messages(lines))
        # The (flush, kbd) trace line is noise and yields nothing
        assert [
            "marker" if isinstance(m, StartMarker) else f"{m.type.value}@{m.time}"
            for m in messages
        ] == [
            "command@100",
            "marker",
            "command@2000",
            "parameter@2010",
            "interrupt@2100",
            "interrupt@2200",
            "kbd-data@2210",
            "interrupt@2300",
            "interrupt@2400",
        ]
        assert messages[1].time == START

    def test_seek_start_consumes_marker(self, kmsg_path):
        recorder = KernelLogRecorder()
        with open(kmsg_path) as lines:
            messages = recorder.messages(lines)
            recorder.seek_start(messages, START)
            first = next(messages)
        assert first.time == 2000


class TestPortFilter:
    @pytest.mark.parametrize(
        "event,kbd_only,aux_only",
        [
            (Event(type=EventType.KBD_DATA, time=0, data=0x1C), True, False),
            (Event(type=EventType.INTERRUPT, time=0, data=0x1C, port=0, irq=1), True, False),
            (Event(type=EventType.INTERRUPT, time=0, data=0x08, port=1, irq=12), False, True),
            (Event(type=EventType.INTERRUPT, time=0, irq=12), False, True),
            (Event(type=EventType.COMMAND, time=0, data=0xF4), False, True),
            (Event(type=EventType.RETURN, time=0, data=0xFA), False, True),
        ],
    )
    def test_wants(self, event, kbd_only, aux_only):
        assert KernelLogRecorder(record_kbd=True, record_aux=False).wants(event) is kbd_only
        assert KernelLogRecorder(record_kbd=False, record_aux=True).wants(event) is aux_only
        assert KernelLogRecorder(record_kbd=True, record_aux=True).wants(event) is True
