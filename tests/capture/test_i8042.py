"""Tests for the i8042 sysfs debug switch."""

import pytest

from ps2emu.capture.i8042 import I8042Debugger
from ps2emu.errors import ChannelError


@pytest.fixture
def sysfs(tmp_path):
    platform = tmp_path / "platform" / "i8042"
    for name in ("serio0", "serio1"):
        (platform / name).mkdir(parents=True)
        (platform / name / "drvctl").write_text("")
    (platform / "driver").mkdir()
    param = tmp_path / "debug"
    param.write_text("0\n")
    kmsg = tmp_path / "kmsg"
    kmsg.write_text("")
    return I8042Debugger(platform_dir=platform, debug_param=param, kmsg_path=kmsg)


def test_serio_ports(sysfs):
    assert [p.name for p in sysfs.serio_ports()] == ["serio0", "serio1"]


def test_enable(sysfs):
    start_time = sysfs.enable()
    assert sysfs.debug_param.read_text() == "1\n"
    assert sysfs.kmsg_path.read_text() == f"ps2emu: Start recording {start_time}\n"
    # Ports end up rescanned after being detached
    for port in sysfs.serio_ports():
        assert (port / "drvctl").read_text() == "rescan"


def test_disable(sysfs):
    sysfs.enable()
    assert sysfs.disable() is True
    assert sysfs.debug_param.read_text() == "0\n"


def test_enable_missing_platform_dir(tmp_path):
    debugger = I8042Debugger(platform_dir=tmp_path / "missing", debug_param=tmp_path / "debug")
    with pytest.raises(ChannelError, match="missing"):
        debugger.enable()


def test_disable_failure_is_not_raised(tmp_path):
    debugger = I8042Debugger(debug_param=tmp_path / "no" / "such" / "param")
    assert debugger.disable() is False


def test_enable_failure_rescans_ports(sysfs, tmp_path):
    sysfs.debug_param = tmp_path / "no" / "debug"
    with pytest.raises(ChannelError, match="no/debug"):
        sysfs.enable()
    # Devices must not stay detached when debugging could not be enabled
    for port in sysfs.serio_ports():
        assert (port / "drvctl").read_text() == "rescan"


def test_enable_failure_turns_debug_off(sysfs, tmp_path):
    sysfs.kmsg_path = tmp_path / "no" / "kmsg"
    sysfs.debug_param.write_text("1\n")
    with pytest.raises(ChannelError):
        sysfs.enable()
    assert sysfs.debug_param.read_text() == "0\n"
    assert (sysfs.platform_dir / "serio1" / "drvctl").read_text() == "rescan"
