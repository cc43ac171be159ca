"""ps2emu CLI: a thin Typer wrapper over the record and replay libraries."""

from __future__ import annotations

import logging
import signal
import sys
from contextlib import nullcontext
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ps2emu import LOG_VERSION, __version__
from ps2emu.config import load_config
from ps2emu.errors import ChannelError, Ps2emuError

app = typer.Typer(
    name="ps2emu",
    help="Record PS/2 traffic from the i8042 driver and replay it on a virtual device.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _fail(error: Exception) -> typer.Exit:
    err_console.print(f"Error: {error}", markup=False, highlight=False, soft_wrap=True)
    return typer.Exit(1)


def _yes_no(value: Optional[str], option: str, default: bool) -> bool:
    if value is None:
        return default
    if value.lower() == "yes":
        return True
    if value.lower() == "no":
        return False
    raise typer.BadParameter(f"Invalid value for {option}: `{value}`")


def _configure_logging(level: int) -> None:
    # stderr only, so a recording written to stdout stays a clean log
    root = logging.getLogger("ps2emu")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(level)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    _configure_logging(logging.DEBUG if verbose else logging.INFO)


@app.command()
def version() -> None:
    """Show ps2emu version and supported log versions."""
    console.print(f"ps2emu {__version__} (log versions 0-{LOG_VERSION})")


@app.command()
def record(
    record_kbd: Optional[str] = typer.Option(
        None, "--record-kbd", metavar="<yes|no>",
        help="Record the KBD (keyboard) port, disabled by default",
    ),
    record_aux: Optional[str] = typer.Option(
        None, "--record-aux", metavar="<yes|no>",
        help="Record the AUX port (usually cursor devices), enabled by default",
    ),
    input_file: Optional[Path] = typer.Option(
        None, "--input", "-i", help="Read a saved kernel log instead of /dev/kmsg"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the log to a file"),
    log_version: Optional[int] = typer.Option(
        None, "--log-version", help=f"Log version to write (0-{LOG_VERSION})"
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Record all traffic going in and out of the PS/2 ports.

    Keyboard input is not recorded unless asked for, since it may contain
    passwords typed by the user.
    """
    from ps2emu.capture.i8042 import I8042Debugger
    from ps2emu.capture.recorder import KernelLogRecorder

    try:
        config = load_config(config_file)
        recorder = KernelLogRecorder(
            record_kbd=_yes_no(record_kbd, "--record-kbd", config.record_kbd),
            record_aux=_yes_no(record_aux, "--record-aux", config.record_aux),
            log_version=config.output_log_version if log_version is None else log_version,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except Ps2emuError as e:
        raise _fail(e)

    debugger = None
    start_time = None
    previous_handlers = {}
    if input_file is None:
        debugger = I8042Debugger(
            platform_dir=config.i8042_platform_dir,
            debug_param=config.i8042_debug_param,
            kmsg_path=config.kmsg_path,
        )
        try:
            start_time = debugger.enable()
        except ChannelError as e:
            err_console.print(f"Failed to enable i8042 debugging: {e}", markup=False, soft_wrap=True)
            raise typer.Exit(1)
        previous_handlers = _install_stop_handlers()

    source = input_file or config.kmsg_path
    try:
        with open(source, encoding="utf-8", errors="replace") as lines, (
            open(output, "w") if output else nullcontext(sys.stdout)
        ) as out:
            recorder.record(lines, out, start_time=start_time)
    except OSError as e:
        raise _fail(ChannelError(f"While recording from {source}: {e}"))
    except Ps2emuError as e:
        raise _fail(e)
    finally:
        if debugger is not None:
            debugger.disable()
        for signum, handler in previous_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)


def _install_stop_handlers() -> dict:
    """Stop recording cleanly on SIGINT, SIGTERM and SIGHUP."""

    def _stop(signum, frame):
        logger.info("Received signal %d, stopping", signum)
        raise typer.Exit(0)

    return {
        signum: signal.signal(signum, _stop)
        for signum in (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)
    }


@app.command()
def replay(
    log_file: Path = typer.Argument(..., help="Event log created with ps2emu record"),
    device: Optional[Path] = typer.Option(None, "--device", "-d", help="Virtual device path"),
    no_data_policy: Optional[str] = typer.Option(
        None, "--no-data-policy", help="Interrupts recorded without data: skip or zero"
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Replay a PS/2 device using any log created with ps2emu record."""
    from ps2emu.device.protocol import DeviceSession, FileDeviceChannel
    from ps2emu.log.reader import load_log
    from ps2emu.models.enums import NoDataPolicy
    from ps2emu.replay.engine import ReplayEngine

    try:
        config = load_config(config_file)
        policy = NoDataPolicy(no_data_policy) if no_data_policy else config.no_data_policy
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except Ps2emuError as e:
        raise _fail(e)

    device_path = device or config.device_path
    try:
        event_log = load_log(log_file)
        with FileDeviceChannel.open(device_path) as channel:
            session = DeviceSession(channel)
            session.start(config.port_type)
            engine = ReplayEngine(session, no_data_policy=policy)
            result = engine.replay(event_log)
    except Ps2emuError as e:
        raise _fail(e)

    console.print(f"[green]Replayed {result.events_replayed} events[/green]")
    if result.mismatch_count:
        console.print(f"[yellow]{result.mismatch_count} received bytes did not match the log[/yellow]")


@app.command()
def inspect(
    log_file: Path = typer.Argument(..., help="Event log to inspect"),
) -> None:
    """Parse a log and show its version and event counts."""
    from ps2emu.log.reader import load_log

    try:
        event_log = load_log(log_file)
    except Ps2emuError as e:
        raise _fail(e)

    console.print(f"\n[bold]{log_file.name}[/bold]  (log version {event_log.version})")
    for section, counts in event_log.type_counts().items():
        name = section.value if section is not None else "events"
        total = sum(counts.values())
        console.print(f"  [cyan]{name}[/cyan]: {total} events")
        for event_type, count in sorted(counts.items()):
            console.print(f"    {event_type.value}: {count}")


if __name__ == "__main__":
    app()
