"""Typer application and CLI entry point for speccode.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``list``, ``code``, ``upload``, ``update``,
``init``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands and
invokes the Typer app. :class:`~speccode.exceptions.SpeccodeError` ends the
process with its exit code; any other exception is written to a crash log
under the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from speccode import __version__
from speccode.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="speccode",
    help="Browse API specifications and keep generated code in sync.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

_registered = False


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"speccode {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    api_uri: Optional[str] = typer.Option(
        None, "--api-uri", help="Override the service URI of the profile."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Print write requests and file updates instead of performing them.",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~speccode.output.OutputManager`, configures
    logging, and stores the shared options in ``ctx.obj`` for sub-commands.
    Other keys already present in ``ctx.obj`` are left untouched.
    """
    from speccode.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    if verbose:
        configure_logging(no_color=no_color)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["api_uri"] = api_uri
    ctx.obj["dry_run"] = dry_run
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _configured_format() -> Any:
    """``output.format`` from the global config, or AUTO if unset or unusable."""
    from speccode.config import load_global_config
    from speccode.exceptions import ConfigError
    from speccode.output import OutputFormat

    try:
        return OutputFormat(load_global_config().output.format)
    except (ConfigError, ValueError):
        return OutputFormat.AUTO


def configure_logging(no_color: bool = False) -> None:
    """Send ``speccode.*`` debug records to stderr through Rich."""
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("speccode")
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_path=False,
        markup=False,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def register_commands() -> None:
    """Attach the built-in sub-commands to :data:`app` (once)."""
    global _registered
    if _registered:
        return

    from speccode.commands.code import code_command
    from speccode.commands.config import config_app
    from speccode.commands.init import init_command
    from speccode.commands.listing import list_app
    from speccode.commands.update import update_command
    from speccode.commands.upload import upload_command

    app.add_typer(list_app, name="list", help="List organizations, applications and versions.")
    app.command("code")(code_command)
    app.command("upload")(upload_command)
    app.command("update")(update_command)
    app.command("init")(init_command)
    app.add_typer(config_app, name="config", help="Configuration management.")
    _registered = True


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from speccode.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(f"{exc!r}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``speccode`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from speccode.exceptions import SpeccodeError
        from speccode.output import error

        if isinstance(exc, SpeccodeError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
