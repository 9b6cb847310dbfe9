"""The ``hubauth`` command line.

``hubauth`` is the operator side of the library: it shows and edits the
GitHub settings a host application loads, prints the authorize URL, and can
run a full login against a loopback callback to prove an OAuth App
registration works.

:func:`main` is the console-script entry point. A
:class:`~hubauth.exceptions.HubauthError` that escapes a command ends the
process with that error's exit code; any other exception is written to a
crash log under :func:`~hubauth.settings.get_data_dir`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from hubauth import __version__
from hubauth.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="hubauth",
    help="Check and exercise GitHub OAuth2 login settings.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"hubauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Settings file (default: <config dir>/github.json)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Write data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Write data as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colours."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug messages and log records."
    ),
) -> None:
    """Set up output and logging, and remember the settings file for sub-commands."""
    from hubauth.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _route_package_logs(output.log_handler(), verbose)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _route_package_logs(handler: logging.Handler, verbose: bool) -> None:
    # One handler per process; repeated invocations (tests) replace it.
    package_logger = logging.getLogger("hubauth")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


def _register_commands() -> None:
    from hubauth.commands.config import config_app
    from hubauth.commands.login import authorize_url_command, login_command

    app.add_typer(config_app, name="config", help="Show, check and edit the GitHub settings.")
    app.command("authorize-url")(authorize_url_command)
    app.command("login")(login_command)


_register_commands()


def _install_sigint_handler() -> None:
    def _on_sigint(signum: int, frame: Any) -> None:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log() -> str:
    """Save the current traceback under ``<data dir>/logs`` and return its path."""
    from hubauth.settings import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(traceback.format_exc(), encoding="utf-8")
    return str(log_path)


def main() -> None:
    """Run the ``hubauth`` CLI.

    Raises:
        SystemExit: Always, with the command's exit code.
    """
    from hubauth.exceptions import HubauthError
    from hubauth.output import error

    _install_sigint_handler()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except HubauthError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
