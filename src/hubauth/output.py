"""Terminal output for the ``hubauth`` CLI.

Data a caller may want to capture (settings tables, authorize URLs, the
identity from ``hubauth login``) is written to **stdout**. Everything else,
including status lines, warnings, errors, hints and log records, goes to
**stderr**, so ``hubauth authorize-url ... | xclip`` copies only the URL.

Three formats are supported. ``rich`` is used on an interactive terminal,
``plain`` (tab-separated) when piped, and ``json`` on request. Colour is
disabled by ``--no-color``, ``NO_COLOR`` or ``TERM=dumb``.

:func:`~hubauth.app.main_callback` builds one :class:`OutputManager` per
invocation and installs it with :func:`set_output`; commands call the
module-level helpers (:func:`info`, :func:`error`, ...).
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Output format requested on the command line.

    ``AUTO`` becomes ``RICH`` on a colour-capable TTY and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Holds the output preferences of one CLI invocation.

    Args:
        format: Requested format; ``AUTO`` is resolved on construction.
        no_color: Turn off colour and Rich markup.
        quiet: Drop informational stderr lines (warnings and errors stay).
        verbose: Show debug lines and DEBUG log records.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    def log_handler(self) -> logging.Handler:
        """Return a handler that renders ``hubauth`` log records on stderr.

        The handler passes DEBUG records when ``--verbose`` is active and
        WARNING and above otherwise.
        """
        handler = RichHandler(
            console=self._stderr,
            show_time=False,
            show_path=self._verbose,
            markup=False,
        )
        handler.setLevel(logging.DEBUG if self._verbose else logging.WARNING)
        return handler

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Write a dict, list or scalar to stdout in the active format."""
        if self._format == OutputFormat.JSON:
            if isinstance(data, str):
                self.print_data(data)
            else:
                self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            rendered = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(rendered, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data), soft_wrap=True)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows to stdout.

        JSON mode emits a list of objects keyed by *headers*; plain mode
        emits a header line and one tab-separated line per row. *title* is
        only shown in rich mode.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # --- stderr ---

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def suggest(self, message: str) -> None:
        """Print a next-step hint such as the command that fixes an error."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {message}[/dim]")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")

    def _diagnostic(self, plain: str, styled: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(styled)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{'' if value is None else value}" for key, value in data.items()]
    if isinstance(data, list):
        return [str(item) for item in data]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to any value or ``TERM`` is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- Global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
