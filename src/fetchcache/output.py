"""Diagnostics and result rendering with strict stdout/stderr discipline.

* **stderr** -- every diagnostic the library emits (cache decisions, retry
  notices, stale fallbacks, failed writes). Nothing the resolver does ever
  writes to stdout.
* **stdout** -- only :meth:`OutputManager.format_result`, which application
  code calls explicitly to print a resolved value.
* **Colour control** -- respects ``NO_COLOR`` and ``TERM=dumb``.

The module exposes two layers:

1. :class:`OutputManager` -- holds format preferences, Rich consoles and
   quiet/verbose flags. Applications create one and install it via
   :func:`set_output`; a quiet-by-default instance is created lazily
   otherwise.
2. Module-level convenience functions (:func:`debug`, :func:`info`,
   :func:`warning`, :func:`error`) that delegate to the global instance so
   library code does not need to pass the manager around.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from fetchcache.models import ResolutionResult


class OutputFormat(str, Enum):
    """Formats accepted by :meth:`OutputManager.format_result`.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and
    colour is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central sink for library diagnostics.

    Args:
        format: Format used by :meth:`format_result`.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages. Warnings and errors are
            still shown.
        verbose: Show debug messages (every cache decision).
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

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Results (stdout)
    # ------------------------------------------------------------------ #

    def format_result(self, result: ResolutionResult) -> None:
        """Print a resolution result to stdout in the active format.

        * **JSON** -- the dict from :meth:`ResolutionResult.to_dict`.
        * **Plain** -- ``field<TAB>value`` lines.
        * **Rich** -- a two-column table followed by the highlighted value.
        """
        data = result.to_dict()
        if self._format == OutputFormat.JSON:
            print(_dumps(data), file=sys.stdout, flush=True)
            return

        error = data["error"]
        rows = [
            ["source", data["source"]],
            ["version", "" if data["version"] is None else str(data["version"])],
            ["stale", str(data["stale"]).lower()],
            ["persisted", "" if data["persisted"] is None else str(data["persisted"]).lower()],
            ["error", "" if error is None else f"{error['kind']}: {error['message']}"],
        ]

        if self._format == OutputFormat.PLAIN:
            for field, value in rows:
                print(f"{field}\t{value}", file=sys.stdout, flush=True)
            print(f"value\t{_dumps(data['value'], indent=None)}", file=sys.stdout, flush=True)
            return

        table = Table(show_header=False, box=None)
        table.add_column(style="bold cyan")
        table.add_column()
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)
        self._stdout.print(Syntax(_dumps(data["value"]), "json", theme="monokai", word_wrap=True))

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed when quiet."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(message)

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. NOT suppressed when quiet."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when verbose."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim][debug] {message}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _dumps(data: object, indent: Optional[int] = 2) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager` instance.

    The lazily created default is quiet; warnings and errors are still
    shown.
    """
    global _output
    if _output is None:
        _output = OutputManager(quiet=True)
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def format_result(result: ResolutionResult) -> None:
    """Print *result* to stdout via the global :class:`OutputManager`."""
    get_output().format_result(result)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
