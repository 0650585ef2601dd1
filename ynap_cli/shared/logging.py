"""Rich-based logging helpers shared across CLI tools."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.theme import Theme
from rich.traceback import install

install(show_locals=False)

_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "success": "bold green",
        "debug": "dim",
    }
)

# Converted CSV may go to stdout, so every log message goes to stderr; stdout
# is written with click.echo by the commands themselves.
#
# Highlighting is off so payee text such as "REWE Markt 4711" is printed without
# ANSI sequences around the digits; tests compare that text verbatim.
_stderr_console = Console(stderr=True, theme=_THEME, highlight=False, soft_wrap=True)


@dataclass(slots=True)
class Logger:
    """Lightweight logger facade backed by a Rich stderr console.

    ``warning_count`` lets a command report how many non-fatal problems (such as
    ambiguous payee aliases) were seen during a run.
    """

    verbose: bool = False
    warning_count: int = 0

    def info(self, message: str) -> None:
        _stderr_console.print(message, style="info", markup=False)

    def success(self, message: str) -> None:
        _stderr_console.print(message, style="success", markup=False)

    def warning(self, message: str) -> None:
        self.warning_count += 1
        _stderr_console.print(message, style="warning", markup=False)

    def debug(self, message: str) -> None:
        if self.verbose:
            _stderr_console.print(message, style="debug", markup=False)


def get_logger(verbose: bool = False) -> Logger:
    """Return a configured Logger instance."""
    return Logger(verbose=verbose)
