"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Messages go to stdout; diagnostics go to stderr. Supports verbosity levels
and the --no-color flag.
"""

import json
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.markup import escape

from prosemark.binder.models import Diagnostic


def sanitize_path(value: str) -> str:
    """Replace control characters (below U+0020, and U+007F) with '?'.

    Applied to paths before they are echoed so file names cannot inject
    terminal escape sequences.
    """
    return ''.join('?' if ord(c) < 0x20 or ord(c) == 0x7F else c for c in value)


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console for regular output (stdout)
        err_console: Rich Console for diagnostics (stderr)

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Created chapter.md in _binder.md")
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.no_color = no_color
        self.console = Console(no_color=no_color, highlight=False, soft_wrap=True)
        self.err_console = Console(stderr=True, no_color=no_color, highlight=False, soft_wrap=True)

    def success(self, message: str) -> None:
        """Display success message in green.

        Args:
            message: Success message to display
        """
        self.console.print(f"[green]{escape(message)}[/green]")

    def error(self, message: str) -> None:
        """Display error message in red on stderr.

        Args:
            message: Error message to display
        """
        self.err_console.print(f"[red]error:[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        """Display warning message in yellow on stderr.

        Args:
            message: Warning message to display
        """
        self.err_console.print(f"[yellow]warning:[/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(escape(message))

    def print_diagnostics(self, diagnostics: List[Diagnostic]) -> None:
        """Print diagnostics to stderr as "<severity>: <message> (<code>)"."""
        for d in diagnostics:
            color = "red" if d.is_error else "yellow"
            self.err_console.print(
                f"[{color}]{d.severity}:[/{color}] {escape(d.message)} ({d.code})"
            )

    def print_json(self, payload: Dict[str, Any]) -> None:
        """Write a JSON document to stdout, unstyled."""
        typer.echo(json.dumps(payload))
