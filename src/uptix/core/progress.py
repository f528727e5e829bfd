"""User-facing progress feedback for CLI operations.

Design principles:
- Results go to stdout, status and diagnostics go to stderr
- Single line updates, no spam
- Graceful degradation in non-TTY (CI, pipes)
- Suppress structlog console output while a spinner is live

Usage::

    from uptix.core.progress import status, spinner

    status("Found 3 nix files")
    status("Wrote uptix.lock", style="success")  # ✓ Wrote uptix.lock
    status("Registry unreachable", style="error")  # ✗ Registry unreachable

    with spinner("Resolving postgres:15"):
        do_work()
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

_console = Console(stderr=True)
_out = Console()

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "",
    "none": "",
}

_suppress_console_logs = threading.local()


def is_console_suppressed() -> bool:
    """Check if console logging is currently suppressed."""
    return getattr(_suppress_console_logs, "active", False)


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Pause structlog console output; file handlers keep receiving logs."""
    _suppress_console_logs.active = True
    try:
        yield
    finally:
        _suppress_console_logs.active = False


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from uptix.core.logging import get_logger

    return get_logger("progress")


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def echo(message: str = "", *, style: str | None = None) -> None:
    """Print a result line to stdout."""
    _out.print(escape(message), style=style, highlight=False, soft_wrap=True)


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{escape(message)}", highlight=False, soft_wrap=True)

    _get_logger().debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Examples:
        pluralize(1, "file") -> "1 file"
        pluralize(3, "dependency", "dependencies") -> "3 dependencies"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


@contextmanager
def spinner(message: str, *, indent: int = 0) -> Iterator[None]:
    """Context manager for a spinner with log suppression.

    Usage::

        with spinner("Resolving 3 dependencies"):
            do_work()
    """
    padding = " " * indent
    if _is_tty():
        with (
            suppress_console_logs(),
            _console.status(f"{padding}[cyan]{escape(message)}[/cyan]", spinner="dots"),
        ):
            yield
    else:
        _console.print(f"{padding}{escape(message)}...", highlight=False, soft_wrap=True)
        yield
