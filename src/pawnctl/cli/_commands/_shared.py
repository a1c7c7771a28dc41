"""Shared CLI utilities for commands.

- Standardized exit codes
- Console utilities for error handling and confirmation
- Running async command bodies
"""

import sys
from collections.abc import Callable, Coroutine
from enum import IntEnum
from typing import TYPE_CHECKING, Never

import anyio
from rich.text import Text

if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "ExitCode",
    "confirm_action",
    "exit_with_code",
    "exit_with_error",
    "get_error_console",
    "run_async",
]


class ExitCode(IntEnum):
    """Standard exit codes for pawnctl commands."""

    SUCCESS = 0
    ERROR = 1
    INTERRUPTED = 130


def get_error_console() -> "Console":
    """Get a Rich console configured for error output to stderr."""
    from rich.console import Console  # noqa: PLC0415

    return Console(stderr=True)


def confirm_action(message: str, *, force: bool, console: "Console") -> bool:
    """Ask the user to confirm a destructive operation.

    Args:
        message: Warning shown before the prompt.
        force: If True, skip confirmation and proceed.
        console: Rich console for the prompt.

    Returns:
        True if the operation should proceed, False otherwise.
    """
    if force:
        return True

    # Non-interactive mode requires explicit --force
    if not sys.stdin.isatty():
        return False

    try:
        console.print(f"[yellow]{message}[/yellow]")
        response = console.input("[bold]Confirm (y/N): [/bold]")
    except (EOFError, KeyboardInterrupt):
        return False
    return response.strip().lower() in ("y", "yes")


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.ERROR,
    *,
    console: "Console | None" = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use (defaults to ERROR).
        console: Optional Rich console for output. If not provided,
            a new stderr console will be created.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(Text.assemble(("Error:", "red"), f" {message}"))
    raise SystemExit(code)


def exit_with_code(code: int) -> None:
    """Raise SystemExit for a non-zero code; return normally for zero."""
    if code != ExitCode.SUCCESS:
        raise SystemExit(code)


def run_async[T](func: Callable[[], Coroutine[object, object, T]]) -> T:
    """Run an async command body on the asyncio backend."""
    return anyio.run(func)
