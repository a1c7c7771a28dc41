"""Leveled console output for pawnctl commands.

The Reporter renders user-facing messages with Rich and mirrors them to an
optional structlog file logger. Verbosity is held on the instance so that
tests and commands never share process-wide output state.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, final

from rich.console import Console
from rich.style import Style
from rich.text import Text

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


class Verbosity(StrEnum):
    """Console verbosity levels.

    - QUIET: Only warnings and errors are printed
    - NORMAL: Regular progress output
    - VERBOSE: Adds routine and detail messages
    """

    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"


_LABEL_STYLES: dict[str, Style] = {
    "INFO": Style(color="blue"),
    "DETAIL": Style(color="cyan"),
    "SUCCESS": Style(color="green"),
    "WARN": Style(color="yellow"),
    "ERROR": Style(color="red"),
}


@final
class Reporter:
    """Writes leveled, colorized messages to the console.

    Attributes:
        verbosity: Current verbosity threshold.
    """

    __slots__ = ("_console", "_error_console", "_logger", "verbosity")

    def __init__(
        self,
        console: Console | None = None,
        error_console: Console | None = None,
        *,
        verbosity: Verbosity = Verbosity.NORMAL,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the reporter.

        Args:
            console: Console for regular output. Creates a stdout console if None.
            error_console: Console for errors. Creates a stderr console if None.
            verbosity: Verbosity threshold.
            logger: Optional structlog logger that receives every message.
        """
        self._console = console or Console()
        self._error_console = error_console or Console(stderr=True)
        self._logger = logger
        self.verbosity = verbosity

    @property
    def console(self) -> Console:
        """Return the console used for regular output."""
        return self._console

    @property
    def error_console(self) -> Console:
        return self._error_console

    @property
    def is_verbose(self) -> bool:
        return self.verbosity is Verbosity.VERBOSE

    @property
    def is_quiet(self) -> bool:
        return self.verbosity is Verbosity.QUIET

    def _emit(
        self,
        label: str | None,
        message: str | Text,
        *,
        error: bool = False,
    ) -> None:
        text = Text()
        if label is not None:
            _ = text.append(f"[{label}]", style=_LABEL_STYLES.get(label, Style()))
            _ = text.append(" ")
        _ = text.append(message)
        console = self._error_console if error else self._console
        console.print(text)

    def _log(self, method: str, message: str | Text, **fields: object) -> None:
        if self._logger is None:
            return
        plain = message.plain if isinstance(message, Text) else message
        getattr(self._logger, method)(plain, **fields)

    def plain(self, message: str | Text) -> None:
        """Print a message without a label (hidden when quiet)."""
        self._log("info", message)
        if not self.is_quiet:
            self._emit(None, message)

    def info(self, message: str) -> None:
        """Print an informational message (hidden when quiet)."""
        self._log("info", message)
        if not self.is_quiet:
            self._emit("INFO", message)

    def routine(self, message: str) -> None:
        """Print a routine progress message (verbose only)."""
        self._log("debug", message)
        if self.is_verbose:
            self._emit("INFO", message)

    def detail(self, message: str) -> None:
        """Print a diagnostic detail (verbose only)."""
        self._log("debug", message)
        if self.is_verbose:
            self._emit("DETAIL", message)

    def success(self, message: str) -> None:
        """Print a success message (hidden when quiet)."""
        self._log("info", message, outcome="success")
        if not self.is_quiet:
            self._emit("SUCCESS", message)

    def warn(self, message: str) -> None:
        """Print a warning. Always shown."""
        self._log("warning", message)
        self._emit("WARN", message)

    def error(self, message: str) -> None:
        """Print an error to the error console. Always shown."""
        self._log("error", message)
        self._emit("ERROR", message, error=True)

    def final_success(self, message: str) -> None:
        """Print a closing success line without a label."""
        self._log("info", message, outcome="success")
        if not self.is_quiet:
            self._console.print(Text(message, style=Style(color="green", bold=True)))

    def heading(self, message: str) -> None:
        if not self.is_quiet:
            self._console.print(Text(message, style=Style(bold=True)))
        self._log("info", message)

    def subheading(self, message: str) -> None:
        if not self.is_quiet:
            self._console.print(Text(message, style=Style(underline=True)))

    def key_value(self, key: str, value: str) -> None:
        """Print an aligned ``key: value`` pair."""
        self._log("info", f"{key}: {value}", key=key, value=value)
        if self.is_quiet:
            return
        text = Text("  ")
        _ = text.append(f"{key}:", style=Style(dim=True))
        _ = text.append(f" {value}")
        self._console.print(text)

    def newline(self) -> None:
        if not self.is_quiet:
            self._console.print()
