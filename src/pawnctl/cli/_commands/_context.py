# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""Per-invocation CLI context.

RunContext carries everything a command needs from the global options:
the reporter, verbosity, the project root, user preferences and whether
the banner has been shown. It is set once by the meta app and read by
commands through a context variable, so nothing lives in module globals.
"""

import contextvars
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.style import Style
from rich.text import Text

from pawnctl import __version__
from pawnctl.config import Manifest, Preferences, load_manifest, load_preferences
from pawnctl.exceptions import ManifestError
from pawnctl.utils import Reporter, Verbosity, find_project_root

from ._shared import exit_with_error

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

BANNER = "pawnctl - Pawn package manager and build tool"

_current_run_context: contextvars.ContextVar["RunContext | None"] = (
    contextvars.ContextVar("run_context", default=None)
)


@dataclass(slots=True)
class RunContext:
    """State shared by the commands of one CLI invocation.

    Attributes:
        reporter: Leveled console output.
        project_root: Resolved project root.
        preferences: User preferences.
        logger: Structured file logger, when file logging is enabled.
        banner_shown: Whether the banner was already printed.
    """

    reporter: Reporter
    project_root: Path
    preferences: Preferences = field(default_factory=Preferences)
    logger: "FilteringBoundLogger | None" = field(default=None, repr=False)
    banner_shown: bool = False

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        *,
        console: Console | None = None,
        error_console: Console | None = None,
        verbosity: Verbosity = Verbosity.NORMAL,
        project_root: Path | None = None,
        preferences: Preferences | None = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> "RunContext":
        """Build a context, resolving the project root and preferences."""
        reporter = Reporter(
            console, error_console, verbosity=verbosity, logger=logger
        )
        return cls(
            reporter=reporter,
            project_root=(
                project_root.resolve()
                if project_root is not None
                else find_project_root()
            ),
            preferences=preferences if preferences is not None else load_preferences(),
            logger=logger,
        )

    @property
    def verbosity(self) -> Verbosity:
        return self.reporter.verbosity

    @property
    def console(self) -> Console:
        return self.reporter.console

    @property
    def error_console(self) -> Console:
        return self.reporter.error_console

    def show_banner(self) -> None:
        """Print the banner the first time it is requested."""
        if self.banner_shown:
            return
        self.banner_shown = True
        if self.reporter.is_quiet:
            return
        text = Text(BANNER, style=Style(color="cyan", bold=True))
        _ = text.append(f" v{__version__}", style=Style(dim=True))
        self.console.print(text)
        self.console.print()

    @classmethod
    def get_current(cls) -> "RunContext":
        """Get the active context, or create a default one if none is set."""
        ctx = _current_run_context.get()
        if ctx is not None:
            return ctx
        ctx = cls.create()
        _current_run_context.set(ctx)
        return ctx

    @classmethod
    def set_current(cls, ctx: "RunContext") -> None:
        _current_run_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to no context. Primarily useful between tests."""
        _current_run_context.set(None)

    def require_manifest(self, reason: str | None = None) -> Manifest:
        """Load the project manifest, exiting with an error if there is none.

        Args:
            reason: Replaces the default message for a missing manifest.
        """
        try:
            manifest = load_manifest(self.project_root)
        except ManifestError as e:
            exit_with_error(str(e), console=self.error_console)
        if manifest is None:
            exit_with_error(
                reason
                or (
                    f"No pawn.json found in {self.project_root}. "
                    "Run pawnctl from a project directory or pass --project-root"
                ),
                console=self.error_console,
            )
        return manifest
