"""The command-line interface for pawnctl."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

import os
import shlex
import sys
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from pawnctl import __version__
from pawnctl.utils import Verbosity, create_cli_logger

from ._commands import register_commands
from ._commands._context import RunContext
from ._commands._shared import exit_with_error

_HELP = "Pawn package manager and build tool for open.mp and SA-MP servers."


def _resolve_verbosity(*, verbose: bool, quiet: bool) -> Verbosity:
    if verbose:
        return Verbosity.VERBOSE
    if quiet:
        return Verbosity.QUIET
    return Verbosity.NORMAL


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Build the pawnctl application with its global options.

    Args:
        console: Console for regular output. Creates a stdout console if None.
        error_console: Console for errors. Creates a stderr console if None.
        exit_on_error: Whether cyclopts exits on parse errors.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="pawnctl",
        help=_HELP,
        version=__version__,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]  # noqa: PLR0913
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        verbose: Annotated[
            bool, Parameter(name=["--verbose", "-v"], help="Enable verbose output")
        ] = False,
        quiet: Annotated[
            bool,
            Parameter(name=["--quiet", "-q"], help="Suppress non-essential output"),
        ] = False,
        no_color: Annotated[
            bool, Parameter(name="--no-color", help="Disable colored output")
        ] = False,
        log_to_file: Annotated[
            bool, Parameter(name="--log-to-file", help="Write a structured log file")
        ] = False,
        project_root: Annotated[
            Path | None, Parameter(name="--project-root", help="Path to project root")
        ] = None,
    ) -> None:
        """Launch pawnctl with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            verbose: Enable verbose output with additional details.
            quiet: Suppress non-essential output.
            no_color: Disable colored output.
            log_to_file: Mirror output to the structured CLI log.
            project_root: Path to project root directory.
        """
        if verbose and quiet:
            exit_with_error(
                "--verbose and --quiet cannot be used together",
                console=error_console,
            )

        if no_color:
            console.no_color = True
            error_console.no_color = True

        cli_logger = None
        if log_to_file or os.environ.get("PAWNCTL_DEBUG"):
            cli_logger = create_cli_logger(command=shlex.join(sys.argv[1:]))
            cli_logger.info("cli_start", version=__version__)

        ctx = RunContext.create(
            console=console,
            error_console=error_console,
            verbosity=_resolve_verbosity(verbose=verbose, quiet=quiet),
            project_root=project_root,
            logger=cli_logger,
        )
        RunContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            RunContext.reset()

    register_commands(app)
    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `pawnctl` CLI."""
    app.meta()


if __name__ == "__main__":
    main()
