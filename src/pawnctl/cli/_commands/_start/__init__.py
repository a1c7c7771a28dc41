# pyright: reportUnusedCallResult=false
"""pawnctl start command - runs the open.mp server."""

from functools import partial
from typing import Annotated

from cyclopts import App, Parameter

from pawnctl.build import build_project
from pawnctl.config import Manifest
from pawnctl.exceptions import PawnctlError, TerminalNotFoundError
from pawnctl.server import ServerManager, StartOptions

from .._context import RunContext
from .._shared import ExitCode, exit_with_code, exit_with_error, run_async

app = App(
    name="start",
    help="Start the open.mp server",
    help_on_error=True,
)


async def _rebuild(ctx: RunContext, manifest: Manifest) -> bool:
    result = await build_project(manifest, ctx.project_root, reporter=ctx.reporter)
    return result.success


@app.default
def start(  # noqa: PLR0913
    *,
    config: Annotated[
        str | None,
        Parameter(name=["--config", "-c"], help="Server config file to use."),
    ] = None,
    debug: Annotated[
        bool,
        Parameter(help="Start the server with debug output."),
    ] = False,
    existing: Annotated[
        bool,
        Parameter(help="Attach to an already running server."),
    ] = False,
    window: Annotated[
        bool,
        Parameter(help="Launch the server in a new terminal window."),
    ] = False,
    watch: Annotated[
        bool,
        Parameter(help="Rebuild and restart the server when sources change."),
    ] = False,
) -> None:
    """Start the open.mp server.

    By default the server runs inline and its output is reformatted in this
    terminal until it exits or Ctrl+C is pressed. With --window it runs
    detached in its own window instead. --watch implies inline mode.
    """
    ctx = RunContext.get_current()
    ctx.show_banner()

    options = StartOptions(
        config=config,
        debug=debug,
        existing=existing,
        window=(window or ctx.preferences.window_mode) and not watch,
        watch=watch,
    )

    builder = None
    if watch:
        builder = partial(
            _rebuild,
            ctx,
            ctx.require_manifest(
                f"Watch mode needs a pawn.json in {ctx.project_root} to rebuild from"
            ),
        )

    manager = ServerManager(ctx.project_root, reporter=ctx.reporter)
    try:
        code = run_async(partial(manager.start, options, builder=builder))
    except TerminalNotFoundError as e:
        ctx.reporter.info(f"Run: {e.manual_command}")
        exit_with_error(str(e), console=ctx.error_console)
    except PawnctlError as e:
        exit_with_error(str(e), console=ctx.error_console)
    except KeyboardInterrupt:
        # Reached where the event loop cannot receive signals (Windows)
        manager.abort()
        ctx.reporter.info("Server stopped")
        code = ExitCode.SUCCESS

    exit_with_code(code)
