"""pawnctl stop command - stops the tracked server."""

from functools import partial
from typing import Annotated

from cyclopts import App, Parameter

from pawnctl.server import ServerManager

from .._context import RunContext
from .._shared import run_async

app = App(
    name="stop",
    help="Stop the server started by pawnctl",
    help_on_error=True,
)


@app.default
def stop(
    *,
    force: Annotated[
        bool,
        Parameter(name=["--force", "-f"], help="Kill instead of asking to exit."),
    ] = False,
) -> None:
    """Stop the server recorded in the pawnctl state file."""
    ctx = RunContext.get_current()
    ctx.show_banner()

    manager = ServerManager(ctx.project_root, reporter=ctx.reporter)
    outcome = run_async(partial(manager.stop_tracked, force=force))

    if not outcome.was_running:
        ctx.reporter.info("No server is running")
        if outcome.pid is not None:
            ctx.reporter.detail(f"Cleared stale state for pid {outcome.pid}")
        return

    if outcome.stopped:
        ctx.reporter.success(f"Server stopped (pid {outcome.pid})")
    else:
        ctx.reporter.warn(
            f"Server (pid {outcome.pid}) may still be running; "
            "try 'pawnctl stop --force' or 'pawnctl kill'"
        )
