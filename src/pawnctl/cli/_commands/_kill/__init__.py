"""pawnctl kill command - force-stops every server process on the host."""

from typing import Annotated

from cyclopts import App, Parameter

from pawnctl.server import ServerManager

from .._context import RunContext
from .._shared import confirm_action

app = App(
    name="kill",
    help="Force kill all server processes",
    help_on_error=True,
)


@app.default
def kill(
    *,
    force: Annotated[
        bool,
        Parameter(name=["--force", "-f"], help="Skip the confirmation prompt."),
    ] = False,
) -> None:
    """Kill every open.mp and SA-MP server process on this machine.

    The tracked server state is cleared even when nothing was running.
    """
    ctx = RunContext.get_current()
    ctx.show_banner()

    if not confirm_action(
        "This will kill every server process on this machine.",
        force=force,
        console=ctx.console,
    ):
        ctx.reporter.info("Cancelled")
        return

    manager = ServerManager(ctx.project_root, reporter=ctx.reporter)
    killed = manager.kill_all()
    if killed:
        ctx.reporter.success(f"Killed: {', '.join(killed)}")
    else:
        ctx.reporter.info("No server processes found")
    ctx.reporter.detail("Cleared server state")
