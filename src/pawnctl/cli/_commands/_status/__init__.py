"""pawnctl status command."""

import pendulum
from cyclopts import App

from pawnctl.process import ServerStateStore

from .._context import RunContext

app = App(
    name="status",
    help="Show the tracked server",
    help_on_error=True,
)


def _format_start_time(value: str) -> str:
    try:
        started = pendulum.parse(value)
    except ValueError:
        return value
    if not isinstance(started, pendulum.DateTime):
        return value
    local = started.in_tz(pendulum.local_timezone())
    return f"{local.to_datetime_string()} ({started.diff_for_humans()})"


@app.default
def status() -> None:
    """Show whether the server started by pawnctl is running."""
    ctx = RunContext.get_current()
    reporter = ctx.reporter

    store = ServerStateStore(reporter=reporter)
    state = store.load()
    if state.is_empty:
        reporter.info("No server is running")
        return

    if not store.is_running():
        reporter.info(f"No server is running (stale pid {state.pid})")
        return

    reporter.heading("Server running")
    reporter.key_value("PID", str(state.pid))
    if state.server_path:
        reporter.key_value("Executable", state.server_path)
    if state.start_time:
        reporter.key_value("Started", _format_start_time(state.start_time))
    reporter.key_value("Arguments", " ".join(state.arguments) or "(none)")
    reporter.key_value("Mode", "window" if state.window_mode else "inline")
