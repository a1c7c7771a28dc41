"""pawnctl CLI commands."""

from typing import TYPE_CHECKING

from ._build import app as build_app
from ._config import app as config_app
from ._context import RunContext
from ._kill import app as kill_app
from ._run import app as run_app
from ._shared import ExitCode, exit_with_error, get_error_console
from ._start import app as start_app
from ._status import app as status_app
from ._stop import app as stop_app

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "COMMANDS",
    "ExitCode",
    "RunContext",
    "build_app",
    "config_app",
    "exit_with_error",
    "get_error_console",
    "kill_app",
    "register_commands",
    "run_app",
    "start_app",
    "status_app",
    "stop_app",
]

COMMANDS: tuple["App", ...] = (
    start_app,
    build_app,
    stop_app,
    kill_app,
    status_app,
    run_app,
    config_app,
)
"""Every top-level command, in help order."""


def register_commands(app: "App") -> None:
    for command in COMMANDS:
        app.command(command)
