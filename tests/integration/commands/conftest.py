from collections.abc import Callable
from pathlib import Path

import orjson
import pytest
from rich.console import Console

from pawnctl.cli import create_app


@pytest.fixture
def pawnctl_cli(console: Console) -> Callable[..., None]:
    """Create CLI app for testing.

    Returns a callable that runs the CLI and suppresses SystemExit.
    Use pawnctl_cli_with_exit_code when you need to check the exit code.
    """

    app = create_app(console=console, error_console=console)

    def _run(*args: str) -> None:
        """Run CLI app and suppress SystemExit from cyclopts."""

        try:
            app.meta(list(args))
        except SystemExit:
            pass

    return _run


@pytest.fixture
def pawnctl_cli_with_exit_code(console: Console) -> Callable[..., int]:
    """Create CLI app for testing that returns the exit code.

    Use this fixture when tests need to verify the exit code.
    """

    app = create_app(console=console, error_console=console)

    def _run(*args: str) -> int:
        """Run CLI app and return exit code (0 if no SystemExit)."""

        try:
            app.meta(list(args))
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 1
        else:
            return 0

    return _run


@pytest.fixture
def use_fake_controller(
    fake_controller: object, monkeypatch: pytest.MonkeyPatch
) -> object:
    """Route every server and state lookup through the fake controller.

    Build commands keep the real controller so fake compilers actually run.
    """
    for target in (
        "pawnctl.server._manager.get_process_controller",
        "pawnctl.process._state.get_process_controller",
    ):
        monkeypatch.setattr(target, lambda: fake_controller)
    monkeypatch.setattr("pawnctl.server._manager.STOP_SETTLE_DELAY", 0)
    monkeypatch.setattr("pawnctl.server._manager.WINDOW_DISCOVERY_DELAY", 0)
    return fake_controller


@pytest.fixture
def track_server(state_file: Path) -> Callable[..., None]:
    """Return a function that records a tracked server in the state file."""

    def _track(pid: int, **fields: object) -> None:
        data = {
            "pid": pid,
            "serverPath": "/srv/omp-server",
            "startTime": "2024-05-01T10:00:00Z",
            **fields,
        }
        state_file.write_bytes(orjson.dumps(data))

    return _track
