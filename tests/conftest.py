"""Shared test fixtures for pawnctl tests."""

import stat
import sys
from collections.abc import Callable, Generator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
import pytest
from rich.console import Console

from pawnctl.cli import RunContext
from pawnctl.process import WindowLaunch

if TYPE_CHECKING:
    import anyio.abc

WriteExecutable = Callable[[Path, str], Path]


@dataclass(frozen=True, slots=True)
class PawnProject:
    """Paths for a pawnctl test project."""

    root: Path
    manifest: Path
    gamemodes_dir: Path
    entry: Path


@pytest.fixture(autouse=True)
def pawnctl_home(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point the per-user pawnctl directory at a temporary folder."""
    home = tmp_path_factory.mktemp("pawnctl_home")
    monkeypatch.setenv("PAWNCTL_HOME", str(home))
    monkeypatch.delenv("PAWNCTL_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("PAWNCTL_DEBUG", raising=False)
    monkeypatch.delenv("PAWNCTL_LOG_LEVEL", raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_run_context() -> Generator[None]:
    yield
    RunContext.reset()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture
def state_file(pawnctl_home: Path) -> Path:
    return pawnctl_home / "server-state.json"


@pytest.fixture
def pawn_project(tmp_path: Path) -> PawnProject:
    """Create a project with a manifest and one gamemode source.

    Structure:
        tmp_path/
            project/
                pawn.json
                gamemodes/
                    main.pwn
    """
    root = tmp_path / "project"
    gamemodes_dir = root / "gamemodes"
    gamemodes_dir.mkdir(parents=True)

    entry = gamemodes_dir / "main.pwn"
    entry.write_text("main() {}\n")

    manifest = root / "pawn.json"
    manifest.write_bytes(
        orjson.dumps(
            {
                "name": "test-gamemode",
                "version": "1.0.0",
                "entry": "gamemodes/main.pwn",
                "output": "gamemodes/main.amx",
            }
        )
    )
    return PawnProject(
        root=root, manifest=manifest, gamemodes_dir=gamemodes_dir, entry=entry
    )


@pytest.fixture
def write_manifest() -> Callable[[Path, dict[str, object]], Path]:
    """Return a function that writes a pawn.json into a directory."""

    def _write(root: Path, data: dict[str, object]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        path = root / "pawn.json"
        path.write_bytes(orjson.dumps(data))
        return path

    return _write


@pytest.fixture
def write_executable() -> WriteExecutable:
    """Return a function that writes a Python script as an executable file.

    The script runs with the interpreter running the tests, so fake server
    and compiler binaries need nothing else installed.
    """

    def _write(path: Path, body: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!{sys.executable}\n{body}")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


class FakeProcessController:
    """Process controller that never touches host processes by pid or name.

    Liveness answers from ``alive``. Children spawned by the code under test
    are still signalled for real so inline servers can be stopped.
    """

    supports_signals = False
    compiler_name = "pawncc"
    library_path_variable = None

    def __init__(self) -> None:
        self.alive: set[int] = set()
        self.running_names: set[str] = set()
        self.terminated: list[tuple[int, bool]] = []
        self.launches: list[tuple[Path, tuple[str, ...], Path]] = []
        self.window_pid = 9001
        self.survives_terminate = False

    def server_executable_names(self) -> tuple[str, ...]:
        return ("omp-server", "samp03svr")

    def host_process_names(self) -> tuple[str, ...]:
        return ("omp-server", "samp03svr")

    def is_alive(self, pid: int) -> bool:
        return pid in self.alive

    def interrupt(self, process: "anyio.abc.Process") -> None:
        process.terminate()

    def terminate(self, process: "anyio.abc.Process") -> None:
        process.terminate()

    def kill(self, process: "anyio.abc.Process") -> None:
        process.kill()

    def terminate_pid(self, pid: int, *, force: bool = False) -> bool:
        self.terminated.append((pid, force))
        if not self.survives_terminate:
            self.alive.discard(pid)
        return True

    def kill_by_name(self, name: str) -> bool:
        return name in self.running_names

    def find_pid(self, name: str) -> int | None:
        return self.window_pid if name in self.running_names else None

    def launch_window(
        self, executable: Path, arguments: Sequence[str], cwd: Path
    ) -> WindowLaunch:
        self.launches.append((executable, tuple(arguments), cwd))
        return WindowLaunch(pid=1234, command=("xterm", "-e", str(executable)))


@pytest.fixture
def fake_controller() -> FakeProcessController:
    return FakeProcessController()
