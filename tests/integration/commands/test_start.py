import sys
from collections.abc import Callable
from pathlib import Path

import orjson
import pytest

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="fake server is a shebang script"
)

pytestmark = pytest.mark.usefixtures("use_fake_controller")

FAKE_SERVER = """\
import sys
print("Starting open.mp server (1.2.0.2670) from commit 7a6c1c3")
print("Loaded 3 component(s)")
print("args=" + " ".join(sys.argv[1:]))
sys.exit({code})
"""


@pytest.fixture
def server_root(tmp_path: Path) -> Path:
    root = tmp_path / "server"
    root.mkdir()
    (root / "config.json").write_bytes(
        orjson.dumps({"pawn": {"main_scripts": ["main"]}, "rcon": {"password": "x1"}})
    )
    (root / "gamemodes").mkdir()
    (root / "gamemodes" / "main.amx").write_bytes(b"")
    return root


@posix_only
def test_inline_server_output_is_reformatted(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    state_file: Path,
    write_executable: Callable[[Path, str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    _ = write_executable(server_root / "omp-server", FAKE_SERVER.format(code=0))

    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(server_root), "start", "--debug"
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "[server] open.mp server v1.2.0.2670" in out
    assert "[component] 3 components loaded" in out
    assert "args=--debug" in out
    assert "[WARN]" not in out
    assert not state_file.exists()


@posix_only
def test_inline_server_exit_code_is_propagated(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    state_file: Path,
    write_executable: Callable[[Path, str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    _ = write_executable(server_root / "omp-server", FAKE_SERVER.format(code=3))

    exit_code = pawnctl_cli_with_exit_code("--project-root", str(server_root), "start")

    assert exit_code == 3
    assert "exited with code 3" in capsys.readouterr().out
    assert not state_file.exists()


@posix_only
def test_preflight_warnings_do_not_block_start(
    pawnctl_cli_with_exit_code: Callable[..., int],
    tmp_path: Path,
    write_executable: Callable[[Path, str], Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    _ = write_executable(tmp_path / "omp-server", FAKE_SERVER.format(code=0))

    exit_code = pawnctl_cli_with_exit_code("--project-root", str(tmp_path), "start")

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "[WARN] Server config config.json not found" in out
    assert "open.mp server v1.2.0.2670" in out


def test_refuses_when_server_already_running(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    state_file: Path,
    fake_controller: object,
    track_server: Callable[..., None],
    capsys: pytest.CaptureFixture[str],
) -> None:
    fake_controller.alive.add(77)  # pyright: ignore[reportAttributeAccessIssue]
    track_server(77)
    before = state_file.read_bytes()

    exit_code = pawnctl_cli_with_exit_code("--project-root", str(server_root), "start")

    assert exit_code == 1
    assert "already running (pid 77)" in capsys.readouterr().out
    assert state_file.read_bytes() == before


def test_attach_to_running_server(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    fake_controller: object,
    track_server: Callable[..., None],
    capsys: pytest.CaptureFixture[str],
) -> None:
    fake_controller.alive.add(77)  # pyright: ignore[reportAttributeAccessIssue]
    track_server(77)

    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(server_root), "start", "--existing"
    )

    assert exit_code == 0
    assert "Attached to running server (pid 77)" in capsys.readouterr().out


def test_attach_with_nothing_running(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(server_root), "start", "--existing"
    )

    assert exit_code == 1
    assert "No running server to attach to" in capsys.readouterr().out


def test_stale_state_is_cleared_before_start(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    state_file: Path,
    track_server: Callable[..., None],
    capsys: pytest.CaptureFixture[str],
) -> None:
    track_server(77)

    exit_code = pawnctl_cli_with_exit_code("--project-root", str(server_root), "start")

    assert exit_code == 1
    assert "Server executable not found" in capsys.readouterr().out
    assert not state_file.exists()


def test_missing_custom_config(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    (server_root / "omp-server").write_text("")

    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(server_root), "start", "--config", "test.json"
    )

    assert exit_code == 1
    assert "Server config file not found: test.json" in capsys.readouterr().out


def test_window_mode_records_state(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    state_file: Path,
    fake_controller: object,
    capsys: pytest.CaptureFixture[str],
) -> None:
    (server_root / "omp-server").write_text("")
    fake_controller.running_names.add("omp-server")  # pyright: ignore[reportAttributeAccessIssue]

    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(server_root), "start", "--window"
    )

    assert exit_code == 0
    assert "launched in a new window (pid 9001)" in capsys.readouterr().out
    state = orjson.loads(state_file.read_bytes())
    assert state["pid"] == 9001
    assert state["windowMode"] is True


def test_watch_requires_manifest(
    pawnctl_cli_with_exit_code: Callable[..., int],
    server_root: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(server_root), "start", "--watch"
    )

    assert exit_code == 1
    assert "Watch mode needs a pawn.json" in capsys.readouterr().out
