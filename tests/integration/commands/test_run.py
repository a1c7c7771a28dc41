import sys
from collections.abc import Callable
from pathlib import Path

import pytest

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell")


@pytest.fixture
def script_project(
    tmp_path: Path, write_manifest: Callable[[Path, dict[str, object]], Path]
) -> Path:
    root = tmp_path / "project"
    _ = write_manifest(
        root,
        {
            "name": "scripts",
            "scripts": {
                "hello": "echo hello-from-script",
                "chain": "echo first && echo second",
                "broken": "echo before && exit 4 && echo never",
                "where": "pwd",
                "status": "pawnctl status",
            },
        },
    )
    return root


def test_runs_named_script(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "run", "hello"
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Running script: hello" in out
    assert "hello-from-script" in out
    assert "Script 'hello' completed" in out


def test_chain_runs_in_order(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "run", "chain"
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out.index("first") < out.index("second")


@posix_only
def test_chain_stops_at_first_failure(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "run", "broken"
    )

    assert exit_code == 4
    out = capsys.readouterr().out
    assert "before" in out
    assert "never" not in out
    assert "failed with exit code 4" in out


@posix_only
def test_runs_in_project_root(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "--quiet", "run", "where"
    )

    assert exit_code == 0
    # Long paths are folded across lines by the console
    printed = Path("".join(capsys.readouterr().out.split()))
    assert printed.resolve() == script_project.resolve()


def test_unknown_script_lists_available(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "run", "deploy"
    )

    assert exit_code == 1
    out = capsys.readouterr().out
    assert "Script 'deploy' not found" in out
    assert "hello" in out


def test_missing_script_name(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "run"
    )

    assert exit_code == 1
    assert "No script name given" in capsys.readouterr().out


def test_list_scripts(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "run", "--list"
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Scripts" in out
    assert "hello: echo hello-from-script" in out


def test_list_scripts_when_none_defined(
    pawnctl_cli_with_exit_code: Callable[..., int],
    pawn_project: object,
    capsys: pytest.CaptureFixture[str],
) -> None:
    root = str(pawn_project.root)  # pyright: ignore[reportAttributeAccessIssue]

    exit_code = pawnctl_cli_with_exit_code("--project-root", root, "run", "-l")

    assert exit_code == 0
    assert "No scripts defined in pawn.json" in capsys.readouterr().out


@posix_only
def test_pawnctl_commands_use_current_interpreter(
    pawnctl_cli_with_exit_code: Callable[..., int],
    script_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(script_project), "run", "status"
    )

    assert exit_code == 0
    assert "No server is running" in capsys.readouterr().out


def test_requires_manifest(
    pawnctl_cli_with_exit_code: Callable[..., int],
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = pawnctl_cli_with_exit_code(
        "--project-root", str(tmp_path), "run", "hello"
    )

    assert exit_code == 1
    assert "No pawn.json found" in capsys.readouterr().out
