"""Integration tests for global options."""

import contextlib
from collections.abc import Callable
from pathlib import Path

import orjson
import pytest
from rich.console import Console

from pawnctl import __version__
from pawnctl.cli import main


class TestGlobalOptions:
    def test_verbose_and_quiet_conflict(
        self,
        capsys: pytest.CaptureFixture[str],
        pawnctl_cli_with_exit_code: Callable[..., int],
        tmp_path: Path,
    ) -> None:
        exit_code = pawnctl_cli_with_exit_code(
            "--project-root", str(tmp_path), "--verbose", "--quiet", "status"
        )

        assert exit_code == 1
        assert "cannot be used together" in capsys.readouterr().out

    def test_quiet_hides_informational_output(
        self,
        capsys: pytest.CaptureFixture[str],
        pawnctl_cli_with_exit_code: Callable[..., int],
        tmp_path: Path,
    ) -> None:
        exit_code = pawnctl_cli_with_exit_code(
            "--project-root", str(tmp_path), "-q", "stop"
        )

        assert exit_code == 0
        assert capsys.readouterr().out == ""

    def test_banner_shown_once(
        self,
        capsys: pytest.CaptureFixture[str],
        pawnctl_cli_with_exit_code: Callable[..., int],
        tmp_path: Path,
    ) -> None:
        _ = pawnctl_cli_with_exit_code("--project-root", str(tmp_path), "stop")

        out = capsys.readouterr().out
        assert out.count(f"v{__version__}") == 1

    def test_no_color(
        self,
        console: Console,
        pawnctl_cli_with_exit_code: Callable[..., int],
        tmp_path: Path,
    ) -> None:
        _ = pawnctl_cli_with_exit_code(
            "--project-root", str(tmp_path), "--no-color", "status"
        )

        assert console.no_color

    def test_log_to_file(
        self,
        pawnctl_cli_with_exit_code: Callable[..., int],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        log_file = tmp_path / "logs" / "cli.log"
        monkeypatch.setattr(
            "pawnctl.utils._logging.get_cli_log_file", lambda: log_file
        )

        exit_code = pawnctl_cli_with_exit_code(
            "--project-root", str(tmp_path), "--log-to-file", "status"
        )

        assert exit_code == 0
        events = [
            orjson.loads(line)["event"] for line in log_file.read_text().splitlines()
        ]
        assert events[0] == "cli_start"
        assert "No server is running" in events

    def test_project_root_is_discovered_from_cwd(
        self,
        capsys: pytest.CaptureFixture[str],
        pawnctl_cli_with_exit_code: Callable[..., int],
        pawn_project: object,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        root: Path = pawn_project.root  # pyright: ignore[reportAttributeAccessIssue]
        monkeypatch.chdir(root / "gamemodes")

        exit_code = pawnctl_cli_with_exit_code("build", "--list-profiles")

        assert exit_code == 0
        assert "No build profiles defined" in capsys.readouterr().out


class TestHelp:
    def test_lists_commands(
        self,
        capsys: pytest.CaptureFixture[str],
        pawnctl_cli: Callable[..., None],
    ) -> None:
        pawnctl_cli("--help")

        out = capsys.readouterr().out
        for command in ("start", "build", "stop", "kill", "status", "run", "config"):
            assert command in out

    def test_version(
        self,
        capsys: pytest.CaptureFixture[str],
        pawnctl_cli: Callable[..., None],
    ) -> None:
        pawnctl_cli("--version")

        assert __version__ in capsys.readouterr().out


def test_main_runs_the_module_app(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    def no_new_app(**_kwargs: object) -> None:
        pytest.fail("main() built a second app")

    monkeypatch.setattr("pawnctl.cli._app.create_app", no_new_app)
    monkeypatch.setattr("sys.argv", ["pawnctl", "--version"])

    with contextlib.suppress(SystemExit):
        main()

    assert __version__ in capsys.readouterr().out
