import sys
from pathlib import Path

import pytest

from pawnctl.utils import (
    ScriptConfig,
    ScriptResult,
    build_command,
    run_chain,
    run_script,
    split_chain,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell")


class TestScriptResult:
    def test_success_needs_zero_exit_and_no_error(self) -> None:
        assert ScriptResult(command="true", exit_code=0).success
        assert not ScriptResult(command="false", exit_code=1).success
        assert not ScriptResult(command="sleep 9", error="timed out").success
        assert not ScriptResult(command="").success


class TestSplitChain:
    def test_splits_on_double_ampersand(self) -> None:
        assert split_chain("pawnctl build && pawnctl start") == [
            "pawnctl build",
            "pawnctl start",
        ]

    def test_drops_empty_parts(self) -> None:
        assert split_chain(" echo a &&  && echo b && ") == ["echo a", "echo b"]

    def test_single_command(self) -> None:
        assert split_chain("echo a | grep a") == ["echo a | grep a"]


class TestBuildCommand:
    def test_empty_command(self) -> None:
        assert build_command(ScriptConfig()) == []

    @posix_only
    def test_shell_command(self) -> None:
        assert build_command(ScriptConfig(command="echo hi")) == [
            "/bin/sh",
            "-c",
            "echo hi",
        ]

    def test_windows_shell_uses_comspec(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("pawnctl.utils._exec.sys.platform", "win32")
        monkeypatch.setenv("COMSPEC", "C:\\Windows\\system32\\cmd.exe")

        assert build_command(ScriptConfig(command="dir")) == [
            "C:\\Windows\\system32\\cmd.exe",
            "/c",
            "dir",
        ]

    def test_without_shell_splits_arguments(self) -> None:
        config = ScriptConfig(command="pawncc -d3 'main file.pwn'", shell=False)
        assert build_command(config) == ["pawncc", "-d3", "main file.pwn"]


class TestRunScript:
    @posix_only
    def test_captures_stdout(self) -> None:
        result = run_script(ScriptConfig(command="echo hello"))

        assert result.success
        assert result.exit_code == 0
        assert result.command == "echo hello"
        assert result.stdout == "hello\n"

    def test_without_command(self) -> None:
        result = run_script(ScriptConfig())

        assert not result.success
        assert result.error == "No command specified"

    @posix_only
    def test_captures_exit_code_and_stderr(self) -> None:
        result = run_script(ScriptConfig(command="echo broken >&2; exit 3"))

        assert not result.success
        assert result.exit_code == 3
        assert "broken" in result.stderr

    @posix_only
    def test_uses_cwd_and_env(self, tmp_path: Path) -> None:
        result = run_script(
            ScriptConfig(
                command='pwd; echo "$PAWN_MODE"',
                cwd=tmp_path,
                env={"PAWN_MODE": "dev"},
            )
        )

        lines = result.stdout.splitlines()
        assert Path(lines[0]).resolve() == tmp_path.resolve()
        assert lines[1] == "dev"

    @posix_only
    def test_timeout(self) -> None:
        config = ScriptConfig(
            command=f"'{sys.executable}' -c 'import time; time.sleep(5)'",
            shell=False,
            timeout_ms=100,
        )

        result = run_script(config)

        assert result.timed_out
        assert result.exit_code is None
        assert result.error == "Command timed out after 0.1s"

    def test_missing_program_without_shell(self) -> None:
        config = ScriptConfig(command="definitely-not-a-real-binary", shell=False)

        result = run_script(config)

        assert not result.success
        assert result.command_not_found


@posix_only
class TestRunChain:
    def test_runs_links_in_order(self) -> None:
        results = list(run_chain("echo one && echo two"))

        assert [r.stdout for r in results] == ["one\n", "two\n"]
        assert all(r.success for r in results)

    def test_stops_at_first_failure(self) -> None:
        results = list(run_chain("echo one && exit 2 && echo three"))

        assert [r.command for r in results] == ["echo one", "exit 2"]
        assert results[-1].exit_code == 2

    def test_is_lazy(self) -> None:
        chain = run_chain("echo one && echo two")

        first = next(chain)

        assert first.stdout == "one\n"
        chain.close()

    def test_rewrite_applies_to_every_link(self) -> None:
        results = list(
            run_chain("greet && greet", rewrite=lambda part: f"echo {part}-ed")
        )

        assert [r.command for r in results] == ["echo greet-ed", "echo greet-ed"]
        assert [r.stdout for r in results] == ["greet-ed\n", "greet-ed\n"]

    def test_shared_config_is_kept(self, tmp_path: Path) -> None:
        (result,) = run_chain("pwd", ScriptConfig(command="ignored", cwd=tmp_path))

        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_empty_chain_runs_nothing(self) -> None:
        assert list(run_chain(" && ")) == []
