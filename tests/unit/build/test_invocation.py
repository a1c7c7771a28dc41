from pathlib import Path

import pytest
from rich.console import Console

from pawnctl.build import (
    CompilerInvocation,
    format_constant,
    plan_build,
    resolve_compiler,
    resolve_include_directories,
    validate_debug_level,
)
from pawnctl.config import DEFAULT_COMPILER_OPTIONS, Manifest
from pawnctl.exceptions import (
    BuildError,
    BuildProfileNotFoundError,
    CompilerNotFoundError,
    InputFileNotFoundError,
    InvalidDebugLevelError,
)
from pawnctl.process import PosixProcessController, WindowsProcessController
from pawnctl.utils import Reporter, Verbosity


class TestValidateDebugLevel:
    @pytest.mark.parametrize("level", [1, 2, 3])
    def test_accepts_documented_levels(self, level: int) -> None:
        assert validate_debug_level(level) == level

    @pytest.mark.parametrize("level", [0, 4, -1])
    def test_rejects_other_levels(self, level: int) -> None:
        with pytest.raises(InvalidDebugLevelError) as exc_info:
            _ = validate_debug_level(level)
        assert exc_info.value.level == level


class TestFormatConstant:
    def test_bool_becomes_digit(self) -> None:
        assert format_constant("DEBUG", True) == "DEBUG=1"  # noqa: FBT003
        assert format_constant("DEBUG", False) == "DEBUG=0"  # noqa: FBT003

    def test_numbers_and_strings(self) -> None:
        assert format_constant("MAX_PLAYERS", 50) == "MAX_PLAYERS=50"
        assert format_constant("MODE", "rp") == "MODE=rp"


class TestCompilerInvocation:
    def test_argument_order(self) -> None:
        invocation = CompilerInvocation(
            input_file=Path("gamemodes/main.pwn"),
            output_file=Path("gamemodes/main.amx"),
            include_directories=(Path("includes"),),
            debug_level=2,
            extra_options=("-;+", "-Z+"),
            defined_constants={"DEBUG": True},
        )

        assert invocation.to_arguments() == [
            f"-o{Path('gamemodes/main.amx')}",
            "-d2",
            "-iincludes",
            "-;+",
            "-Z+",
            "DEBUG=1",
            str(Path("gamemodes/main.pwn")),
        ]

    def test_output_is_optional(self) -> None:
        invocation = CompilerInvocation(input_file=Path("main.pwn"))
        assert invocation.to_arguments() == ["-d3", "main.pwn"]

    def test_invalid_debug_level_rejected(self) -> None:
        with pytest.raises(InvalidDebugLevelError):
            _ = CompilerInvocation(input_file=Path("main.pwn"), debug_level=9)


class TestResolveIncludeDirectories:
    def test_skips_missing_declared_folder(self, tmp_path: Path) -> None:
        (tmp_path / "includes").mkdir()

        assert resolve_include_directories(
            tmp_path, ["includes", "missing_dir"]
        ) == (Path("includes"),)

    def test_reports_missing_folder_in_verbose_mode(
        self,
        tmp_path: Path,
        console: Console,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        reporter = Reporter(console, console, verbosity=Verbosity.VERBOSE)

        _ = resolve_include_directories(tmp_path, ["missing_dir"], reporter)

        assert "missing_dir" in capsys.readouterr().out

    def test_appends_existing_sdk_folders(self, tmp_path: Path) -> None:
        (tmp_path / "includes").mkdir()
        (tmp_path / "qawno" / "include").mkdir(parents=True)

        assert resolve_include_directories(tmp_path, ["includes"]) == (
            Path("includes"),
            Path("qawno/include"),
        )

    def test_drops_duplicates(self, tmp_path: Path) -> None:
        (tmp_path / "pawno" / "include").mkdir(parents=True)

        result = resolve_include_directories(
            tmp_path, ["pawno/include", "./pawno/include"]
        )

        assert result == (Path("pawno/include"),)

    def test_no_folders(self, tmp_path: Path) -> None:
        assert resolve_include_directories(tmp_path, []) == ()


class TestResolveCompiler:
    def test_prefers_pawno(self, tmp_path: Path) -> None:
        for folder in ("pawno", "qawno"):
            (tmp_path / folder).mkdir()
            (tmp_path / folder / "pawncc").write_text("")

        compiler = resolve_compiler(tmp_path, PosixProcessController())

        assert compiler.path == (tmp_path / "pawno" / "pawncc").resolve()
        assert compiler.library_dir == compiler.path.parent

    def test_project_root_is_last_resort(self, tmp_path: Path) -> None:
        (tmp_path / "pawncc.exe").write_text("")

        compiler = resolve_compiler(tmp_path, WindowsProcessController())

        assert compiler.path == (tmp_path / "pawncc.exe").resolve()

    def test_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(CompilerNotFoundError) as exc_info:
            _ = resolve_compiler(tmp_path, PosixProcessController())

        assert len(exc_info.value.searched) == 4
        assert "pawncc" in str(exc_info.value)


class TestPlanBuild:
    @pytest.fixture
    def root(self, tmp_path: Path) -> Path:
        (tmp_path / "gamemodes").mkdir()
        (tmp_path / "gamemodes" / "main.pwn").write_text("main() {}\n")
        (tmp_path / "gamemodes" / "test.pwn").write_text("main() {}\n")
        return tmp_path

    def test_uses_manifest_entry_and_output(self, root: Path) -> None:
        manifest = Manifest(entry="gamemodes/main.pwn", output="gamemodes/main.amx")

        invocation = plan_build(manifest, root)

        assert invocation.input_file == Path("gamemodes/main.pwn")
        assert invocation.output_file == Path("gamemodes/main.amx")
        assert invocation.extra_options == DEFAULT_COMPILER_OPTIONS

    def test_compiler_section_beats_entry(self, root: Path) -> None:
        manifest = Manifest.model_validate(
            {
                "entry": "gamemodes/main.pwn",
                "compiler": {"input": "gamemodes/test.pwn", "options": ["-O1"]},
            }
        )

        invocation = plan_build(manifest, root)

        assert invocation.input_file == Path("gamemodes/test.pwn")
        assert invocation.extra_options == ("-O1",)

    def test_command_line_beats_manifest(self, root: Path) -> None:
        manifest = Manifest.model_validate(
            {"compiler": {"input": "gamemodes/main.pwn", "output": "a.amx"}}
        )

        invocation = plan_build(
            manifest,
            root,
            input_file="gamemodes/test.pwn",
            output_file="b.amx",
            debug_level=1,
        )

        assert invocation.input_file == Path("gamemodes/test.pwn")
        assert invocation.output_file == Path("b.amx")
        assert invocation.debug_level == 1

    def test_profile_overrides_and_merges_constants(self, root: Path) -> None:
        manifest = Manifest.model_validate(
            {
                "entry": "gamemodes/main.pwn",
                "compiler": {
                    "constants": {"DEBUG": 1, "MAX_PLAYERS": 50},
                    "profiles": {
                        "prod": {
                            "output": "dist/main.amx",
                            "options": ["-O2"],
                            "constants": {"DEBUG": 0},
                        }
                    },
                },
            }
        )

        invocation = plan_build(manifest, root, profile="prod")

        assert invocation.output_file == Path("dist/main.amx")
        assert invocation.extra_options == ("-O2",)
        assert dict(invocation.defined_constants) == {"DEBUG": 0, "MAX_PLAYERS": 50}

    def test_unknown_profile(self, root: Path) -> None:
        manifest = Manifest.model_validate(
            {"entry": "gamemodes/main.pwn", "compiler": {"profiles": {"dev": {}}}}
        )

        with pytest.raises(BuildProfileNotFoundError) as exc_info:
            _ = plan_build(manifest, root, profile="prod")

        assert exc_info.value.available == ("dev",)

    def test_no_input_configured(self, root: Path) -> None:
        with pytest.raises(BuildError, match="No input file specified"):
            _ = plan_build(Manifest(), root)

    def test_missing_input_file(self, root: Path) -> None:
        with pytest.raises(InputFileNotFoundError) as exc_info:
            _ = plan_build(Manifest(entry="gamemodes/gone.pwn"), root)

        assert exc_info.value.path == Path("gamemodes/gone.pwn")

    def test_invalid_debug_level(self, root: Path) -> None:
        with pytest.raises(InvalidDebugLevelError):
            _ = plan_build(Manifest(entry="gamemodes/main.pwn"), root, debug_level=0)
