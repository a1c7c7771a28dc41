"""Running the compiler and reporting its output."""

import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, final

import anyio

from pawnctl.exceptions import BuildError
from pawnctl.process import get_process_controller
from pawnctl.utils import Reporter, iter_lines

from ._diagnostics import (
    CompilationStats,
    CompilerDiagnostic,
    format_diagnostic,
    parse_compilation_stats,
    parse_diagnostic_line,
)
from ._invocation import (
    DEFAULT_DEBUG_LEVEL,
    CompilerInvocation,
    ResolvedCompiler,
    plan_build,
    resolve_compiler,
)

if TYPE_CHECKING:
    from anyio.abc import ByteReceiveStream

    from pawnctl.config import Manifest
    from pawnctl.process import ProcessController


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of one compiler run.

    Attributes:
        exit_code: The compiler's exit code.
        diagnostics: Every warning and error parsed from its output.
        stats: The statistics block, when the compile succeeded and printed one.
    """

    exit_code: int
    diagnostics: tuple[CompilerDiagnostic, ...] = ()
    stats: CompilationStats | None = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def error_count(self) -> int:
        return sum(1 for diagnostic in self.diagnostics if diagnostic.is_error)

    @property
    def warning_count(self) -> int:
        return len(self.diagnostics) - self.error_count


@final
class BuildInvoker:
    """Spawns pawncc for a CompilerInvocation and normalizes its output."""

    __slots__ = ("_controller", "_reporter", "_root")

    def __init__(
        self,
        root: Path,
        *,
        controller: "ProcessController | None" = None,
        reporter: Reporter | None = None,
    ) -> None:
        """Initialize the invoker.

        Args:
            root: Project root. The compiler runs with it as working directory.
            controller: Platform strategy. Defaults to the running platform's.
            reporter: Output channel for diagnostics and progress.
        """
        self._root = root
        self._controller = controller or get_process_controller()
        self._reporter = reporter or Reporter()

    def resolve_compiler(self) -> ResolvedCompiler:
        return resolve_compiler(self._root, self._controller)

    def build_environment(self, compiler: ResolvedCompiler) -> dict[str, str] | None:
        """Return the compiler environment, or None to inherit ours unchanged.

        When the platform needs a shared-library search path, the compiler's
        folder is prepended to it. Existing entries are kept.
        """
        variable = self._controller.library_path_variable
        if variable is None:
            return None

        existing = os.environ.get(variable)
        library_dir = str(compiler.library_dir)
        value = f"{library_dir}{os.pathsep}{existing}" if existing else library_dir
        return {**os.environ, variable: value}

    def _report_diagnostic(self, diagnostic: CompilerDiagnostic) -> None:
        if diagnostic.is_error:
            self._reporter.error(format_diagnostic(diagnostic))
        else:
            self._reporter.warn(format_diagnostic(diagnostic))

    async def _consume(
        self,
        stream: "ByteReceiveStream",
        name: str,
        diagnostics: list[CompilerDiagnostic],
        captured: list[str] | None = None,
    ) -> None:
        # Non-diagnostic stderr lines are compiler errors.
        report_other = (
            self._reporter.error if name == "stderr" else self._reporter.plain
        )
        async for line in iter_lines(stream):
            if captured is not None:
                captured.append(line)
            diagnostic = parse_diagnostic_line(line)
            if diagnostic is not None:
                diagnostics.append(diagnostic)
                self._report_diagnostic(diagnostic)
            elif line.strip():
                report_other(line)

    async def run(
        self,
        invocation: CompilerInvocation,
        compiler: ResolvedCompiler | None = None,
    ) -> BuildResult:
        """Compile and stream normalized diagnostics as they arrive.

        Args:
            invocation: What to compile.
            compiler: Compiler to use. Resolved under the root if None.

        Returns:
            The build result. A non-zero exit code is not an exception.

        Raises:
            CompilerNotFoundError: If no compiler can be found.
            BuildError: If the compiler cannot be spawned.
        """
        compiler = compiler or self.resolve_compiler()
        command = [str(compiler.path), *invocation.to_arguments()]

        output_label = invocation.output_file or "default output"
        self._reporter.info(f"Compiling: {invocation.input_file} -> {output_label}")
        self._reporter.detail(f"Compiler: {compiler.path}")
        self._reporter.detail(f"Command: {shlex.join(command)}")

        try:
            process = await anyio.open_process(
                command,
                cwd=self._root,
                env=self.build_environment(compiler),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            msg = f"Failed to start compiler {compiler.path}: {e}"
            raise BuildError(msg) from e

        diagnostics: list[CompilerDiagnostic] = []
        stdout_lines: list[str] = []
        async with anyio.create_task_group() as tg:
            if process.stdout is not None:
                tg.start_soon(
                    self._consume, process.stdout, "stdout", diagnostics, stdout_lines
                )
            if process.stderr is not None:
                tg.start_soon(self._consume, process.stderr, "stderr", diagnostics)
            exit_code = await process.wait()

        if exit_code != 0:
            self._reporter.error(f"Compilation failed with exit code {exit_code}")
            return BuildResult(exit_code=exit_code, diagnostics=tuple(diagnostics))

        stats = parse_compilation_stats("\n".join(stdout_lines))
        if stats is not None:
            self._reporter.subheading("Compilation statistics")
            for key, value in stats.as_rows():
                self._reporter.key_value(key, value)
        self._reporter.final_success(f"Compiled {invocation.input_file} successfully")
        return BuildResult(exit_code=0, diagnostics=tuple(diagnostics), stats=stats)


async def build_project(  # noqa: PLR0913
    manifest: "Manifest",
    root: Path,
    *,
    reporter: Reporter,
    controller: "ProcessController | None" = None,
    input_file: str | None = None,
    output_file: str | None = None,
    debug_level: int = DEFAULT_DEBUG_LEVEL,
    profile: str | None = None,
) -> BuildResult:
    """Plan and run a build for the project.

    Raises:
        BuildError: For configuration problems (see plan_build) or a
            missing compiler.
    """
    if profile is not None:
        reporter.routine(f"Using build profile: {profile}")
    invocation = plan_build(
        manifest,
        root,
        input_file=input_file,
        output_file=output_file,
        debug_level=debug_level,
        profile=profile,
        reporter=reporter,
    )
    invoker = BuildInvoker(root, controller=controller, reporter=reporter)
    return await invoker.run(invocation)
