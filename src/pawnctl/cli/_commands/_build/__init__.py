# pyright: reportUnusedCallResult=false
"""pawnctl build command - compiles the project with pawncc."""

from functools import partial
from typing import Annotated

from cyclopts import App, Parameter

from pawnctl.build import DEFAULT_DEBUG_LEVEL, build_project
from pawnctl.config import DEFAULT_COMPILER_OPTIONS, Manifest
from pawnctl.exceptions import PawnctlError

from .._context import RunContext
from .._shared import ExitCode, exit_with_code, exit_with_error, run_async

app = App(
    name="build",
    help="Compile the project with pawncc",
    help_on_error=True,
)


def _print_profiles(ctx: RunContext, manifest: Manifest) -> None:
    reporter = ctx.reporter
    compiler = manifest.compiler
    if compiler is None or not compiler.profiles:
        reporter.info("No build profiles defined in pawn.json")
        return

    reporter.heading("Build profiles")
    for name, profile in compiler.profiles.items():
        reporter.newline()
        reporter.subheading(name)
        if profile.description:
            reporter.key_value("Description", profile.description)
        options = profile.options if profile.options is not None else compiler.options
        reporter.key_value(
            "Options",
            " ".join(options if options is not None else DEFAULT_COMPILER_OPTIONS),
        )
        constants = {**compiler.constants, **profile.constants}
        if constants:
            reporter.key_value(
                "Constants",
                ", ".join(f"{key}={value}" for key, value in constants.items()),
            )


@app.default
def build(  # noqa: PLR0913
    *,
    input_file: Annotated[
        str | None,
        Parameter(name=["--input", "-i"], help="Input .pwn file to compile."),
    ] = None,
    output_file: Annotated[
        str | None,
        Parameter(name=["--output", "-o"], help="Output .amx file."),
    ] = None,
    debug_level: Annotated[
        int,
        Parameter(name=["--debug-level", "-d"], help="Debug information level (1-3)."),
    ] = DEFAULT_DEBUG_LEVEL,
    profile: Annotated[
        str | None,
        Parameter(name=["--profile", "-p"], help="Build profile from pawn.json."),
    ] = None,
    list_profiles: Annotated[
        bool,
        Parameter(name="--list-profiles", negative="", help="List build profiles."),
    ] = False,
) -> None:
    """Compile the project.

    Input and output default to the compiler section of pawn.json, then
    to its entry and output fields.
    """
    ctx = RunContext.get_current()

    manifest = ctx.require_manifest()

    if list_profiles:
        _print_profiles(ctx, manifest)
        return

    ctx.show_banner()
    try:
        result = run_async(
            partial(
                build_project,
                manifest,
                ctx.project_root,
                reporter=ctx.reporter,
                input_file=input_file,
                output_file=output_file,
                debug_level=debug_level,
                profile=profile,
            )
        )
    except PawnctlError as e:
        exit_with_error(str(e), console=ctx.error_console)

    if result.diagnostics:
        ctx.reporter.routine(
            f"{result.error_count} error(s), {result.warning_count} warning(s)"
        )
    exit_with_code(ExitCode.SUCCESS if result.success else ExitCode.ERROR)
