# pyright: reportUnusedCallResult=false
"""pawnctl run command - runs scripts declared in pawn.json."""

import sys
from typing import Annotated

from cyclopts import App, Parameter
from rich.text import Text

from pawnctl.exceptions import ScriptNotFoundError
from pawnctl.utils import ScriptConfig, run_chain

from .._context import RunContext
from .._shared import ExitCode, exit_with_error

app = App(
    name="run",
    help="Run a script from pawn.json",
    help_on_error=True,
)

_SELF = "pawnctl"


def resolve_self_invocation(command: str) -> str:
    """Run a leading ``pawnctl`` with the interpreter running this process.

    Scripts that call back into pawnctl then work without it on PATH.
    """
    head, _, rest = command.partition(" ")
    if head != _SELF:
        return command
    self_command = f'"{sys.executable}" -m {_SELF}'
    return f"{self_command} {rest}" if rest else self_command


def _print_scripts(ctx: RunContext, scripts: dict[str, str]) -> None:
    if not scripts:
        ctx.reporter.info("No scripts defined in pawn.json")
        return
    ctx.reporter.heading("Scripts")
    for name, command in scripts.items():
        ctx.reporter.key_value(name, command)


@app.default
def run(
    script: Annotated[
        str | None,
        Parameter(help="Name of the script to run."),
    ] = None,
    /,
    *,
    list_scripts: Annotated[
        bool,
        Parameter(name=["--list", "-l"], negative="", help="List available scripts."),
    ] = False,
) -> None:
    """Run a named script from the manifest's scripts table.

    Commands chained with ``&&`` run in order and stop at the first failure.
    """
    ctx = RunContext.get_current()
    manifest = ctx.require_manifest()

    if list_scripts:
        _print_scripts(ctx, manifest.scripts)
        return

    if script is None:
        available = ", ".join(manifest.scripts) or "none"
        exit_with_error(
            f"No script name given. Available scripts: {available}",
            console=ctx.error_console,
        )

    try:
        command = manifest.get_script(script)
    except ScriptNotFoundError as e:
        available = ", ".join(e.available) or "none"
        exit_with_error(
            f"{e}. Available scripts: {available}", console=ctx.error_console
        )

    ctx.show_banner()
    ctx.reporter.info(f"Running script: {script}")

    results = run_chain(
        command,
        ScriptConfig(cwd=ctx.project_root),
        rewrite=resolve_self_invocation,
    )
    for result in results:
        ctx.reporter.detail(f"$ {result.command}")
        if result.stdout:
            ctx.console.print(Text(result.stdout.rstrip("\n")))
        if result.stderr:
            ctx.error_console.print(Text(result.stderr.rstrip("\n")))

        if result.error is not None:
            exit_with_error(
                f"Script '{script}' failed: {result.error}",
                console=ctx.error_console,
            )
        if not result.success:
            exit_code = result.exit_code or ExitCode.ERROR
            ctx.reporter.error(
                f"Script '{script}' failed with exit code {exit_code}: "
                f"{result.command}"
            )
            raise SystemExit(exit_code)

    ctx.reporter.success(f"Script '{script}' completed")
