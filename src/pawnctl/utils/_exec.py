"""Running the shell commands declared in a manifest's ``scripts`` table.

A script is a single command string that may chain several commands with
``&&``. Each link runs in its own subprocess, in order, and the chain stops
at the first link that does not succeed.
"""

import dataclasses
import os
import shlex
import subprocess
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ScriptConfig:
    """How one command is run.

    Attributes:
        command: Single command, without ``&&`` chaining.
        shell: Run through the platform shell instead of splitting the
            command into an argument vector.
        cwd: Working directory, the project root for manifest scripts.
        env: Extra environment variables layered over the current ones.
        timeout_ms: Timeout in milliseconds, or None to wait indefinitely.
    """

    command: str | None = None
    shell: bool = True
    cwd: str | Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    timeout_ms: int | None = None


@dataclass(frozen=True, slots=True)
class ScriptResult:
    """Outcome of one command.

    ``exit_code`` is None when the command never ran or was killed by the
    timeout; ``error`` then says why.
    """

    command: str
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    timed_out: bool = False
    command_not_found: bool = False

    @property
    def success(self) -> bool:
        return self.error is None and self.exit_code == 0


def split_chain(command: str) -> list[str]:
    """Split a ``cmd1 && cmd2`` chain into its individual commands."""
    return [part.strip() for part in command.split("&&") if part.strip()]


def build_command(config: ScriptConfig) -> list[str]:
    """Return the argument vector for ``config``, empty without a command."""
    if not config.command:
        return []
    if not config.shell:
        return shlex.split(config.command)
    if sys.platform == "win32":
        return [os.environ.get("COMSPEC", "cmd.exe"), "/c", config.command]
    return ["/bin/sh", "-c", config.command]


def run_script(config: ScriptConfig) -> ScriptResult:
    """Run a single command and capture its output."""
    command = config.command or ""
    argv = build_command(config)
    if not argv:
        return ScriptResult(command=command, error="No command specified")

    timeout = config.timeout_ms / 1000 if config.timeout_ms else None
    try:
        completed = subprocess.run(  # noqa: S603
            argv,
            env={**os.environ, **config.env},
            cwd=config.cwd,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return ScriptResult(
            command=command,
            error=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except FileNotFoundError as e:
        return ScriptResult(command=command, error=str(e), command_not_found=True)
    except OSError as e:
        return ScriptResult(command=command, error=str(e))

    return ScriptResult(
        command=command,
        exit_code=completed.returncode,
        stdout=completed.stdout.decode("utf-8", errors="replace"),
        stderr=completed.stderr.decode("utf-8", errors="replace"),
    )


def run_chain(
    command: str,
    config: ScriptConfig | None = None,
    *,
    rewrite: Callable[[str], str] | None = None,
) -> Iterator[ScriptResult]:
    """Run each link of an ``&&`` chain, yielding results as they finish.

    Args:
        command: The full script string.
        config: Settings shared by every link; its ``command`` is ignored.
        rewrite: Applied to each link before it runs.

    Yields:
        One result per link that ran. Nothing after the first failure runs.
    """
    base = config or ScriptConfig()
    for part in split_chain(command):
        link = rewrite(part) if rewrite is not None else part
        result = run_script(dataclasses.replace(base, command=link))
        yield result
        if not result.success:
            return
