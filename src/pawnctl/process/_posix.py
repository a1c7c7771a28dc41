"""POSIX process control: signals, pkill/pgrep and terminal emulators."""

import os
import shlex
import shutil
import signal
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, final

from pawnctl.exceptions import TerminalNotFoundError

from ._controller import WindowLaunch

if TYPE_CHECKING:
    from collections.abc import Sequence

    import anyio.abc

GNOME_TERMINAL = Path("/usr/bin/gnome-terminal")


@final
class PosixProcessController:
    """Process control for Linux and macOS hosts."""

    __slots__ = ("_platform",)

    def __init__(self, platform: str = "linux") -> None:
        self._platform = platform

    @property
    def supports_signals(self) -> bool:
        return True

    @property
    def compiler_name(self) -> str:
        return "pawncc"

    @property
    def library_path_variable(self) -> str | None:
        # pawncc ships libpawnc.so next to the binary
        if self._platform.startswith("linux"):
            return "LD_LIBRARY_PATH"
        return None

    def server_executable_names(self) -> tuple[str, ...]:
        return ("omp-server", "samp03svr")

    def host_process_names(self) -> tuple[str, ...]:
        return ("omp-server", "samp-server", "samp03svr")

    def is_alive(self, pid: int) -> bool:
        if pid <= 0:
            return False
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists but belongs to another user
            return True
        except OSError:
            return False
        return True

    def interrupt(self, process: "anyio.abc.Process") -> None:
        process.send_signal(signal.SIGINT)

    def terminate(self, process: "anyio.abc.Process") -> None:
        process.terminate()

    def kill(self, process: "anyio.abc.Process") -> None:
        process.kill()

    def terminate_pid(self, pid: int, *, force: bool = False) -> bool:
        try:
            os.kill(pid, signal.SIGKILL if force else signal.SIGTERM)
        except ProcessLookupError:
            return False
        return True

    def kill_by_name(self, name: str) -> bool:
        result = subprocess.run(  # noqa: S603
            ["pkill", "-f", name],  # noqa: S607
            capture_output=True,
            check=False,
        )
        # pkill exits 1 when nothing matched
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            return False
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        msg = f"pkill failed with exit code {result.returncode}: {stderr}"
        raise OSError(msg)

    def find_pid(self, name: str) -> int | None:
        try:
            result = subprocess.run(  # noqa: S603
                ["pgrep", "-n", "-f", name],  # noqa: S607
                capture_output=True,
                check=False,
            )
        except OSError:
            return None
        if result.returncode != 0:
            return None
        for line in result.stdout.decode("utf-8", errors="replace").splitlines():
            if line.strip().isdigit():
                return int(line.strip())
        return None

    def build_window_command(
        self,
        executable: Path,
        arguments: "Sequence[str]",
        cwd: Path,
    ) -> tuple[str, ...]:
        """Pick a terminal emulator and build the command that opens it.

        Preference order is iTerm (when running inside it), gnome-terminal,
        then xterm.

        Raises:
            TerminalNotFoundError: If none of them is available.
        """
        server_command = shlex.join([str(executable), *arguments])

        if os.environ.get("TERM_PROGRAM") == "iTerm.app":
            shell_command = f"cd {shlex.quote(str(cwd))} && {server_command}"
            iterm_command = _applescript_string(
                f"/bin/sh -c {shlex.quote(shell_command)}"
            )
            script = (
                'tell application "iTerm" to create window with default profile '
                f"command {iterm_command}"
            )
            return ("osascript", "-e", script)

        if GNOME_TERMINAL.exists():
            return (str(GNOME_TERMINAL), "--", str(executable), *arguments)

        xterm = shutil.which("xterm")
        if xterm is not None:
            return (xterm, "-e", server_command)

        msg = (
            "No supported terminal emulator found "
            "(tried iTerm, gnome-terminal, xterm)"
        )
        raise TerminalNotFoundError(
            msg, manual_command=f"cd {shlex.quote(str(cwd))} && {server_command}"
        )

    def launch_window(
        self,
        executable: Path,
        arguments: "Sequence[str]",
        cwd: Path,
    ) -> WindowLaunch:
        command = self.build_window_command(executable, arguments, cwd)
        process = subprocess.Popen(  # noqa: S603
            command,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        return WindowLaunch(pid=process.pid, command=command)


def _applescript_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
