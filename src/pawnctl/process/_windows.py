"""Windows process control: tasklist/taskkill and batch-file launchers."""

import csv
import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, final

from ._controller import WindowLaunch

if TYPE_CHECKING:
    from collections.abc import Sequence

    import anyio.abc

# taskkill exits 128 when no process matched
_TASKKILL_NOT_FOUND = 128

WINDOW_TITLE = "open.mp Server"


def _run(arguments: list[str]) -> subprocess.CompletedProcess[bytes]:
    return subprocess.run(  # noqa: S603
        arguments,
        capture_output=True,
        check=False,
    )


@final
class WindowsProcessController:
    """Process control for Windows hosts.

    Windows has no signal forwarding, so every stop request becomes a
    tree-kill through ``taskkill``.
    """

    __slots__ = ()

    @property
    def supports_signals(self) -> bool:
        return False

    @property
    def compiler_name(self) -> str:
        return "pawncc.exe"

    @property
    def library_path_variable(self) -> str | None:
        return None

    def server_executable_names(self) -> tuple[str, ...]:
        return ("omp-server.exe", "samp-server.exe")

    def host_process_names(self) -> tuple[str, ...]:
        return ("omp-server.exe", "samp-server.exe", "samp03svr.exe")

    def is_alive(self, pid: int) -> bool:
        if pid <= 0:
            return False
        try:
            result = _run(["tasklist", "/FI", f"PID eq {pid}", "/NH"])
        except OSError:
            return False
        output = result.stdout.decode("utf-8", errors="replace")
        return re.search(rf"\b{pid}\b", output) is not None

    def kill_tree(self, pid: int) -> bool:
        """Force-kill a process and all of its children."""
        try:
            result = _run(["taskkill", "/F", "/PID", str(pid), "/T"])
        except OSError:
            return False
        return result.returncode == 0

    def interrupt(self, process: "anyio.abc.Process") -> None:
        _ = self.kill_tree(process.pid)

    def terminate(self, process: "anyio.abc.Process") -> None:
        _ = self.kill_tree(process.pid)

    def kill(self, process: "anyio.abc.Process") -> None:
        if not self.kill_tree(process.pid):
            process.kill()

    def terminate_pid(self, pid: int, *, force: bool = False) -> bool:
        arguments = ["taskkill", "/PID", str(pid), "/T"]
        if force:
            arguments.insert(1, "/F")
        try:
            result = _run(arguments)
        except OSError:
            return False
        return result.returncode == 0

    def kill_by_name(self, name: str) -> bool:
        result = _run(["taskkill", "/F", "/IM", name, "/T"])
        if result.returncode == 0:
            return True
        if result.returncode == _TASKKILL_NOT_FOUND:
            return False
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        msg = f"taskkill failed with exit code {result.returncode}: {stderr}"
        raise OSError(msg)

    def find_pid(self, name: str) -> int | None:
        try:
            result = _run(
                ["tasklist", "/FI", f"IMAGENAME eq {name}", "/FO", "CSV", "/NH"]
            )
        except OSError:
            return None
        output = result.stdout.decode("utf-8", errors="replace")
        pids = [
            int(row[1])
            for row in csv.reader(output.splitlines())
            if len(row) > 1 and row[0].lower() == name.lower() and row[1].isdigit()
        ]
        return pids[-1] if pids else None

    def write_launcher(
        self,
        executable: Path,
        arguments: "Sequence[str]",
        cwd: Path,
    ) -> Path:
        """Write the batch file that opens the server in a minimized window."""
        quoted_arguments = " ".join(subprocess.list2cmdline([arg]) for arg in arguments)
        lines = [
            "@echo off",
            f'cd /d "{cwd}"',
            f'start "{WINDOW_TITLE}" /min "{executable}" {quoted_arguments}'.rstrip(),
        ]
        fd, name = tempfile.mkstemp(prefix="pawnctl-start-", suffix=".bat")
        with os.fdopen(fd, "w", encoding="utf-8", newline="\r\n") as handle:
            _ = handle.write("\n".join(lines) + "\n")
        return Path(name)

    def launch_window(
        self,
        executable: Path,
        arguments: "Sequence[str]",
        cwd: Path,
    ) -> WindowLaunch:
        launcher = self.write_launcher(executable, arguments, cwd)
        command = (os.environ.get("COMSPEC", "cmd.exe"), "/c", str(launcher))
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
            subprocess, "CREATE_NEW_PROCESS_GROUP", 0
        )
        try:
            process = subprocess.Popen(  # noqa: S603
                command,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                creationflags=flags,
            )
        except OSError:
            launcher.unlink(missing_ok=True)
            raise
        return WindowLaunch(pid=process.pid, command=command, temp_files=(launcher,))
