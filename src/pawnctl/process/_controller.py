"""Platform process-control strategy.

Everything that differs between Windows and POSIX hosts (liveness probes,
signal delivery, killing by name, launching a server in its own window)
lives behind the ProcessController protocol. One implementation is picked
per run with get_process_controller().
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    import anyio.abc


@dataclass(frozen=True, slots=True)
class WindowLaunch:
    """Result of launching a server in its own terminal window.

    Attributes:
        pid: Process id of the launcher that was spawned.
        command: The launcher command line.
        temp_files: Files created for the launch.
    """

    pid: int
    command: tuple[str, ...]
    temp_files: tuple[Path, ...] = field(default=())


@runtime_checkable
class ProcessController(Protocol):
    """Operating-system specific process control."""

    @property
    def supports_signals(self) -> bool:
        """Whether POSIX signals can be forwarded to a child."""
        ...

    @property
    def compiler_name(self) -> str:
        """File name of the pawncc binary on this platform."""
        ...

    @property
    def library_path_variable(self) -> str | None:
        """Environment variable the compiler needs to find its libraries."""
        ...

    def server_executable_names(self) -> tuple[str, ...]:
        """Server binary names to look for, in preference order."""
        ...

    def host_process_names(self) -> tuple[str, ...]:
        """Process names ``kill`` targets on the host."""
        ...

    def is_alive(self, pid: int) -> bool:
        """Probe whether a process id refers to a live process."""
        ...

    def interrupt(self, process: "anyio.abc.Process") -> None:
        """Ask an inline child to shut down as if Ctrl+C was pressed."""
        ...

    def terminate(self, process: "anyio.abc.Process") -> None:
        """Ask a child to terminate."""
        ...

    def kill(self, process: "anyio.abc.Process") -> None:
        """Forcibly end a child and its descendants."""
        ...

    def terminate_pid(self, pid: int, *, force: bool = False) -> bool:
        """Terminate a process by id.

        Returns:
            True if a signal or kill request was delivered.
        """
        ...

    def kill_by_name(self, name: str) -> bool:
        """Kill every process matching a name.

        Returns:
            True if at least one process was found.

        Raises:
            OSError: If the platform kill utility cannot be run.
        """
        ...

    def find_pid(self, name: str) -> int | None:
        """Return the id of the newest process matching a name."""
        ...

    def launch_window(
        self,
        executable: Path,
        arguments: "Sequence[str]",
        cwd: Path,
    ) -> WindowLaunch:
        """Start the server detached in a new terminal window.

        Raises:
            TerminalNotFoundError: If no terminal emulator is available.
            OSError: If the launcher cannot be spawned.
        """
        ...


def get_process_controller(platform: str | None = None) -> ProcessController:
    """Select the process controller for a platform.

    Args:
        platform: A ``sys.platform`` value. Defaults to the running platform.
    """
    platform = platform or sys.platform
    if platform == "win32":
        from ._windows import WindowsProcessController  # noqa: PLC0415

        return WindowsProcessController()

    from ._posix import PosixProcessController  # noqa: PLC0415

    return PosixProcessController(platform)
