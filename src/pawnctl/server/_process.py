"""A single inline server process.

ServerProcess spawns the server with piped output, streams each line to an
OutputSink, and stops it with a graceful request followed by a forced kill
once the grace period runs out.
"""

import subprocess
from pathlib import Path  # noqa: TC003 - Used in runtime type annotations
from typing import TYPE_CHECKING, Literal, final

import anyio
import anyio.abc

from pawnctl.exceptions import ServerStartError
from pawnctl.utils import iter_lines

from ._models import ServerEvent, ServerEventType

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pawnctl.process import ProcessController

    from ._output import OutputSink, Stream

StopMethod = Literal["interrupt", "terminate"]

KILL_WAIT_TIMEOUT = 5.0


def describe_exit(exit_code: int) -> str:
    """Describe an exit code, naming the signal for negative POSIX codes."""
    if exit_code < 0:
        import signal  # noqa: PLC0415

        try:
            name = signal.Signals(-exit_code).name
        except ValueError:
            name = f"signal {-exit_code}"
        return f"terminated by {name}"
    return f"exited with code {exit_code}"


def shell_exit_code(exit_code: int) -> int:
    """Map a negative (signal) return code to the shell's ``128 + n`` form."""
    return 128 - exit_code if exit_code < 0 else exit_code


@final
class ServerProcess:
    """Owns one spawned server executable.

    Attributes:
        executable: Server binary.
        arguments: Arguments passed to it.
        cwd: Working directory (the project root).
    """

    __slots__ = (
        "_controller",
        "_output_sink",
        "_process",
        "_stop_requested",
        "arguments",
        "cwd",
        "executable",
    )

    def __init__(
        self,
        executable: Path,
        arguments: "Sequence[str]",
        *,
        cwd: Path,
        controller: "ProcessController",
        output_sink: "OutputSink",
    ) -> None:
        self.executable = executable
        self.arguments = tuple(arguments)
        self.cwd = cwd
        self._controller = controller
        self._output_sink = output_sink
        self._process: anyio.abc.Process | None = None
        self._stop_requested = False

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process is not None else None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    @property
    def stop_requested(self) -> bool:
        """Whether the process ended because stop() was called."""
        return self._stop_requested

    async def emit_event(
        self,
        event_type: ServerEventType,
        *,
        message: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        event = ServerEvent.now(
            event_type, pid=self.pid, exit_code=exit_code, message=message
        )
        try:  # noqa: SIM105
            await self._output_sink.write_event(event)
        except Exception:  # noqa: BLE001, S110
            # Output sink errors should not crash the server
            pass

    async def start(self) -> int:
        """Spawn the server.

        Returns:
            The server's process id.

        Raises:
            ServerStartError: If the executable cannot be spawned.
        """
        try:
            self._process = await anyio.open_process(
                [str(self.executable), *self.arguments],
                cwd=self.cwd,
                stdin=None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            msg = f"Failed to start server {self.executable}: {e}"
            raise ServerStartError(msg, executable=self.executable, cause=e) from e

        self._stop_requested = False
        await self.emit_event(
            ServerEventType.STARTED,
            message=f"Server started (pid {self._process.pid})",
        )
        return self._process.pid

    async def _stream_output(
        self,
        stream: "anyio.abc.ByteReceiveStream",
        stream_name: "Stream",
        pid: int,
    ) -> None:
        async for line in iter_lines(stream):
            try:  # noqa: SIM105
                await self._output_sink.write_line(pid, stream_name, line)
            except Exception:  # noqa: BLE001, S110
                # Output sink errors should not crash streaming
                pass

    async def wait(self) -> int:
        """Stream output until the server exits.

        Returns:
            The raw exit code (negative for a POSIX signal).

        Raises:
            ServerStartError: If the server was never started.
        """
        process = self._process
        if process is None:
            msg = "Server process has not been started"
            raise ServerStartError(msg, executable=self.executable)

        async with anyio.create_task_group() as tg:
            if process.stdout is not None:
                tg.start_soon(
                    self._stream_output, process.stdout, "stdout", process.pid
                )
            if process.stderr is not None:
                tg.start_soon(
                    self._stream_output, process.stderr, "stderr", process.pid
                )
            exit_code = await process.wait()

        if self._stop_requested:
            await self.emit_event(
                ServerEventType.STOPPED, exit_code=exit_code, message="Server stopped"
            )
        elif exit_code == 0:
            await self.emit_event(
                ServerEventType.EXITED, exit_code=exit_code, message="Server exited"
            )
        else:
            await self.emit_event(
                ServerEventType.CRASHED,
                exit_code=exit_code,
                message=f"Server {describe_exit(exit_code)}",
            )
        return exit_code

    async def stop(
        self,
        method: StopMethod = "terminate",
        timeout: float = 2.0,
    ) -> int | None:
        """Stop the server, escalating to a forced kill after the timeout.

        Signal delivery failures are reported as events, never raised.

        Args:
            method: ``interrupt`` sends the Ctrl+C equivalent, ``terminate``
                sends SIGTERM (a tree-kill on Windows).
            timeout: Seconds to wait before the forced kill.

        Returns:
            The exit code, or None if the process could not be reaped.
        """
        process = self._process
        if process is None or process.returncode is not None:
            return self.returncode

        self._stop_requested = True
        try:
            if method == "interrupt":
                self._controller.interrupt(process)
            else:
                self._controller.terminate(process)
        except ProcessLookupError:
            pass
        except OSError as e:
            await self.emit_event(
                ServerEventType.SIGNAL_FAILED,
                message=f"Failed to signal server (pid {process.pid}): {e}",
            )

        with anyio.move_on_after(timeout):
            _ = await process.wait()

        if process.returncode is None:
            try:
                self._controller.kill(process)
            except ProcessLookupError:
                pass
            except OSError as e:
                await self.emit_event(
                    ServerEventType.SIGNAL_FAILED,
                    message=f"Failed to kill server (pid {process.pid}): {e}",
                )
            with anyio.move_on_after(KILL_WAIT_TIMEOUT):
                _ = await process.wait()

        return process.returncode
