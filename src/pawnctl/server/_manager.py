"""Lifecycle manager for the single server process pawnctl owns.

ServerManager decides whether a server is already running, spawns one
inline, in its own window, or under the watch loop, and makes sure the
persisted state is cleared on every path that ends a server.
"""

import signal
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, final

import anyio

from pawnctl.exceptions import (
    ManifestNotFoundError,
    ServerAlreadyRunningError,
    ServerConfigNotFoundError,
    ServerExecutableNotFoundError,
    ServerNotRunningError,
    ServerStartError,
)
from pawnctl.process import ProcessState, ServerStateStore, get_process_controller
from pawnctl.utils import Reporter

from ._models import (
    DEFAULT_CONFIG_FILE,
    INLINE_STOP_TIMEOUT,
    WATCH_STOP_TIMEOUT,
    ServerLifecycle,
    StartOptions,
)
from ._output import ServerOutputSink
from ._preflight import run_preflight
from ._process import ServerProcess, StopMethod, shell_exit_code
from ._watch import WatchLoop

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from anyio.abc import TaskGroup

    from pawnctl.process import ProcessController
    from pawnctl.utils import WatchGlobs

    from ._output import OutputSink

WINDOW_DISCOVERY_DELAY = 1.0
"""Seconds to wait after a window launch before looking up the server pid."""

STOP_SETTLE_DELAY = 1.0
"""Seconds ``stop`` waits before checking that the server is gone."""


@dataclass(frozen=True, slots=True)
class StopOutcome:
    """Result of stopping the tracked server.

    Attributes:
        pid: The tracked pid, or None if nothing was tracked.
        was_running: Whether the tracked pid was alive before stopping.
        stopped: Whether it is gone afterwards.
    """

    pid: int | None
    was_running: bool
    stopped: bool


@final
class ServerManager:
    """Owns the server lifecycle for one project root.

    Attributes:
        lifecycle: Current lifecycle state.
    """

    __slots__ = (
        "_controller",
        "_output_sink",
        "_reporter",
        "_root",
        "_server",
        "_store",
        "_task_group",
        "lifecycle",
        "window_discovery_delay",
    )

    def __init__(
        self,
        root: Path,
        *,
        store: ServerStateStore | None = None,
        controller: "ProcessController | None" = None,
        reporter: Reporter | None = None,
        output_sink: "OutputSink | None" = None,
    ) -> None:
        """Initialize the manager.

        Args:
            root: Project root holding the server executable.
            store: Persisted state. Defaults to the per-user state file.
            controller: Platform strategy. Defaults to the running platform's.
            reporter: Output channel.
            output_sink: Receives server output lines and events. Defaults
                to a ServerOutputSink over the reporter.
        """
        self._root = root
        self._reporter = reporter or Reporter()
        self._controller = controller or get_process_controller()
        self._store = store or ServerStateStore(
            controller=self._controller, reporter=self._reporter
        )
        self._output_sink = output_sink or ServerOutputSink(self._reporter)
        self._server: ServerProcess | None = None
        self._task_group: TaskGroup | None = None
        self.lifecycle = ServerLifecycle.IDLE
        self.window_discovery_delay = WINDOW_DISCOVERY_DELAY

    @property
    def store(self) -> ServerStateStore:
        return self._store

    @property
    def server(self) -> ServerProcess | None:
        """The server spawned by this manager, if one is live."""
        return self._server

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve_executable(self) -> Path:
        """Find the server binary in the project root.

        Raises:
            ServerExecutableNotFoundError: If no known server binary exists.
        """
        names = self._controller.server_executable_names()
        searched = tuple(self._root / name for name in names)
        for candidate in searched:
            if candidate.is_file():
                return candidate.resolve()

        looked_for = ", ".join(names)
        msg = f"Server executable not found in {self._root} (looked for {looked_for})"
        raise ServerExecutableNotFoundError(msg, searched=searched)

    def build_server_arguments(self, options: StartOptions) -> list[str]:
        """Build the server's command-line arguments.

        ``--config`` is only passed for a non-default config file.

        Raises:
            ServerConfigNotFoundError: If the requested config file is missing.
        """
        arguments: list[str] = []
        if options.config and options.config != DEFAULT_CONFIG_FILE:
            config_path = self._root / options.config
            if not config_path.is_file():
                msg = f"Server config file not found: {options.config}"
                raise ServerConfigNotFoundError(msg, path=config_path)
            arguments.append(f"--config={options.config}")
        if options.debug:
            arguments.append("--debug")
        return arguments

    def check_existing(self, options: StartOptions) -> ProcessState | None:
        """Apply the already-running guard.

        A record whose pid is dead is cleared first.

        Returns:
            The running server's record when attaching, otherwise None.

        Raises:
            ServerAlreadyRunningError: If a server runs and attach was not
                requested.
            ServerNotRunningError: If attach was requested and nothing runs.
        """
        state = self._store.load()
        if state.pid is not None and not self._controller.is_alive(state.pid):
            self._reporter.detail(f"Clearing stale server state (pid {state.pid})")
            self.clear_state(state)
            state = ProcessState()

        if options.existing:
            if state.is_empty:
                msg = "No running server to attach to. Start one with 'pawnctl start'"
                raise ServerNotRunningError(msg)
            return state

        if not state.is_empty:
            msg = (
                f"Server is already running (pid {state.pid}). "
                "Use 'pawnctl start --existing' to attach or 'pawnctl stop' to stop it"
            )
            raise ServerAlreadyRunningError(msg, pid=state.pid)
        return None

    def clear_state(self, state: ProcessState | None = None) -> None:
        """Remove the record's temporary files and clear the record."""
        self._store.discard(state)

    # -------------------------------------------------------------------------
    # Start
    # -------------------------------------------------------------------------

    async def start(
        self,
        options: StartOptions,
        *,
        builder: "Callable[[], Awaitable[bool]] | None" = None,
        globs: "WatchGlobs | None" = None,
    ) -> int:
        """Start (or attach to) the server according to the options.

        Args:
            options: Start options.
            builder: Rebuilds the project; required for watch mode.
            globs: Watch patterns for watch mode.

        Returns:
            The exit code for the command.

        Raises:
            ServerError: For any of the refusal or spawn failures.
            ManifestNotFoundError: If watch mode has nothing to rebuild with.
        """
        attached = self.check_existing(options)
        if attached is not None:
            self.lifecycle = ServerLifecycle.ATTACHED
            self._report_attached(attached)
            return 0

        executable = self.resolve_executable()
        arguments = self.build_server_arguments(options)
        run_preflight(self._root, options.config, self._reporter)

        if options.watch:
            if builder is None:
                msg = "Watch mode needs a pawn.json to rebuild from"
                raise ManifestNotFoundError(msg)
            return await self.run_watch(executable, arguments, builder, globs=globs)
        if options.window:
            return await self.start_window(executable, arguments)
        return await self.run_inline(executable, arguments)

    def _report_attached(self, state: ProcessState) -> None:
        self._reporter.success(f"Attached to running server (pid {state.pid})")
        if state.server_path:
            self._reporter.key_value("Executable", state.server_path)
        if state.start_time:
            self._reporter.key_value("Started", state.start_time)
        self._reporter.key_value("Mode", "window" if state.window_mode else "inline")

    def _new_process(
        self, executable: Path, arguments: "Sequence[str]"
    ) -> ServerProcess:
        return ServerProcess(
            executable,
            arguments,
            cwd=self._root,
            controller=self._controller,
            output_sink=self._output_sink,
        )

    async def _launch(self, server: ServerProcess) -> int:
        self.lifecycle = ServerLifecycle.STARTING
        self._reporter.routine(f"Starting {server.executable.name}...")
        try:
            pid = await server.start()
        except ServerStartError:
            self.lifecycle = ServerLifecycle.IDLE
            self.clear_state()
            raise

        self._server = server
        _ = self._store.save(
            ProcessState.for_launch(
                pid=pid, server_path=server.executable, arguments=server.arguments
            )
        )
        self.lifecycle = ServerLifecycle.RUNNING
        return pid

    async def _forward_signals(self, server: ServerProcess) -> None:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
            async for signum in signals:
                self.lifecycle = ServerLifecycle.STOPPING
                self._reporter.info(
                    f"Received {signal.Signals(signum).name}, stopping server..."
                )
                await self._stop_process(server, "interrupt", INLINE_STOP_TIMEOUT)
                return

    async def _stop_process(
        self,
        server: ServerProcess,
        method: StopMethod,
        timeout: float,
    ) -> None:
        # Shielded so a cancelled caller cannot leave the process running.
        with anyio.CancelScope(shield=True):
            exit_code = await server.stop(method, timeout)
        if exit_code is None:
            self._reporter.warn(
                f"Server (pid {server.pid}) did not exit after being killed"
            )

    async def run_inline(self, executable: Path, arguments: "Sequence[str]") -> int:
        """Run the server attached to this terminal until it exits.

        SIGINT and SIGTERM are forwarded to the server (escalating to a
        kill after a grace period) where the platform supports signals.

        Returns:
            0 after a requested stop, otherwise the server's own exit code.
        """
        server = self._new_process(executable, arguments)
        _ = await self._launch(server)

        try:
            async with anyio.create_task_group() as tg:
                if self._controller.supports_signals:
                    tg.start_soon(self._forward_signals, server)
                exit_code = await server.wait()
                tg.cancel_scope.cancel()
        finally:
            self._server = None
            self.lifecycle = ServerLifecycle.IDLE
            self.clear_state()

        if server.stop_requested:
            return 0
        return shell_exit_code(exit_code)

    async def start_window(self, executable: Path, arguments: "Sequence[str]") -> int:
        """Launch the server detached in its own terminal window.

        The real server pid is recorded when it can be found by name after
        the launcher starts; otherwise the launcher pid is kept.

        Raises:
            TerminalNotFoundError: If no terminal emulator is available.
            ServerStartError: If the launcher cannot be spawned.
        """
        self.lifecycle = ServerLifecycle.STARTING
        try:
            launch = self._controller.launch_window(executable, arguments, self._root)
        except OSError as e:
            self.lifecycle = ServerLifecycle.IDLE
            self.clear_state()
            msg = f"Failed to launch server window: {e}"
            raise ServerStartError(msg, executable=executable, cause=e) from e
        except Exception:
            self.lifecycle = ServerLifecycle.IDLE
            raise

        self._reporter.detail(f"Launcher: {' '.join(launch.command)}")
        await anyio.sleep(self.window_discovery_delay)
        pid = self._controller.find_pid(executable.name) or launch.pid

        _ = self._store.save(
            ProcessState.for_launch(
                pid=pid,
                server_path=executable,
                arguments=arguments,
                window_mode=True,
                temp_files=launch.temp_files,
            )
        )
        self.lifecycle = ServerLifecycle.RUNNING
        self._reporter.success(f"Server launched in a new window (pid {pid})")
        self._reporter.info("Use 'pawnctl stop' to stop it")
        return 0

    # -------------------------------------------------------------------------
    # Watch mode
    # -------------------------------------------------------------------------

    async def _supervise(self, server: ServerProcess) -> None:
        _ = await server.wait()
        if server.stop_requested or self._server is not server:
            return
        self._server = None
        self.lifecycle = ServerLifecycle.IDLE
        self.clear_state()
        self._reporter.warn(
            "Server is no longer running; it will start again after the next change"
        )

    async def _start_watched(
        self, executable: Path, arguments: "Sequence[str]"
    ) -> None:
        if self._task_group is None:
            msg = "Watch mode is not active"
            raise RuntimeError(msg)
        server = self._new_process(executable, arguments)
        _ = await self._launch(server)
        self._task_group.start_soon(self._supervise, server)

    async def _stop_watched(self) -> None:
        server = self._server
        if server is not None and server.is_running:
            self.lifecycle = ServerLifecycle.STOPPING
            await self._stop_process(server, "terminate", WATCH_STOP_TIMEOUT)
        self._server = None
        self.clear_state()
        self.lifecycle = ServerLifecycle.IDLE

    async def _wait_for_interrupt(self, stop_event: anyio.Event) -> None:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
            async for _signum in signals:
                self._reporter.info("Stopping watch mode...")
                stop_event.set()
                return

    async def run_watch(
        self,
        executable: Path,
        arguments: "Sequence[str]",
        builder: "Callable[[], Awaitable[bool]]",
        *,
        globs: "WatchGlobs | None" = None,
        stop_event: anyio.Event | None = None,
    ) -> int:
        """Run the server and rebuild/restart it when sources change.

        Returns:
            0 once the loop is interrupted and the server is stopped.
        """
        stop_event = stop_event or anyio.Event()
        server = self._new_process(executable, arguments)
        _ = await self._launch(server)

        loop = WatchLoop(
            self._root,
            build=builder,
            stop=self._stop_watched,
            start=partial(self._start_watched, executable, arguments),
            reporter=self._reporter,
            globs=globs,
        )

        try:
            async with anyio.create_task_group() as tg:
                self._task_group = tg
                tg.start_soon(self._supervise, server)
                if self._controller.supports_signals:
                    tg.start_soon(self._wait_for_interrupt, stop_event)
                self._reporter.info("Watching for changes (Ctrl+C to stop)")
                await loop.run(stop_event=stop_event)
                await self._stop_watched()
                tg.cancel_scope.cancel()
        finally:
            self._task_group = None
            await self._stop_watched()
        return 0

    # -------------------------------------------------------------------------
    # Stop / kill
    # -------------------------------------------------------------------------

    def abort(self) -> None:
        """Synchronously force-kill whatever is tracked and clear the state.

        Used when an interrupt arrives as KeyboardInterrupt instead of a
        signal the event loop can receive.
        """
        pid = self._server.pid if self._server is not None else self._store.load().pid
        if pid is not None and self._controller.is_alive(pid):
            try:
                _ = self._controller.terminate_pid(pid, force=True)
            except OSError as e:
                self._reporter.warn(f"Failed to kill server (pid {pid}): {e}")
        self._server = None
        self.lifecycle = ServerLifecycle.IDLE
        self.clear_state()

    async def stop_tracked(self, *, force: bool = False) -> StopOutcome:
        """Stop the server recorded in the state file.

        State is cleared whether or not the process cooperated.
        """
        state = self._store.load()
        if state.pid is None or not self._controller.is_alive(state.pid):
            self.clear_state(state)
            return StopOutcome(pid=state.pid, was_running=False, stopped=True)

        self.lifecycle = ServerLifecycle.STOPPING
        try:
            _ = self._controller.terminate_pid(state.pid, force=force)
        except OSError as e:
            self._reporter.warn(f"Failed to signal server (pid {state.pid}): {e}")

        await anyio.sleep(STOP_SETTLE_DELAY)
        stopped = not self._controller.is_alive(state.pid)

        self.clear_state(state)
        self.lifecycle = ServerLifecycle.IDLE
        return StopOutcome(pid=state.pid, was_running=True, stopped=stopped)

    def kill_all(self) -> list[str]:
        """Kill every known server process on the host and clear the state.

        Returns:
            Names of the process kinds that were found and killed.
        """
        killed: list[str] = []
        for name in self._controller.host_process_names():
            try:
                if self._controller.kill_by_name(name):
                    killed.append(name)
            except OSError as e:
                self._reporter.warn(f"Failed to kill {name}: {e}")
        self._server = None
        self.lifecycle = ServerLifecycle.IDLE
        self.clear_state()
        return killed
