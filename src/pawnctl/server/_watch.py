"""Rebuild-and-restart loop driven by filesystem changes.

Only one rebuild/restart cycle runs at a time. Changes that arrive while a
cycle is in flight are dropped rather than queued, so a burst of saves
collapses into a single restart.
"""

from pathlib import Path
from typing import TYPE_CHECKING, final

import anyio

from pawnctl.exceptions import PawnctlError
from pawnctl.utils import WatchGlobs, create_pathspec, matches_any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from anyio.abc import TaskGroup
    from watchfiles import Change

    from pawnctl.utils import Reporter

    type ChangeBatch = set[tuple[Change, str]]


@final
class WatchLoop:
    """Watches source globs and serially runs build, stop, start.

    Attributes:
        cycles_started: Number of rebuild/restart cycles begun.
        triggers_ignored: Number of change batches dropped because a cycle
            was already running.
    """

    __slots__ = (
        "_build",
        "_ignore_spec",
        "_include_spec",
        "_reporter",
        "_restart_in_progress",
        "_root",
        "_start",
        "_stop",
        "cycles_started",
        "triggers_ignored",
    )

    def __init__(  # noqa: PLR0913
        self,
        root: Path,
        *,
        build: "Callable[[], Awaitable[bool]]",
        stop: "Callable[[], Awaitable[None]]",
        start: "Callable[[], Awaitable[None]]",
        reporter: "Reporter",
        globs: WatchGlobs | None = None,
    ) -> None:
        """Initialize the loop.

        Args:
            root: Project root; glob patterns are relative to it.
            build: Rebuilds the project, returning True on success.
            stop: Stops the running server, if any.
            start: Starts a fresh server.
            reporter: Output channel.
            globs: Include/ignore patterns. Defaults to the standard source
                folders.
        """
        globs = globs or WatchGlobs()
        self._root = root.resolve()
        self._build = build
        self._stop = stop
        self._start = start
        self._reporter = reporter
        self._include_spec = create_pathspec(globs.include)
        self._ignore_spec = create_pathspec(globs.ignore)
        self._restart_in_progress = False
        self.cycles_started = 0
        self.triggers_ignored = 0

    @property
    def restart_in_progress(self) -> bool:
        return self._restart_in_progress

    def _relative(self, path: str) -> str | None:
        candidate = Path(path)
        if not candidate.is_absolute():
            return candidate.as_posix()
        try:
            return candidate.resolve().relative_to(self._root).as_posix()
        except ValueError:
            return None

    def is_relevant(self, path: str) -> bool:
        """Check whether a changed path should trigger a rebuild."""
        relative = self._relative(path)
        if relative is None:
            return False
        if matches_any(self._ignore_spec, relative):
            return False
        return matches_any(self._include_spec, relative)

    def watch_filter(self, _change: "Change", path: str) -> bool:
        """Filter function for watchfiles."""
        return self.is_relevant(path)

    def relevant_paths(self, changes: "ChangeBatch") -> list[str]:
        return sorted(
            relative
            for _, path in changes
            if self.is_relevant(path) and (relative := self._relative(path))
        )

    async def _cycle(self, paths: list[str]) -> None:
        try:
            extra = f" (+{len(paths) - 1} more)" if len(paths) > 1 else ""
            self._reporter.info(f"Change detected: {paths[0]}{extra}")

            if not await self._build():
                self._reporter.error("Build failed; the server was not restarted")
                return

            self._reporter.info("Restarting server...")
            await self._stop()
            await self._start()
        except PawnctlError as e:
            self._reporter.error(str(e))
        finally:
            self._restart_in_progress = False

    def handle(self, changes: "ChangeBatch", task_group: "TaskGroup") -> bool:
        """Start a cycle for a batch of changes unless one is running.

        The in-flight flag is set before the cycle is scheduled, so a batch
        handled right after this call is already seen as concurrent.

        Returns:
            True if a cycle was started.
        """
        paths = self.relevant_paths(changes)
        if not paths:
            return False

        if self._restart_in_progress:
            self.triggers_ignored += 1
            self._reporter.detail(
                f"Restart already in progress; ignoring change to {paths[0]}"
            )
            return False

        self._restart_in_progress = True
        self.cycles_started += 1
        task_group.start_soon(self._cycle, paths)
        return True

    async def _watch(self, stop_event: anyio.Event) -> "AsyncIterator[ChangeBatch]":
        from watchfiles import awatch  # noqa: PLC0415

        async for changes in awatch(
            self._root,
            watch_filter=self.watch_filter,
            stop_event=stop_event,
            recursive=True,
        ):
            yield changes

    async def run(
        self,
        *,
        stop_event: anyio.Event,
        changes: "AsyncIterator[ChangeBatch] | None" = None,
    ) -> None:
        """Process change batches until the stop event is set.

        When stopped, an in-flight cycle is cancelled. When the change
        source simply runs out, the in-flight cycle is allowed to finish.

        Args:
            stop_event: Set to end the loop.
            changes: Change batches to process. Defaults to watching the
                project root with watchfiles.
        """
        source = changes if changes is not None else self._watch(stop_event)
        async with anyio.create_task_group() as tg:
            async for batch in source:
                if stop_event.is_set():
                    break
                _ = self.handle(batch, tg)
            if stop_event.is_set():
                tg.cancel_scope.cancel()
