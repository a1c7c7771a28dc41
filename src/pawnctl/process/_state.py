"""Persisted record of the server process pawnctl currently owns.

A single JSON file under the per-user pawnctl directory lets a later,
independent invocation rediscover a server started earlier. Every access
is best-effort: read failures yield an empty record and write failures are
reported as warnings, never raised.
"""

from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, final

import orjson
import pendulum
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pawnctl.utils import Reporter, get_state_file, write_json_file

from ._controller import get_process_controller

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._controller import ProcessController


class ProcessState(BaseModel):
    """The tracked server process.

    A record without a pid is logically empty: no process is tracked.

    Attributes:
        pid: OS process id of the server (or of its launcher).
        server_path: Absolute path to the server executable.
        start_time: ISO-8601 timestamp of the launch.
        arguments: Arguments the server was started with.
        window_mode: Whether the server runs detached in its own window.
        temp_files: Files created for the launch that must be removed when
            the record is cleared.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    pid: int | None = None
    server_path: str | None = Field(default=None, alias="serverPath")
    start_time: str | None = Field(default=None, alias="startTime")
    arguments: tuple[str, ...] = ()
    window_mode: bool = Field(default=False, alias="windowMode")
    temp_files: tuple[str, ...] = Field(default=(), alias="tempFiles")

    @property
    def is_empty(self) -> bool:
        return self.pid is None

    @classmethod
    def for_launch(
        cls,
        *,
        pid: int,
        server_path: Path,
        arguments: "Iterable[str]" = (),
        window_mode: bool = False,
        temp_files: "Iterable[Path]" = (),
    ) -> "ProcessState":
        """Build the record for a freshly spawned process, stamped with now."""
        return cls(
            pid=pid,
            server_path=str(server_path),
            start_time=pendulum.now("UTC").to_iso8601_string(),
            arguments=tuple(arguments),
            window_mode=window_mode,
            temp_files=tuple(str(path) for path in temp_files),
        )


def remove_temp_files(
    state: ProcessState,
    reporter: Reporter | None = None,
) -> list[str]:
    """Delete the temporary launch files a record refers to.

    Args:
        state: Record whose ``temp_files`` should be removed.
        reporter: Receives a warning for each file that cannot be deleted.

    Returns:
        The paths that could not be deleted.
    """
    failed: list[str] = []
    for temp_file in state.temp_files:
        try:
            Path(temp_file).unlink(missing_ok=True)
        except OSError as e:
            failed.append(temp_file)
            if reporter is not None:
                reporter.warn(f"Could not remove temporary file {temp_file}: {e}")
    return failed


@final
class ServerStateStore:
    """Load, save and clear the single persisted ProcessState."""

    __slots__ = ("_controller", "_path", "_reporter")

    def __init__(
        self,
        path: Path | None = None,
        *,
        controller: "ProcessController | None" = None,
        reporter: Reporter | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            path: State file. Defaults to ``<pawnctl home>/server-state.json``.
            controller: Liveness probe. Defaults to the current platform's.
            reporter: Receives warnings about I/O failures.
        """
        self._path = path or get_state_file()
        self._controller = controller or get_process_controller()
        self._reporter = reporter or Reporter()

    @property
    def path(self) -> Path:
        return self._path

    def save(self, state: ProcessState) -> bool:
        """Persist the record, replacing any previous one.

        Returns:
            True if the file was written. Failures are reported as warnings.
        """
        try:
            write_json_file(
                self._path,
                state.model_dump(mode="json", by_alias=True, exclude_none=True),
            )
        except (OSError, TypeError) as e:
            self._reporter.warn(f"Failed to save server state: {e}")
            return False
        return True

    def load(self) -> ProcessState:
        """Read the record, or an empty one if it is missing or corrupt."""
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return ProcessState()
        except OSError as e:
            self._reporter.detail(f"Could not read server state: {e}")
            return ProcessState()

        try:
            return ProcessState.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValidationError) as e:
            self._reporter.detail(f"Ignoring corrupt server state file: {e}")
            return ProcessState()

    def clear(self) -> None:
        """Delete the record. Failures are reported as warnings."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            self._reporter.warn(f"Failed to clear server state: {e}")

    def discard(self, state: ProcessState | None = None) -> None:
        """Remove the record's temporary files, then clear the record."""
        _ = remove_temp_files(state or self.load(), self._reporter)
        self.clear()

    def is_running(self) -> bool:
        """Check whether the tracked process is alive.

        The probe is best-effort and not atomic with whatever the caller
        does next.
        """
        state = self.load()
        if state.pid is None:
            return False
        return self._controller.is_alive(state.pid)
