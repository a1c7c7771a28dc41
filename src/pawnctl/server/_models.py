"""Data models for the server lifecycle.

- ServerLifecycle: States of the single managed server
- ServerEventType: Lifecycle events reported to an output sink
- ServerEvent: Immutable event records
- StartOptions: What the ``start`` command asked for
"""

from dataclasses import dataclass
from enum import StrEnum

import pendulum

DEFAULT_CONFIG_FILE = "config.json"
"""Config file the server reads when no ``--config`` flag is passed."""

INLINE_STOP_TIMEOUT = 3.0
"""Seconds an inline server gets to exit after Ctrl+C before it is killed."""

WATCH_STOP_TIMEOUT = 2.0
"""Seconds a watched server gets to exit before it is killed."""


class ServerLifecycle(StrEnum):
    """Server lifecycle states.

    - IDLE: No server is owned
    - STARTING: The executable is being spawned
    - RUNNING: A server spawned by this invocation is running
    - ATTACHED: A server started earlier was found and adopted
    - STOPPING: Shutdown has been requested
    """

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    ATTACHED = "attached"
    STOPPING = "stopping"


class ServerEventType(StrEnum):
    """Types of server lifecycle events."""

    STARTED = "started"
    EXITED = "exited"
    CRASHED = "crashed"
    STOPPED = "stopped"
    SIGNAL_FAILED = "signal_failed"


@dataclass(frozen=True, slots=True)
class ServerEvent:
    """Immutable server lifecycle event.

    Attributes:
        event_type: Type of lifecycle event.
        timestamp: ISO 8601 formatted timestamp.
        pid: Process ID if applicable.
        exit_code: Exit code if the process terminated.
        message: Optional human-readable message.
    """

    event_type: ServerEventType
    timestamp: str
    pid: int | None = None
    exit_code: int | None = None
    message: str | None = None

    @classmethod
    def now(
        cls,
        event_type: ServerEventType,
        *,
        pid: int | None = None,
        exit_code: int | None = None,
        message: str | None = None,
    ) -> "ServerEvent":
        return cls(
            event_type=event_type,
            timestamp=pendulum.now("UTC").to_iso8601_string(),
            pid=pid,
            exit_code=exit_code,
            message=message,
        )


@dataclass(frozen=True, slots=True)
class StartOptions:
    """Options for starting a server.

    Attributes:
        config: Server config file, relative to the project root.
        debug: Pass ``--debug`` to the server.
        existing: Attach to an already running server instead of starting one.
        window: Launch detached in a new terminal window.
        watch: Rebuild and restart when sources change. Implies inline mode.
    """

    config: str | None = None
    debug: bool = False
    existing: bool = False
    window: bool = False
    watch: bool = False

    @property
    def inline(self) -> bool:
        return self.watch or not self.window
