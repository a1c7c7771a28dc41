"""Server process lifecycle: spawning, output, pre-flight checks and watch mode."""

from ._manager import ServerManager, StopOutcome
from ._models import (
    DEFAULT_CONFIG_FILE,
    INLINE_STOP_TIMEOUT,
    WATCH_STOP_TIMEOUT,
    ServerEvent,
    ServerEventType,
    ServerLifecycle,
    StartOptions,
)
from ._output import (
    FormattedLine,
    LineKind,
    OutputSink,
    ServerOutputSink,
    format_server_line,
)
from ._preflight import (
    ServerConfigSummary,
    check_server_config,
    locate_server_config,
    read_server_config,
    run_preflight,
)
from ._process import ServerProcess, describe_exit, shell_exit_code
from ._watch import WatchLoop

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "INLINE_STOP_TIMEOUT",
    "WATCH_STOP_TIMEOUT",
    "FormattedLine",
    "LineKind",
    "OutputSink",
    "ServerConfigSummary",
    "ServerEvent",
    "ServerEventType",
    "ServerLifecycle",
    "ServerManager",
    "ServerOutputSink",
    "ServerProcess",
    "StartOptions",
    "StopOutcome",
    "WatchLoop",
    "check_server_config",
    "describe_exit",
    "format_server_line",
    "locate_server_config",
    "read_server_config",
    "run_preflight",
    "shell_exit_code",
]
