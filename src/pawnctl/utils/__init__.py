"""Shared utilities for pawnctl."""

from ._exec import (
    ScriptConfig,
    ScriptResult,
    build_command,
    run_chain,
    run_script,
    split_chain,
)
from ._globs import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_WATCH_PATTERNS,
    WatchGlobs,
    create_pathspec,
    matches_any,
)
from ._json import read_json_object, write_json_file
from ._logging import create_cli_logger
from ._paths import (
    MANIFEST_FILENAME,
    find_project_root,
    get_cli_log_file,
    get_log_dir,
    get_pawnctl_home,
    get_preferences_file,
    get_state_file,
    manifest_candidates,
)
from ._reporter import Reporter, Verbosity
from ._streams import iter_lines

__all__ = [
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_WATCH_PATTERNS",
    "MANIFEST_FILENAME",
    "Reporter",
    "ScriptConfig",
    "ScriptResult",
    "Verbosity",
    "WatchGlobs",
    "build_command",
    "create_cli_logger",
    "create_pathspec",
    "find_project_root",
    "get_cli_log_file",
    "get_log_dir",
    "get_pawnctl_home",
    "get_preferences_file",
    "get_state_file",
    "iter_lines",
    "manifest_candidates",
    "matches_any",
    "read_json_object",
    "run_chain",
    "run_script",
    "split_chain",
    "write_json_file",
]
