import os
from pathlib import Path

import platformdirs

MANIFEST_FILENAME = "pawn.json"


def get_pawnctl_home() -> Path:
    """Get the per-user pawnctl directory.

    Returns ``~/.pawnctl`` unless the ``PAWNCTL_HOME`` environment variable
    points somewhere else.
    """
    override = os.environ.get("PAWNCTL_HOME")
    if override:
        return Path(override)
    return Path.home() / ".pawnctl"


def get_state_file() -> Path:
    """Get the path to the persisted server process state."""
    return get_pawnctl_home() / "server-state.json"


def get_preferences_file() -> Path:
    """Get the path to the user preferences file."""
    return get_pawnctl_home() / "preferences.json"


def get_log_dir() -> Path:
    """Get the platform-specific directory for pawnctl log files.

    - Linux: ``~/.local/state/pawnctl/log``
    - macOS: ``~/Library/Logs/pawnctl``
    - Windows: ``%LOCALAPPDATA%\\pawnctl\\Logs``
    """
    return platformdirs.user_log_path("pawnctl")


def get_cli_log_file() -> Path:
    """Get the path to the CLI log file inside the log directory."""
    return get_log_dir() / "cli.log"


def manifest_candidates(root: Path) -> tuple[Path, ...]:
    """Return the locations a project manifest may live in, in lookup order."""
    return (root / MANIFEST_FILENAME, root / ".pawnctl" / MANIFEST_FILENAME)


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root by searching upward for a pawn.json manifest.

    Searches from the starting directory upward through parent directories
    until a directory containing a manifest is found. Falls back to the
    starting directory when the filesystem root is reached, since server
    and compiler binaries are looked up relative to it.

    Args:
        start: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        Path to the project root directory.
    """
    origin = (start or Path.cwd()).resolve()
    current = origin

    while True:
        if any(candidate.is_file() for candidate in manifest_candidates(current)):
            return current
        parent = current.parent
        if parent == current:  # Reached filesystem root
            return origin
        current = parent
