"""pawnctl exceptions."""

from pathlib import Path  # noqa: TC003 - Used in runtime type annotations


class PawnctlError(Exception):
    """Base exception for pawnctl errors."""


# =============================================================================
# Manifest Exceptions
# =============================================================================


class ManifestError(PawnctlError):
    """Raised when the project manifest cannot be read or parsed."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and manifest location.

        Args:
            message: Human-readable error message.
            path: Path to the manifest that failed to load.
        """
        super().__init__(message)
        self.path: Path | None = path


class ManifestNotFoundError(ManifestError):
    """Raised when a command requires a manifest and none exists."""


class ScriptNotFoundError(PawnctlError, KeyError):
    """Raised when a manifest script cannot be found by name.

    Attributes:
        script_name: The name of the script that was not found.
        available: Names of the scripts the manifest does define.
    """

    def __init__(
        self,
        message: str,
        *,
        script_name: str,
        available: tuple[str, ...] = (),
    ) -> None:
        """Initialize with error message and script context."""
        super().__init__(message)
        self.script_name: str = script_name
        self.available: tuple[str, ...] = available

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


# =============================================================================
# Build Exceptions
# =============================================================================


class BuildError(PawnctlError):
    """Base exception for build errors."""


class CompilerNotFoundError(BuildError):
    """Raised when no pawncc binary exists in any known location.

    Attributes:
        searched: The candidate paths that were checked, in order.
    """

    def __init__(self, message: str, *, searched: tuple[Path, ...] = ()) -> None:
        """Initialize with error message and searched locations."""
        super().__init__(message)
        self.searched: tuple[Path, ...] = searched


class InputFileNotFoundError(BuildError):
    """Raised when the file to compile does not exist."""

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialize with error message and the missing input path."""
        super().__init__(message)
        self.path: Path = path


class BuildProfileNotFoundError(BuildError, KeyError):
    """Raised when a requested build profile is not declared in the manifest.

    Attributes:
        profile: The requested profile name.
        available: Names of the profiles the manifest does declare.
    """

    def __init__(
        self,
        message: str,
        *,
        profile: str,
        available: tuple[str, ...] = (),
    ) -> None:
        """Initialize with error message and profile context."""
        super().__init__(message)
        self.profile: str = profile
        self.available: tuple[str, ...] = available

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class InvalidDebugLevelError(BuildError, ValueError):
    """Raised when a compiler debug level outside 1-3 is requested."""

    def __init__(self, message: str, *, level: int) -> None:
        """Initialize with error message and the rejected level."""
        super().__init__(message)
        self.level: int = level


# =============================================================================
# Server Exceptions
# =============================================================================


class ServerError(PawnctlError):
    """Base exception for server lifecycle errors."""


class ServerExecutableNotFoundError(ServerError):
    """Raised when no server binary exists in the project directory.

    Attributes:
        searched: The candidate paths that were checked, in order.
    """

    def __init__(self, message: str, *, searched: tuple[Path, ...] = ()) -> None:
        """Initialize with error message and searched locations."""
        super().__init__(message)
        self.searched: tuple[Path, ...] = searched


class ServerConfigNotFoundError(ServerError):
    """Raised when an explicitly requested server config file is missing."""

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialize with error message and the missing config path."""
        super().__init__(message)
        self.path: Path = path


class ServerAlreadyRunningError(ServerError):
    """Raised when starting while a tracked server process is alive.

    Attributes:
        pid: Process ID of the server that is already running.
    """

    def __init__(self, message: str, *, pid: int | None = None) -> None:
        """Initialize with error message and the running server's pid."""
        super().__init__(message)
        self.pid: int | None = pid


class ServerNotRunningError(ServerError):
    """Raised when attaching to a server but none is tracked or alive."""


class ServerStartError(ServerError):
    """Raised when the server process fails to spawn.

    Attributes:
        executable: The executable that failed to start.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        executable: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and spawn context."""
        super().__init__(message)
        self.executable: Path | None = executable
        self.cause: Exception | None = cause


class TerminalNotFoundError(ServerError):
    """Raised when window mode cannot find a terminal emulator to launch.

    Attributes:
        manual_command: The command line the user can run by hand instead.
    """

    def __init__(self, message: str, *, manual_command: str) -> None:
        """Initialize with error message and fallback instructions."""
        super().__init__(message)
        self.manual_command: str = manual_command
