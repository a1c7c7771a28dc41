"""User preferences stored in the per-user pawnctl directory."""

import os
from pathlib import Path  # noqa: TC003 - Used in runtime type annotations
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pawnctl.utils import get_preferences_file, read_json_object, write_json_file

GITHUB_TOKEN_ENV = "PAWNCTL_GITHUB_TOKEN"


class Preferences(BaseModel):
    """Per-user settings shared by every project.

    Attributes:
        editor: Preferred editor, e.g. ``VS Code``.
        default_author: Author name used for new manifests.
        github_token: Token for GitHub API access.
        setup_complete: Whether first-run setup has completed.
        window_mode: Whether ``start`` launches the server in its own window
            by default.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    editor: str | None = None
    default_author: str | None = Field(default=None, alias="defaultAuthor")
    github_token: str | None = Field(default=None, alias="githubToken")
    setup_complete: bool = Field(default=False, alias="setupComplete")
    window_mode: bool = Field(default=False, alias="windowMode")

    @property
    def effective_github_token(self) -> str | None:
        """Return the GitHub token, preferring the environment override."""
        return os.environ.get(GITHUB_TOKEN_ENV) or self.github_token


def load_preferences(path: Path | None = None) -> Preferences:
    """Load user preferences.

    Missing, unreadable or corrupt files yield default preferences.

    Args:
        path: Preferences file. Defaults to ``<pawnctl home>/preferences.json``.
    """
    file_path = path or get_preferences_file()
    try:
        return Preferences.model_validate(read_json_object(file_path) or {})
    except (OSError, ValidationError):
        return Preferences()


def save_preferences(preferences: Preferences, path: Path | None = None) -> Path:
    """Write user preferences with camelCase keys.

    Args:
        preferences: Preferences to persist.
        path: Preferences file. Defaults to ``<pawnctl home>/preferences.json``.

    Returns:
        The path that was written.

    Raises:
        OSError: If the file cannot be written.
    """
    file_path = path or get_preferences_file()
    write_json_file(
        file_path,
        preferences.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
    return file_path


def reset_preferences(path: Path | None = None) -> None:
    """Delete the preferences file if it exists."""
    file_path = path or get_preferences_file()
    file_path.unlink(missing_ok=True)
