"""Project manifest and user preference configuration."""

from ._manifest import (
    DEFAULT_COMPILER_OPTIONS,
    BuildProfile,
    CompilerConfig,
    ConstantValue,
    Manifest,
    find_manifest,
    load_manifest,
)
from ._preferences import (
    GITHUB_TOKEN_ENV,
    Preferences,
    load_preferences,
    reset_preferences,
    save_preferences,
)

__all__ = [
    "DEFAULT_COMPILER_OPTIONS",
    "GITHUB_TOKEN_ENV",
    "BuildProfile",
    "CompilerConfig",
    "ConstantValue",
    "Manifest",
    "Preferences",
    "find_manifest",
    "load_manifest",
    "load_preferences",
    "reset_preferences",
    "save_preferences",
]
