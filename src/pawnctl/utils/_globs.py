"""Gitignore-style pattern matching using pathspec.

This module provides the glob sets that decide which source-tree changes
trigger a rebuild in watch mode, and helpers for matching paths against them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pathspec import PathSpec


DEFAULT_WATCH_PATTERNS: tuple[str, ...] = (
    "gamemodes/**/*.pwn",
    "gamemodes/**/*.inc",
    "filterscripts/**/*.pwn",
    "filterscripts/**/*.inc",
    "includes/**/*.inc",
    "includes/**/*.pwn",
)
"""Source files whose changes trigger a rebuild and restart."""


DEFAULT_IGNORE_PATTERNS: frozenset[str] = frozenset(
    {
        "*.amx",
        ".git/",
        ".pawnctl/",
        "node_modules/",
    }
)
"""Patterns that never trigger a rebuild, even under a watched folder.

Compiler output lands next to the sources, so ignoring it keeps a build from
triggering the next one.
"""


@dataclass(frozen=True, slots=True)
class WatchGlobs:
    """Include and ignore pattern sets for the watch loop.

    Attributes:
        include: Patterns a path must match to count as a source change.
        ignore: Patterns that exclude a path even when it is included.
    """

    include: tuple[str, ...] = DEFAULT_WATCH_PATTERNS
    ignore: tuple[str, ...] = field(
        default_factory=lambda: tuple(sorted(DEFAULT_IGNORE_PATTERNS))
    )


def create_pathspec(patterns: "Iterable[str]") -> "PathSpec":
    """Create a PathSpec from gitignore-style patterns.

    Patterns are deduplicated while preserving order.

    Args:
        patterns: Patterns to compile.

    Returns:
        A PathSpec instance configured with gitignore-style pattern matching.
    """
    from pathspec import PathSpec as PathSpecClass  # noqa: PLC0415
    from pathspec.patterns.gitwildmatch import GitWildMatchPattern  # noqa: PLC0415

    unique = list(dict.fromkeys(patterns))
    return PathSpecClass.from_lines(GitWildMatchPattern, unique)


def matches_any(spec: "PathSpec", path: str | Path) -> bool:
    """Check whether a path matches any pattern in the spec.

    Args:
        spec: Compiled pattern set.
        path: Path to test, relative to the directory the patterns describe.

    Returns:
        True if the path matches.
    """
    return spec.match_file(Path(path).as_posix())
