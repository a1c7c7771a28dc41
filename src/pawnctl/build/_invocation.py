"""Compiler discovery and argument construction."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from pawnctl.config import ConstantValue
from pawnctl.exceptions import (
    BuildError,
    CompilerNotFoundError,
    InputFileNotFoundError,
    InvalidDebugLevelError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pawnctl.config import Manifest
    from pawnctl.process import ProcessController
    from pawnctl.utils import Reporter

COMPILER_DIRECTORIES: tuple[str, ...] = ("pawno", "qawno", "compiler", ".")
"""Folders searched for pawncc, in order: legacy SDK, modern SDK,
community compiler, project root."""

DEFAULT_INCLUDE_DIRECTORIES: tuple[str, ...] = (
    "pawno/include",
    "qawno/include",
    "compiler/include",
)

DEFAULT_DEBUG_LEVEL = 3
DEBUG_LEVELS: tuple[int, ...] = (1, 2, 3)


def validate_debug_level(level: int) -> int:
    """Return the level if the compiler documents it, else raise.

    Raises:
        InvalidDebugLevelError: If the level is not 1, 2 or 3.
    """
    if level not in DEBUG_LEVELS:
        msg = f"Invalid debug level {level}: expected 1, 2 or 3"
        raise InvalidDebugLevelError(msg, level=level)
    return level


def format_constant(name: str, value: ConstantValue) -> str:
    """Render a ``NAME=value`` definition for the compiler command line."""
    if isinstance(value, bool):
        return f"{name}={int(value)}"
    return f"{name}={value}"


@dataclass(frozen=True, slots=True)
class CompilerInvocation:
    """One compile attempt.

    Attributes:
        input_file: Source file to compile. Must exist.
        output_file: Destination ``.amx``; the compiler picks one if None.
        include_directories: Resolved, existing include folders.
        debug_level: Symbolic information level, 1 to 3.
        extra_options: Opaque compiler flags, passed through in order.
        defined_constants: ``NAME=value`` definitions.
    """

    input_file: Path
    output_file: Path | None = None
    include_directories: tuple[Path, ...] = ()
    debug_level: int = DEFAULT_DEBUG_LEVEL
    extra_options: tuple[str, ...] = ()
    defined_constants: Mapping[str, ConstantValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _ = validate_debug_level(self.debug_level)

    def to_arguments(self) -> list[str]:
        """Build the pawncc argument vector (without the compiler path)."""
        arguments: list[str] = []
        if self.output_file is not None:
            arguments.append(f"-o{self.output_file}")
        arguments.append(f"-d{self.debug_level}")
        arguments.extend(f"-i{directory}" for directory in self.include_directories)
        arguments.extend(self.extra_options)
        arguments.extend(
            format_constant(name, value)
            for name, value in self.defined_constants.items()
        )
        arguments.append(str(self.input_file))
        return arguments


@dataclass(frozen=True, slots=True)
class ResolvedCompiler:
    """Location of the pawncc binary and the folder holding its libraries."""

    path: Path
    library_dir: Path


def resolve_compiler(root: Path, controller: "ProcessController") -> ResolvedCompiler:
    """Find the compiler binary under the project root.

    Raises:
        CompilerNotFoundError: If no candidate location has one.
    """
    searched: list[Path] = []
    for directory in COMPILER_DIRECTORIES:
        candidate = (root / directory / controller.compiler_name).resolve()
        searched.append(candidate)
        if candidate.is_file():
            return ResolvedCompiler(path=candidate, library_dir=candidate.parent)

    msg = (
        f"Could not find {controller.compiler_name} in "
        + ", ".join(f"{d}/" for d in COMPILER_DIRECTORIES[:-1])
        + " or the project root"
    )
    raise CompilerNotFoundError(msg, searched=tuple(searched))


def resolve_include_directories(
    root: Path,
    declared: "Iterable[str]",
    reporter: "Reporter | None" = None,
) -> tuple[Path, ...]:
    """Resolve the include folders to pass to the compiler.

    Declared folders come first, in order, followed by any well-known SDK
    include folder that exists. Duplicates are dropped. A declared folder
    that does not exist is skipped with a verbose-only message.

    Args:
        root: Project root that relative paths are resolved against.
        declared: Include folders listed in the manifest.
        reporter: Receives the skipped-folder messages.

    Returns:
        The folders as given (relative paths stay relative to the root).
    """
    resolved: list[Path] = []
    seen: set[Path] = set()

    entries = [(entry, True) for entry in declared]
    entries.extend((entry, False) for entry in DEFAULT_INCLUDE_DIRECTORIES)

    for entry, is_declared in entries:
        directory = Path(entry)
        absolute = directory if directory.is_absolute() else root / directory
        if not absolute.is_dir():
            if is_declared and reporter is not None:
                reporter.detail(f"Skipping missing include directory: {entry}")
            continue
        key = absolute.resolve()
        if key in seen:
            continue
        seen.add(key)
        resolved.append(directory)

    return tuple(resolved)


def plan_build(  # noqa: PLR0913
    manifest: "Manifest",
    root: Path,
    *,
    input_file: str | None = None,
    output_file: str | None = None,
    debug_level: int = DEFAULT_DEBUG_LEVEL,
    profile: str | None = None,
    reporter: "Reporter | None" = None,
) -> CompilerInvocation:
    """Combine manifest settings and command-line overrides into an invocation.

    Command-line values win over the (profile-adjusted) compiler section,
    which wins over the manifest's top-level ``entry`` and ``output``.

    Raises:
        BuildProfileNotFoundError: If the profile is not declared.
        InvalidDebugLevelError: If the debug level is not 1-3.
        BuildError: If no input file is configured.
        InputFileNotFoundError: If the input file does not exist.
    """
    _ = validate_debug_level(debug_level)
    compiler = manifest.compiler_for_profile(profile)

    source = input_file or compiler.input or manifest.entry
    if not source:
        msg = "No input file specified. Use --input or set entry in pawn.json"
        raise BuildError(msg)

    source_path = Path(source)
    if not (source_path if source_path.is_absolute() else root / source_path).is_file():
        msg = f"Input file not found: {source}"
        raise InputFileNotFoundError(msg, path=source_path)

    destination = output_file or compiler.output or manifest.output

    return CompilerInvocation(
        input_file=source_path,
        output_file=Path(destination) if destination else None,
        include_directories=resolve_include_directories(
            root, compiler.includes, reporter
        ),
        debug_level=debug_level,
        extra_options=tuple(compiler.effective_options),
        defined_constants=dict(compiler.constants),
    )
