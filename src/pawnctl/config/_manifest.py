# pyright: reportExplicitAny=false
"""Project manifest (pawn.json) models and loading.

The manifest describes a PAWN project: its entry file, compiler settings,
named build profiles and runnable scripts.
"""

from pathlib import Path  # noqa: TC003 - Used in runtime type annotations
from typing import ClassVar

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pawnctl.exceptions import (
    BuildProfileNotFoundError,
    ManifestError,
    ScriptNotFoundError,
)
from pawnctl.utils import manifest_candidates

ConstantValue = str | int | float | bool

DEFAULT_COMPILER_OPTIONS: tuple[str, ...] = ("-;+", "-(+", "-\\+", "-Z+")
"""Options passed to pawncc when the manifest declares none."""


class BuildProfile(BaseModel):
    """Named set of compiler overrides, e.g. ``dev`` or ``prod``.

    Attributes:
        description: Human-readable summary shown by ``build --list-profiles``.
        input: Overrides the compiler input file.
        output: Overrides the compiler output file.
        includes: Replaces the include directory list.
        options: Replaces the compiler option list.
        constants: Merged over the base compiler constants.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    description: str = ""
    input: str | None = None
    output: str | None = None
    includes: list[str] | None = None
    options: list[str] | None = None
    constants: dict[str, ConstantValue] = Field(default_factory=dict)


class CompilerConfig(BaseModel):
    """The ``compiler`` section of the manifest."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    input: str | None = None
    output: str | None = None
    includes: list[str] = Field(default_factory=list)
    constants: dict[str, ConstantValue] = Field(default_factory=dict)
    options: list[str] | None = None
    profiles: dict[str, BuildProfile] = Field(default_factory=dict)

    def with_profile(self, profile: BuildProfile) -> "CompilerConfig":
        """Return a copy with the profile's overrides applied.

        Profile values replace base values field by field; constants are
        merged with the profile winning on conflicts.

        Args:
            profile: The profile to apply.

        Returns:
            A new CompilerConfig.
        """
        return self.model_copy(
            update={
                "input": profile.input or self.input,
                "output": profile.output or self.output,
                "includes": (
                    profile.includes if profile.includes is not None else self.includes
                ),
                "options": (
                    profile.options if profile.options is not None else self.options
                ),
                "constants": {**self.constants, **profile.constants},
            }
        )

    @property
    def effective_options(self) -> list[str]:
        """Return the declared options, or the defaults if none are declared."""
        if self.options is None:
            return list(DEFAULT_COMPILER_OPTIONS)
        return list(self.options)


class Manifest(BaseModel):
    """A parsed ``pawn.json`` project descriptor."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    version: str = ""
    description: str = ""
    author: str = ""
    license: str = ""
    entry: str | None = None
    output: str | None = None
    dependencies: dict[str, str] | list[str] = Field(default_factory=dict)
    scripts: dict[str, str] = Field(default_factory=dict)
    compiler: CompilerConfig | None = None

    @property
    def profile_names(self) -> tuple[str, ...]:
        if self.compiler is None:
            return ()
        return tuple(self.compiler.profiles)

    def get_script(self, name: str) -> str:
        """Return the command string of a declared script.

        Raises:
            ScriptNotFoundError: If the manifest declares no such script.
        """
        try:
            return self.scripts[name]
        except KeyError:
            msg = f"Script '{name}' not found in pawn.json"
            raise ScriptNotFoundError(
                msg, script_name=name, available=tuple(self.scripts)
            ) from None

    def compiler_for_profile(self, profile: str | None = None) -> CompilerConfig:
        """Resolve the compiler configuration, optionally through a profile.

        Args:
            profile: Name of a build profile, or None for the base config.

        Returns:
            The effective compiler configuration.

        Raises:
            BuildProfileNotFoundError: If the profile is not declared.
        """
        base = self.compiler or CompilerConfig()
        if profile is None:
            return base

        selected = base.profiles.get(profile)
        if selected is None:
            msg = f"Build profile '{profile}' not found in pawn.json"
            raise BuildProfileNotFoundError(
                msg, profile=profile, available=self.profile_names
            )
        return base.with_profile(selected)


def find_manifest(root: Path) -> Path | None:
    """Return the first existing manifest path under the project root."""
    for candidate in manifest_candidates(root):
        if candidate.is_file():
            return candidate
    return None


def load_manifest(root: Path) -> Manifest | None:
    """Load the project manifest.

    Args:
        root: Project root directory.

    Returns:
        The parsed manifest, or None if the project has no manifest.

    Raises:
        ManifestError: If the manifest exists but cannot be read or is invalid.
    """
    path = find_manifest(root)
    if path is None:
        return None

    try:
        return Manifest.model_validate(orjson.loads(path.read_bytes()))
    except OSError as e:
        msg = f"Failed to read manifest file {path}: {e}"
        raise ManifestError(msg, path=path) from e
    except orjson.JSONDecodeError as e:
        msg = f"Manifest file {path} is not valid JSON: {e}"
        raise ManifestError(msg, path=path) from e
    except ValidationError as e:
        msg = f"Manifest file {path} is invalid: {e.error_count()} error(s)"
        raise ManifestError(msg, path=path) from e
