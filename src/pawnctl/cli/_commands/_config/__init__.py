# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
"""pawnctl config commands - manage user preferences."""

from enum import StrEnum
from typing import Annotated

from cyclopts import App, Parameter

from pawnctl.config import (
    GITHUB_TOKEN_ENV,
    Preferences,
    load_preferences,
    reset_preferences,
    save_preferences,
)
from pawnctl.utils import get_preferences_file

from .._context import RunContext
from .._shared import confirm_action, exit_with_error

app = App(
    name="config",
    help="Manage pawnctl user preferences",
    help_on_error=True,
)


class PreferenceKey(StrEnum):
    """Preferences that can be changed from the command line."""

    EDITOR = "editor"
    DEFAULT_AUTHOR = "default-author"
    GITHUB_TOKEN = "github-token"  # noqa: S105
    WINDOW_MODE = "window-mode"

    @property
    def field_name(self) -> str:
        return self.value.replace("-", "_")


def parse_bool(value: str) -> bool | None:
    """Parse a yes/no style flag, returning None if it is not one."""
    lower_value = value.strip().lower()
    if lower_value in ("true", "1", "yes", "on"):
        return True
    if lower_value in ("false", "0", "no", "off"):
        return False
    return None


def _display_value(key: PreferenceKey, preferences: Preferences) -> str:
    if key is PreferenceKey.GITHUB_TOKEN:
        # The token itself is never printed
        if preferences.effective_github_token is None:
            return "not set"
        return "set"
    value = getattr(preferences, key.field_name)
    if value is None:
        return "not set"
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


@app.command(name="show")
def _show() -> None:
    """Show the current user preferences."""
    ctx = RunContext.get_current()
    preferences = load_preferences()

    ctx.reporter.heading("Preferences")
    ctx.reporter.key_value("File", str(get_preferences_file()))
    for key in PreferenceKey:
        ctx.reporter.key_value(key.value, _display_value(key, preferences))


@app.command(name="set")
def _set(
    key: Annotated[PreferenceKey, Parameter(help="Preference to change.")],
    value: Annotated[str, Parameter(help="New value.")],
    /,
) -> None:
    """Set a user preference.

    window-mode accepts true/false, yes/no, on/off or 1/0. An empty value
    clears a text preference.
    """
    ctx = RunContext.get_current()
    preferences = load_preferences()

    parsed: str | bool | None
    if key is PreferenceKey.WINDOW_MODE:
        parsed = parse_bool(value)
        if parsed is None:
            exit_with_error(
                f"Cannot parse '{value}' as boolean (use true/false/1/0)",
                console=ctx.error_console,
            )
    else:
        parsed = value or None

    updated = preferences.model_copy(update={key.field_name: parsed})
    try:
        path = save_preferences(updated)
    except OSError as e:
        exit_with_error(
            f"Failed to write preferences: {e}", console=ctx.error_console
        )

    ctx.reporter.success(f"Set {key.value} = {_display_value(key, updated)}")
    ctx.reporter.detail(f"Saved to {path}")
    if key is PreferenceKey.GITHUB_TOKEN and updated.github_token is not None:
        ctx.reporter.detail(f"{GITHUB_TOKEN_ENV} takes precedence when set")


@app.command(name="reset")
def _reset(
    *,
    force: Annotated[
        bool,
        Parameter(name=["--force", "-f"], help="Skip the confirmation prompt."),
    ] = False,
) -> None:
    """Delete the preferences file, restoring defaults."""
    ctx = RunContext.get_current()

    if not confirm_action(
        "This will delete all saved preferences.", force=force, console=ctx.console
    ):
        ctx.reporter.info("Cancelled")
        return

    try:
        reset_preferences()
    except OSError as e:
        exit_with_error(
            f"Failed to delete preferences: {e}", console=ctx.error_console
        )
    ctx.reporter.success("Preferences reset to defaults")
