"""Best-effort server configuration checks run before a start.

Problems found here are warnings only; they never block startup.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from pawnctl.utils import read_json_object

from ._models import DEFAULT_CONFIG_FILE

if TYPE_CHECKING:
    from pawnctl.utils import Reporter

LEGACY_CONFIG_FILE = "server.cfg"
DEFAULT_PASSWORDS = frozenset({"", "changeme"})


@dataclass(frozen=True, slots=True)
class ServerConfigSummary:
    """The settings the checks care about.

    Attributes:
        path: Config file the settings were read from.
        gamemodes: Gamemode script names, without extension or arguments.
        rcon_password: RCON password, or None when not set.
    """

    path: Path
    gamemodes: tuple[str, ...] = field(default=())
    rcon_password: str | None = None


def _first_word(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    words = value.split()
    return words[0] if words else None


def _read_json_config(path: Path) -> ServerConfigSummary:
    data = read_json_object(path)
    if data is None:
        msg = f"{path.name} is not a JSON object"
        raise ValueError(msg)

    pawn = data.get("pawn")
    scripts = pawn.get("main_scripts") if isinstance(pawn, dict) else None
    if scripts is None:
        scripts = []
    elif not isinstance(scripts, list):
        msg = "pawn.main_scripts is not a list"
        raise ValueError(msg)
    gamemodes = tuple(
        name for name in (_first_word(entry) for entry in scripts) if name
    )

    rcon = data.get("rcon")
    password = rcon.get("password") if isinstance(rcon, dict) else None
    return ServerConfigSummary(
        path=path,
        gamemodes=gamemodes,
        rcon_password=password if isinstance(password, str) else None,
    )


def _read_legacy_config(path: Path) -> ServerConfigSummary:
    gamemodes: list[str] = []
    password: str | None = None
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        key, _, value = raw_line.strip().partition(" ")
        if key.startswith("gamemode") and key[len("gamemode") :].isdigit():
            name = _first_word(value)
            if name:
                gamemodes.append(name)
        elif key == "rcon_password":
            password = value.strip()
    return ServerConfigSummary(
        path=path, gamemodes=tuple(gamemodes), rcon_password=password
    )


def read_server_config(path: Path) -> ServerConfigSummary:
    """Read a ``config.json`` (open.mp) or ``server.cfg`` (SA-MP) file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If a JSON config is malformed or has a non-list
            ``pawn.main_scripts``.
    """
    if path.suffix.lower() == ".json":
        return _read_json_config(path)
    return _read_legacy_config(path)


def locate_server_config(root: Path, config: str | None = None) -> Path | None:
    """Find the config file the server will read.

    An explicit ``config`` is used as given. Otherwise ``config.json`` is
    preferred, falling back to a legacy ``server.cfg``.
    """
    if config is not None:
        path = root / config
        return path if path.is_file() else None
    for name in (DEFAULT_CONFIG_FILE, LEGACY_CONFIG_FILE):
        path = root / name
        if path.is_file():
            return path
    return None


def check_server_config(root: Path, config: str | None = None) -> list[str]:
    """Inspect the server config for common misconfigurations.

    Args:
        root: Project root holding the server and its config.
        config: Explicit config file name, if one was requested.

    Returns:
        Warning messages, empty when nothing looks wrong.
    """
    path = locate_server_config(root, config)
    if path is None:
        name = config or DEFAULT_CONFIG_FILE
        return [f"Server config {name} not found; the server will use its defaults"]

    try:
        summary = read_server_config(path)
    except (OSError, ValueError) as e:
        return [f"Could not read server config {path.name}: {e}"]

    warnings: list[str] = []
    if not summary.gamemodes:
        warnings.append(f"No gamemode configured in {path.name}")

    password = summary.rcon_password
    if password is None or password.strip() in DEFAULT_PASSWORDS:
        warnings.append(
            f"RCON password in {path.name} is unset or still the default; change it"
        )

    for gamemode in summary.gamemodes:
        compiled = root / "gamemodes" / f"{gamemode}.amx"
        if not compiled.is_file():
            warnings.append(
                f"Gamemode '{gamemode}' is configured but gamemodes/{gamemode}.amx "
                "does not exist; build it first"
            )

    return warnings


def run_preflight(root: Path, config: str | None, reporter: "Reporter") -> None:
    """Print pre-flight warnings for the server config."""
    for warning in check_server_config(root, config):
        reporter.warn(warning)
