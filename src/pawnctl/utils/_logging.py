"""File logging for pawnctl commands.

Loggers are standalone structlog loggers bound to a single file. The global
structlog configuration is never touched, so every command invocation (and
every test) owns its logger outright.
"""

import logging
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

from ._paths import get_cli_log_file

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger, Processor

LogFormat = Literal["json", "text"]

DEBUG_ENV = "PAWNCTL_DEBUG"
LEVEL_ENV = "PAWNCTL_LOG_LEVEL"


def resolve_log_level(name: str | None = None) -> int:
    """Turn a level name into a :mod:`logging` level.

    ``PAWNCTL_DEBUG`` wins over everything. Without an explicit name the
    ``PAWNCTL_LOG_LEVEL`` variable is consulted. Unknown names mean INFO.
    """
    if getenv(DEBUG_ENV):
        return logging.DEBUG
    if name is None:
        name = getenv(LEVEL_ENV, "info")
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _renderers(log_format: LogFormat) -> list["Processor"]:
    if log_format == "text":
        return [structlog.dev.ConsoleRenderer(colors=False)]
    return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]


def open_file_logger(
    path: Path,
    *,
    level: int = logging.INFO,
    log_format: LogFormat = "json",
) -> "FilteringBoundLogger":
    """Open ``path`` for appending and return a logger that writes to it.

    Parent directories are created as needed. Entries below ``level`` are
    dropped before rendering.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        *_renderers(log_format),
    ]
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.WriteLogger(path.open("a", encoding="utf-8")),
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
        ),
    )


def create_cli_logger(
    *,
    level: str | None = None,
    log_format: LogFormat = "json",
    log_file: str | Path | None = None,
    command: str = "",
) -> "FilteringBoundLogger":
    """Create the logger behind ``--log-to-file``.

    Args:
        level: Level name. Falls back to ``PAWNCTL_LOG_LEVEL``, then INFO.
        log_format: ``json`` lines or plain ``text``.
        log_file: Destination; defaults to ``cli.log`` in the user log dir.
        command: Command line, bound to every entry when given.
    """
    path = Path(log_file) if log_file else get_cli_log_file()
    logger = open_file_logger(
        path, level=resolve_log_level(level), log_format=log_format
    )
    if command:
        return logger.bind(command=command)
    return logger
