"""Reformatting of server console output.

Raw open.mp output lines are matched against a handful of known shapes
and rewritten into a consistent ``[tag] message`` form. Anything that
matches no shape is printed as-is.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Protocol, final, runtime_checkable

from rich.style import Style
from rich.text import Text

from ._models import ServerEventType

if TYPE_CHECKING:
    from pawnctl.utils import Reporter

    from ._models import ServerEvent

Stream = Literal["stdout", "stderr"]


class LineKind(StrEnum):
    """How a formatted line should be displayed."""

    INFO = "info"
    DETAIL = "detail"
    WARNING = "warning"
    ERROR = "error"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True, slots=True)
class FormattedLine:
    """A server output line after reformatting.

    Attributes:
        message: The rewritten (or original) text.
        kind: Display category.
        tag: Bracketed prefix, e.g. ``component`` or a ``HH:MM:SS`` time.
        label: Level label for structured log lines, e.g. ``WARN``.
    """

    message: str
    kind: LineKind = LineKind.PASSTHROUGH
    tag: str | None = None
    label: str | None = None

    def render(self) -> str:
        parts = [f"[{self.tag}]"] if self.tag else []
        if self.label:
            parts.append(self.label)
        parts.append(self.message)
        return " ".join(parts)


_STARTUP = re.compile(r"^Starting open\.mp server \((?P<version>[^)]+)\)")
_COMPONENT_LOADING = re.compile(
    r"^Loading component (?P<name>.+?)(?:\.(?:so|dll))?\s*$", re.IGNORECASE
)
_COMPONENT_LOADED = re.compile(
    r"^Successfully loaded component (?P<name>.+?) \((?P<version>[^)]+)\)"
    r"(?: with UID (?P<uid>[0-9a-fA-F]+))?"
)
_COMPONENT_COUNT = re.compile(r"^Loaded (?P<count>\d+) component\(s\)")
_STRUCTURED = re.compile(
    r"^\[(?P<timestamp>[^\]]+)\]\s*\[(?P<level>[A-Za-z]+)\]\s?(?P<message>.*)$"
)
_LEGACY_NETWORK = re.compile(
    r"^Legacy Network started on port (?P<port>\d+)", re.IGNORECASE
)
_CLOCK = re.compile(r"(\d{2}:\d{2}:\d{2})")

_LEVELS: dict[str, tuple[str, LineKind]] = {
    "info": ("INFO", LineKind.INFO),
    "message": ("INFO", LineKind.INFO),
    "warning": ("WARN", LineKind.WARNING),
    "warn": ("WARN", LineKind.WARNING),
    "error": ("ERROR", LineKind.ERROR),
    "debug": ("DEBUG", LineKind.DETAIL),
}


def _format_structured(match: re.Match[str]) -> FormattedLine | None:
    level = _LEVELS.get(match.group("level").lower())
    if level is None:
        return None
    timestamp = match.group("timestamp")
    clock = _CLOCK.search(timestamp)
    label, kind = level
    return FormattedLine(
        message=match.group("message"),
        kind=kind,
        tag=clock.group(1) if clock else timestamp,
        label=label,
    )


def format_server_line(line: str, stream: Stream = "stdout") -> FormattedLine:  # noqa: PLR0911
    """Rewrite one line of server output.

    Args:
        line: Raw line without its terminator.
        stream: Stream the line came from. Unrecognized stderr lines are
            marked as errors.

    Returns:
        The formatted line.
    """
    text = line.strip()

    if match := _STARTUP.match(text):
        return FormattedLine(
            f"open.mp server v{match.group('version')}", LineKind.INFO, "server"
        )

    if match := _COMPONENT_LOADED.match(text):
        return FormattedLine(
            f"{match.group('name')} v{match.group('version')}",
            LineKind.INFO,
            "component",
        )

    if match := _COMPONENT_LOADING.match(text):
        return FormattedLine(
            f"Loading {match.group('name')}", LineKind.DETAIL, "component"
        )

    if match := _COMPONENT_COUNT.match(text):
        return FormattedLine(
            f"{match.group('count')} components loaded", LineKind.INFO, "component"
        )

    if match := _LEGACY_NETWORK.match(text):
        return FormattedLine(
            f"Legacy network listening on port {match.group('port')}",
            LineKind.INFO,
            "network",
        )

    if (match := _STRUCTURED.match(text)) and (formatted := _format_structured(match)):
        return formatted

    kind = LineKind.ERROR if stream == "stderr" else LineKind.PASSTHROUGH
    return FormattedLine(line, kind)


@runtime_checkable
class OutputSink(Protocol):
    """Consumer of server output lines and lifecycle events."""

    async def write_line(self, pid: int, stream: Stream, line: str) -> None:
        """Write a line of server output.

        Args:
            pid: Process ID of the server.
            stream: Which output stream the line came from.
            line: The output line (without trailing newline).
        """
        ...

    async def write_event(self, event: "ServerEvent") -> None:
        """Write a server lifecycle event."""
        ...


_TAG_STYLE = Style(color="blue", bold=True)
_KIND_STYLES: dict[LineKind, Style] = {
    LineKind.INFO: Style(),
    LineKind.DETAIL: Style(dim=True),
    LineKind.WARNING: Style(color="yellow"),
    LineKind.ERROR: Style(color="red"),
    LineKind.PASSTHROUGH: Style(),
}


@final
class ServerOutputSink:
    """Renders reformatted server output through a Reporter's console.

    Detail lines (component loading) only appear in verbose mode.
    Unrecognized stderr lines go to the error channel.
    """

    __slots__ = ("_reporter",)

    def __init__(self, reporter: "Reporter") -> None:
        self._reporter = reporter

    def render_line(self, formatted: FormattedLine) -> Text:
        style = _KIND_STYLES[formatted.kind]
        text = Text()
        if formatted.tag:
            _ = text.append(f"[{formatted.tag}]", style=_TAG_STYLE)
            _ = text.append(" ")
        if formatted.label:
            _ = text.append(formatted.label, style=style + Style(bold=True))
            _ = text.append(" ")
        _ = text.append(formatted.message, style=style)
        return text

    async def write_line(self, pid: int, stream: Stream, line: str) -> None:  # noqa: ARG002
        formatted = format_server_line(line, stream)
        if formatted.kind is LineKind.DETAIL and not self._reporter.is_verbose:
            return
        if formatted.kind is LineKind.ERROR and formatted.tag is None:
            self._reporter.error(formatted.message)
            return
        self._reporter.console.print(self.render_line(formatted))

    async def write_event(self, event: "ServerEvent") -> None:
        message = event.message or event.event_type.value
        if event.event_type is ServerEventType.SIGNAL_FAILED:
            self._reporter.warn(message)
        elif event.event_type is ServerEventType.CRASHED:
            self._reporter.error(message)
        elif event.event_type is ServerEventType.STARTED:
            self._reporter.success(message)
        else:
            self._reporter.info(message)
