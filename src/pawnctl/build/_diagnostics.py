"""Parsing of pawncc diagnostics and the compilation statistics block.

Both parsers are pure functions over text so they can be exercised without
a compiler binary.
"""

import re
from dataclasses import dataclass
from enum import StrEnum


class Severity(StrEnum):
    """Diagnostic severity reported by the compiler."""

    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


_DIAGNOSTIC_PATTERN = re.compile(
    r"""
    ^(?P<file>[^(]+)
    \((?P<line>\d+)(?:\s*-{1,2}\s*\d+)?\)
    \s*:\s*
    (?P<severity>fatal\s+error|warning|error)
    \s+(?P<code>\d+)
    \s*:\s*
    (?P<message>.*)$
    """,
    re.VERBOSE,
)

_STATS_PATTERN = re.compile(
    r"""
    Code(?:\s+size)?\s*:\s*(?P<code>\d+)\s*bytes\s*\r?\n
    \s*Data(?:\s+size)?\s*:\s*(?P<data>\d+)\s*bytes\s*\r?\n
    \s*Stack/heap(?:\s+size)?\s*:\s*(?P<stack_heap>\d+)\s*bytes
    (?:\s*;\s*estimated\s+max\.\s*usage\s*[=:]\s*(?P<usage_inline>\d+)\s*cells[^\n]*)?
    \s*\r?\n
    (?:\s*Estimated\s+usage\s*:\s*(?P<usage>\d+)\s*cells\s*\r?\n)?
    \s*Total\s+requirements\s*:\s*(?P<total>\d+)\s*bytes
    """,
    re.VERBOSE | re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class CompilerDiagnostic:
    """A single parsed compiler warning or error.

    Attributes:
        file: Source file the diagnostic refers to.
        line: 1-based line number (the first line of a reported range).
        severity: Warning, error or fatal error.
        code: Diagnostic number as printed, e.g. ``"017"``.
        message: Free-text description.
    """

    file: str
    line: int
    severity: Severity
    code: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity is not Severity.WARNING


@dataclass(frozen=True, slots=True)
class CompilationStats:
    """Size summary pawncc prints after a successful compile."""

    code_bytes: int
    data_bytes: int
    stack_heap_bytes: int
    estimated_cells: int | None
    total_bytes: int

    def as_rows(self) -> list[tuple[str, str]]:
        rows = [
            ("Code", f"{self.code_bytes} bytes"),
            ("Data", f"{self.data_bytes} bytes"),
            ("Stack/Heap", f"{self.stack_heap_bytes} bytes"),
        ]
        if self.estimated_cells is not None:
            rows.append(("Estimated usage", f"{self.estimated_cells} cells"))
        rows.append(("Total requirements", f"{self.total_bytes} bytes"))
        return rows


def parse_diagnostic_line(line: str) -> CompilerDiagnostic | None:
    """Parse one line of compiler output.

    Args:
        line: A raw output line, e.g.
            ``main.pwn(12) : error 017: undefined symbol "Foo"``.

    Returns:
        The diagnostic, or None if the line is not a diagnostic.
    """
    match = _DIAGNOSTIC_PATTERN.match(line.rstrip("\r\n"))
    if match is None:
        return None

    file = match.group("file").strip()
    if not file:
        return None

    severity_text = match.group("severity").lower()
    severity = (
        Severity.FATAL if severity_text.startswith("fatal") else Severity(severity_text)
    )
    return CompilerDiagnostic(
        file=file,
        line=int(match.group("line")),
        severity=severity,
        code=match.group("code"),
        message=match.group("message").strip(),
    )


def format_diagnostic(diagnostic: CompilerDiagnostic) -> str:
    """Render a diagnostic as ``file:line: severity code: message``."""
    severity = (
        "fatal error" if diagnostic.severity is Severity.FATAL else diagnostic.severity
    )
    return (
        f"{diagnostic.file}:{diagnostic.line}: "
        f"{severity} {diagnostic.code}: {diagnostic.message}"
    )


def parse_compilation_stats(output: str) -> CompilationStats | None:
    """Extract the statistics block from the compiler's stdout.

    Returns:
        The statistics, or None if the output has no statistics block.
    """
    match = _STATS_PATTERN.search(output)
    if match is None:
        return None

    usage = match.group("usage") or match.group("usage_inline")
    return CompilationStats(
        code_bytes=int(match.group("code")),
        data_bytes=int(match.group("data")),
        stack_heap_bytes=int(match.group("stack_heap")),
        estimated_cells=int(usage) if usage is not None else None,
        total_bytes=int(match.group("total")),
    )
