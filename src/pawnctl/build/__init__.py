"""Compiler discovery, invocation and diagnostic parsing."""

from ._diagnostics import (
    CompilationStats,
    CompilerDiagnostic,
    Severity,
    format_diagnostic,
    parse_compilation_stats,
    parse_diagnostic_line,
)
from ._invocation import (
    COMPILER_DIRECTORIES,
    DEFAULT_DEBUG_LEVEL,
    DEFAULT_INCLUDE_DIRECTORIES,
    CompilerInvocation,
    ResolvedCompiler,
    format_constant,
    plan_build,
    resolve_compiler,
    resolve_include_directories,
    validate_debug_level,
)
from ._invoker import BuildInvoker, BuildResult, build_project

__all__ = [
    "COMPILER_DIRECTORIES",
    "DEFAULT_DEBUG_LEVEL",
    "DEFAULT_INCLUDE_DIRECTORIES",
    "BuildInvoker",
    "BuildResult",
    "CompilationStats",
    "CompilerDiagnostic",
    "CompilerInvocation",
    "ResolvedCompiler",
    "Severity",
    "build_project",
    "format_constant",
    "format_diagnostic",
    "parse_compilation_stats",
    "parse_diagnostic_line",
    "plan_build",
    "resolve_compiler",
    "resolve_include_directories",
    "validate_debug_level",
]
