"""Command-line interface for pawnctl."""

from ._app import app, create_app, main
from ._commands._context import RunContext

__all__ = ["RunContext", "app", "create_app", "main"]
