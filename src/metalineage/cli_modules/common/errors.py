"""CLI error handling utilities.

This module provides standardized error handling for CLI commands.
"""

from __future__ import annotations

import functools
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, TypeVar

import typer

from metalineage.base import (
    CatalogError,
    GraphTooDeepError,
    LineageError,
    NodeNotFoundError,
    SerializationError,
)
from metalineage.config import ConfigError

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(Enum):
    """Standard CLI error codes."""

    # General errors (1-9)
    GENERAL_ERROR = 1
    USAGE_ERROR = 2

    # File errors (10-19)
    FILE_NOT_FOUND = 10
    FILE_NOT_WRITABLE = 12
    INVALID_FILE_FORMAT = 13

    # Configuration errors (30-39)
    CONFIG_INVALID = 31

    # Lineage errors (50-59)
    NODE_NOT_FOUND = 50
    GRAPH_TOO_DEEP = 51
    SERIALIZATION_FAILED = 52


# =============================================================================
# Exception Classes
# =============================================================================


class CLIError(Exception):
    """Base exception for CLI errors.

    Attributes:
        message: Error message
        code: Error code
        details: Additional error details
        hint: Helpful hint for resolution
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.hint = hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


class FileNotFoundError(CLIError):
    """Error when a file is not found."""

    def __init__(self, path: Path | str, hint: str | None = None) -> None:
        super().__init__(
            message=f"File not found: {path}",
            code=ErrorCode.FILE_NOT_FOUND,
            details={"path": str(path)},
            hint=hint or "Check that the file exists and the path is correct.",
        )
        self.path = path


def to_cli_error(error: Exception) -> CLIError:
    """Translate a library error into a CLI error with an exit code."""
    if isinstance(error, CLIError):
        return error
    if isinstance(error, NodeNotFoundError):
        return CLIError(
            str(error),
            ErrorCode.NODE_NOT_FOUND,
            details={"node": error.node_id, "kind": error.kind},
            hint="Use 'metalineage lineage show CATALOG' to list known tables.",
        )
    if isinstance(error, GraphTooDeepError):
        return CLIError(
            str(error),
            ErrorCode.GRAPH_TOO_DEEP,
            details={"limit": error.limit},
            hint="Raise the limit with METALINEAGE_MAX_NODES or METALINEAGE_MAX_FIELD_DEPTH.",
        )
    if isinstance(error, SerializationError):
        return CLIError(str(error), ErrorCode.SERIALIZATION_FAILED)
    if isinstance(error, CatalogError):
        return CLIError(str(error), ErrorCode.INVALID_FILE_FORMAT)
    if isinstance(error, ConfigError):
        return CLIError(str(error), ErrorCode.CONFIG_INVALID)
    return CLIError(str(error))


# =============================================================================
# Decorator
# =============================================================================


F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(func: F) -> F:
    """Simple error boundary decorator.

    Catches all exceptions and converts them to CLI errors.

    Args:
        func: Function to wrap

    Returns:
        Wrapped function
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except (CLIError, LineageError, ConfigError) as e:
            error = to_cli_error(e)
            typer.echo(typer.style(f"Error: {error.message}", fg="red"), err=True)
            if error.hint:
                typer.echo(typer.style(f"Hint: {error.hint}", fg="yellow"), err=True)
            raise typer.Exit(error.code.value)
        except Exception as e:
            logger.exception("Unexpected error")
            typer.echo(typer.style(f"Error: {e}", fg="red"), err=True)
            raise typer.Exit(ErrorCode.GENERAL_ERROR.value)

    return wrapper  # type: ignore


# =============================================================================
# Validation Helpers
# =============================================================================


def require_file(path: Path, description: str = "File") -> Path:
    """Require that a file or directory exists.

    Raises:
        FileNotFoundError: If the path doesn't exist
    """
    if not path.exists():
        raise FileNotFoundError(path, hint=f"{description} must exist.")
    return path
