"""Shared CLI utilities."""

from metalineage.cli_modules.common.errors import (
    CLIError,
    ErrorCode,
    FileNotFoundError,
    error_boundary,
    require_file,
    to_cli_error,
)

__all__ = [
    "CLIError",
    "ErrorCode",
    "FileNotFoundError",
    "error_boundary",
    "require_file",
    "to_cli_error",
]
