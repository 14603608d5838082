"""
Unified error handling for computeforge.

This module provides the error taxonomy used across the provisioning
pipeline, standardized exit codes, and error reporting for CLI commands.

Exit Codes:
- 0: Success
- 1: Warning (advisory, operation succeeded with warnings)
- 3: Partial failure (some resources were applied, some failed)
- 10: Configuration error
- 11: Provider error (external service failure)
- 12: Validation error
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    WARNING = 1
    PARTIAL_FAILURE = 3
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class ComputeForgeError(Exception):
    """Base exception for computeforge errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ComputeForgeError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(ComputeForgeError):
    """Raised when a parameter bag cannot become a provisioning config."""

    exit_code = ExitCode.VALIDATION_ERROR


class MissingParameter(ValidationError):
    """A required parameter is absent from the bag."""

    def __init__(self, name: str):
        super().__init__(f"Missing required parameter: {name}", {"parameter": name})
        self.name = name


class InvalidValue(ValidationError):
    """A parameter is present but its value is unusable."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Invalid value for parameter {name}: {reason}", {"parameter": name})
        self.name = name
        self.reason = reason


class GraphError(ComputeForgeError):
    """Raised when a resource graph has unresolved references or a cycle."""

    exit_code = ExitCode.CONFIG_ERROR


class ProviderError(ComputeForgeError):
    """Raised when an external provider/service fails."""

    exit_code = ExitCode.PROVIDER_ERROR


class ApiError(ProviderError):
    """Failure reported by the infrastructure API for a single resource."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI main functions that provides unified error handling.

    Catches exceptions and converts them to appropriate exit codes with
    consistent error reporting.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - ComputeForgeError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except ComputeForgeError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: ComputeForgeError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
