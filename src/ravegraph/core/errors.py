"""
Unified error handling for Ravegraph.

Every failure surfaced by the core is one of three kinds:

- VALIDATION: malformed or out-of-range input, rejected before any I/O
- NOT_FOUND: a lookup by id matched no row (carries entity kind and id)
- DATABASE: store failure (connectivity, constraint, timeout), cause preserved

Front ends convert errors to messages with ``describe_error`` and to process
exit codes with ``main_with_error_handling``.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Database error
- 12: Validation error
- 13: Not found
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum, StrEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    DATABASE_ERROR = 11
    VALIDATION_ERROR = 12
    NOT_FOUND = 13
    UNKNOWN_ERROR = 127


class ErrorKind(StrEnum):
    """Tag carried by every domain error."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    CONFIGURATION = "configuration"


class RavegraphError(Exception):
    """Base exception for Ravegraph errors with exit code support."""

    kind: ErrorKind
    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(RavegraphError):
    """Raised for configuration-related errors."""

    kind = ErrorKind.CONFIGURATION
    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(RavegraphError):
    """Raised for validation failures."""

    kind = ErrorKind.VALIDATION
    exit_code = ExitCode.VALIDATION_ERROR


class NotFoundError(RavegraphError):
    """Raised when a lookup by id matches nothing."""

    kind = ErrorKind.NOT_FOUND
    exit_code = ExitCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: str | int):
        super().__init__(
            f"{entity} with id {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class DatabaseError(RavegraphError):
    """Raised when the store fails; the driver exception is kept as ``cause``."""

    kind = ErrorKind.DATABASE
    exit_code = ExitCode.DATABASE_ERROR

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        *,
        is_connectivity: bool = False,
    ):
        details: dict[str, Any] = {}
        if cause is not None:
            details["cause"] = type(cause).__name__
        super().__init__(message, details=details)
        self.cause = cause
        self.is_connectivity = is_connectivity
        if cause is not None:
            self.__cause__ = cause


def describe_error(error: RavegraphError) -> str:
    """Map an error to the message shown to users."""
    match error.kind:
        case ErrorKind.VALIDATION:
            return f"Invalid input: {error.message}"
        case ErrorKind.NOT_FOUND:
            return error.message
        case ErrorKind.DATABASE:
            if getattr(error, "is_connectivity", False):
                return (
                    "Cannot reach the database. Check that PostgreSQL is running "
                    "and RAVEGRAPH_DATABASE_URL is correct, then retry."
                )
            return f"Database error: {error.message}"
        case ErrorKind.CONFIGURATION:
            return f"Configuration error: {error.message}"
    raise AssertionError(f"unhandled error kind: {error.kind}")


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI entry points that provides unified error handling.

    Catches exceptions and converts them to appropriate exit codes with
    consistent error reporting.

    Exit codes:
        - RavegraphError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except RavegraphError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        kind=e.kind.value,
                        message=e.message,
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                _print_error(describe_error(e))
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
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                _print_error(f"Unexpected error: {e}")
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def _print_error(message: str) -> None:
    from ravegraph.cli.ux import error as print_error

    print_error(message)
