"""Core modules for Ravegraph - centralized definitions and utilities."""

from ravegraph.core.constants import (
    DEFAULT_DAYS_BACK,
    SCORE_MAX,
    SCORE_MIN,
    TREND_THRESHOLD,
)
from ravegraph.core.errors import (
    ConfigurationError,
    DatabaseError,
    ErrorKind,
    ExitCode,
    NotFoundError,
    RavegraphError,
    ValidationError,
    describe_error,
    main_with_error_handling,
)

__all__ = [
    # Errors
    "ExitCode",
    "ErrorKind",
    "RavegraphError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "DatabaseError",
    "describe_error",
    "main_with_error_handling",
    # Constants
    "TREND_THRESHOLD",
    "DEFAULT_DAYS_BACK",
    "SCORE_MIN",
    "SCORE_MAX",
]
