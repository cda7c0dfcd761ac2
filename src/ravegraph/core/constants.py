"""Shared domain constants."""

# Score change (in points) a service must exceed to leave STABLE.
TREND_THRESHOLD: float = 1

# Default readiness history window, in days.
DEFAULT_DAYS_BACK: int = 30

SCORE_MIN: int = 0
SCORE_MAX: int = 100
