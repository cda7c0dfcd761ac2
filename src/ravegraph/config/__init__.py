"""
Ravegraph configuration.

Pydantic-based settings loaded from environment variables and .env files.
"""

from ravegraph.config.settings import LogLevel, Settings, get_settings

__all__ = [
    "LogLevel",
    "Settings",
    "get_settings",
]
