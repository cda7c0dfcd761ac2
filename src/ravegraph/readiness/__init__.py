"""
Readiness trend module.

Pure functions over recorded readiness scores; no I/O.
"""

from ravegraph.readiness.trends import build_trends, classify_trend

__all__ = ["build_trends", "classify_trend"]
