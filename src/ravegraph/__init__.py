"""Ravegraph work dashboard: data access and aggregation for SRE consulting artifacts."""

__version__ = "0.1.0"
