"""Relational store: ORM tables, the Database handle and repositories."""

from ravegraph.db.models import Base
from ravegraph.db.repositories import (
    SqlClaimRepository,
    SqlControlRepository,
    SqlEvidenceRepository,
    SqlReadinessRepository,
    SqlWorkItemRepository,
)
from ravegraph.db.session import Database

__all__ = [
    "Base",
    "Database",
    "SqlClaimRepository",
    "SqlControlRepository",
    "SqlEvidenceRepository",
    "SqlReadinessRepository",
    "SqlWorkItemRepository",
]
