"""Evidence ledger rules shared by the repositories and the services."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from ravegraph.core.errors import ValidationError


def compute_expires_at(collected_at: datetime, ttl_hours: int | None) -> datetime | None:
    """Expiry is collection time plus the TTL; no TTL means the item never expires."""
    if ttl_hours is None:
        return None
    if ttl_hours < 1:
        raise ValidationError(f"ttl_hours must be at least 1, got {ttl_hours}")
    return collected_at + timedelta(hours=ttl_hours)


def unique_ids(ids: Iterable[int]) -> list[int]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))
