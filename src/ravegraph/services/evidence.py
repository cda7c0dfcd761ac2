from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from ravegraph.core.errors import NotFoundError
from ravegraph.domain.models import EvidenceFilters, EvidenceItem, UpsertEvidenceInput
from ravegraph.domain.ports import EvidenceRepository
from ravegraph.services.base import parse_input, require_positive_id

logger = structlog.get_logger()


@dataclass(slots=True)
class EvidenceService:
    """Evidence ledger operations."""

    repository: EvidenceRepository

    async def get_evidence(self, evidence_id: int) -> EvidenceItem:
        require_positive_id("EvidenceItem", evidence_id)
        item = await self.repository.get_evidence(evidence_id)
        if item is None:
            raise NotFoundError("EvidenceItem", evidence_id)
        return item

    async def search_evidence(
        self, filters: EvidenceFilters | Mapping[str, Any] | None = None
    ) -> list[EvidenceItem]:
        return await self.repository.search_evidence(parse_input(EvidenceFilters, filters))

    async def upsert_evidence(
        self, data: UpsertEvidenceInput | Mapping[str, Any]
    ) -> EvidenceItem:
        """Insert, or replace every field of an existing item when ``id`` is given."""
        return await self.repository.upsert_evidence(parse_input(UpsertEvidenceInput, data))

    async def delete_evidence(self, evidence_id: int) -> None:
        require_positive_id("EvidenceItem", evidence_id)
        await self.repository.delete_evidence(evidence_id)
        logger.info("evidence_deleted", evidence_id=evidence_id)
