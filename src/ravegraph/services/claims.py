from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from ravegraph.core.errors import NotFoundError, ValidationError
from ravegraph.domain.ledger import unique_ids
from ravegraph.domain.models import Claim, ClaimFilters, ClaimWithEvidence, UpsertClaimInput
from ravegraph.domain.ports import ClaimRepository
from ravegraph.services.base import parse_input, require_positive_id

logger = structlog.get_logger()


def _evidence_ids(evidence_ids: Sequence[int]) -> list[int]:
    if isinstance(evidence_ids, (str, bytes)):
        raise ValidationError("evidence_ids must be a list of integers")
    for evidence_id in evidence_ids:
        require_positive_id("EvidenceItem", evidence_id)
    return unique_ids(evidence_ids)


@dataclass(slots=True)
class ClaimService:
    """Claims and their links to evidence."""

    repository: ClaimRepository

    async def get_claim(self, claim_id: int) -> ClaimWithEvidence:
        require_positive_id("Claim", claim_id)
        claim = await self.repository.get_claim(claim_id)
        if claim is None:
            raise NotFoundError("Claim", claim_id)
        return claim

    async def list_claims(
        self, filters: ClaimFilters | Mapping[str, Any] | None = None
    ) -> list[Claim]:
        return await self.repository.list_claims(parse_input(ClaimFilters, filters))

    async def upsert_claim(self, data: UpsertClaimInput | Mapping[str, Any]) -> Claim:
        """
        Insert or replace a claim.

        On update, ``evidence_ids`` replaces the linked evidence; leave it out
        to keep the current links.
        """
        return await self.repository.upsert_claim(parse_input(UpsertClaimInput, data))

    async def link_evidence(self, claim_id: int, evidence_ids: Sequence[int]) -> None:
        require_positive_id("Claim", claim_id)
        ids = _evidence_ids(evidence_ids)
        await self.repository.link_evidence(claim_id, ids)
        logger.info("evidence_linked", claim_id=claim_id, evidence_ids=ids)

    async def unlink_evidence(self, claim_id: int, evidence_ids: Sequence[int]) -> None:
        require_positive_id("Claim", claim_id)
        ids = _evidence_ids(evidence_ids)
        await self.repository.unlink_evidence(claim_id, ids)
        logger.info("evidence_unlinked", claim_id=claim_id, evidence_ids=ids)

    async def delete_claim(self, claim_id: int) -> None:
        require_positive_id("Claim", claim_id)
        await self.repository.delete_claim(claim_id)
        logger.info("claim_deleted", claim_id=claim_id)
