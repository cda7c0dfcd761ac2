"""
Repository contracts.

Single-entity reads return ``None`` when nothing matches; the service layer
turns that into ``NotFoundError``. List reads always succeed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ravegraph.domain.models import (
    Claim,
    ClaimFilters,
    ClaimWithEvidence,
    Control,
    ControlCounts,
    ControlFilters,
    EvidenceFilters,
    EvidenceItem,
    ReadinessFilters,
    ReadinessScore,
    RecordScoreInput,
    UpsertClaimInput,
    UpsertEvidenceInput,
    WorkItem,
    WorkItemCounts,
    WorkItemFilters,
)


class ControlRepository(Protocol):
    async def list_controls(self, filters: ControlFilters | None = None) -> list[Control]: ...

    async def get_control(self, control_id: int) -> Control | None: ...

    async def count_controls(self, service_id: str | None = None) -> ControlCounts: ...


class WorkItemRepository(Protocol):
    async def list_work_items(self, filters: WorkItemFilters | None = None) -> list[WorkItem]: ...

    async def get_work_item(self, work_item_id: int) -> WorkItem | None: ...

    async def count_work_items(self, service_id: str | None = None) -> WorkItemCounts: ...


class ReadinessRepository(Protocol):
    async def list_scores(self, filters: ReadinessFilters | None = None) -> list[ReadinessScore]: ...

    async def average_latest_score(self, service_id: str | None = None) -> float: ...

    async def count_tracked_services(self, service_id: str | None = None) -> int: ...

    async def record_score(self, data: RecordScoreInput) -> ReadinessScore: ...


class EvidenceRepository(Protocol):
    async def get_evidence(self, evidence_id: int) -> EvidenceItem | None: ...

    async def search_evidence(self, filters: EvidenceFilters | None = None) -> list[EvidenceItem]: ...

    async def upsert_evidence(self, data: UpsertEvidenceInput) -> EvidenceItem: ...

    async def delete_evidence(self, evidence_id: int) -> None: ...


class ClaimRepository(Protocol):
    async def get_claim(self, claim_id: int) -> ClaimWithEvidence | None: ...

    async def list_claims(self, filters: ClaimFilters | None = None) -> list[Claim]: ...

    async def upsert_claim(self, data: UpsertClaimInput) -> Claim: ...

    async def link_evidence(self, claim_id: int, evidence_ids: Sequence[int]) -> None: ...

    async def unlink_evidence(self, claim_id: int, evidence_ids: Sequence[int]) -> None: ...

    async def delete_claim(self, claim_id: int) -> None: ...
