from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from ravegraph.core.constants import DEFAULT_DAYS_BACK
from ravegraph.core.errors import ConfigurationError, NotFoundError
from ravegraph.db.models import (
    ClaimEvidenceModel,
    ClaimModel,
    ControlModel,
    EvidenceItemModel,
    EvidenceTagModel,
    ReadinessScoreModel,
    ServiceModel,
    WorkItemModel,
    utcnow,
)
from ravegraph.db.session import Database
from ravegraph.domain.ledger import compute_expires_at, unique_ids
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

logger = structlog.get_logger()


async def _count_by(
    database: Database,
    column: InstrumentedAttribute[Any],
    service_column: InstrumentedAttribute[Any],
    service_id: str | None,
) -> dict[str, int]:
    """Tally rows per value of ``column``; NULL values are left out."""
    stmt = select(column, func.count()).where(column.is_not(None)).group_by(column)
    if service_id:
        stmt = stmt.where(service_column == service_id)
    async with database.session() as session:
        result = await session.execute(stmt)
        return {value: int(count) for value, count in result.all()}


async def _require_service(session: AsyncSession, service_id: str) -> None:
    if await session.get(ServiceModel, service_id) is None:
        raise NotFoundError("Service", service_id)


@dataclass(slots=True)
class SqlControlRepository:
    """Resilience backlog reads."""

    database: Database

    async def list_controls(self, filters: ControlFilters | None = None) -> list[Control]:
        filters = filters or ControlFilters()
        stmt = select(ControlModel).order_by(ControlModel.created_at.desc(), ControlModel.id.desc())
        if filters.service_id:
            stmt = stmt.where(ControlModel.service_id == filters.service_id)
        if filters.status:
            stmt = stmt.where(ControlModel.status == filters.status.value)
        if filters.priority:
            stmt = stmt.where(ControlModel.priority == filters.priority.value)
        if filters.control_type:
            stmt = stmt.where(ControlModel.control_type == filters.control_type.value)
        if filters.incident_id is not None:
            stmt = stmt.where(ControlModel.incident_id == filters.incident_id)

        async with self.database.session() as session:
            result = await session.execute(stmt)
            return [Control.model_validate(row) for row in result.scalars()]

    async def get_control(self, control_id: int) -> Control | None:
        async with self.database.session() as session:
            model = await session.get(ControlModel, control_id)
            return Control.model_validate(model) if model else None

    async def count_controls(self, service_id: str | None = None) -> ControlCounts:
        by_type, by_priority, by_status = await asyncio.gather(
            _count_by(self.database, ControlModel.control_type, ControlModel.service_id, service_id),
            _count_by(self.database, ControlModel.priority, ControlModel.service_id, service_id),
            _count_by(self.database, ControlModel.status, ControlModel.service_id, service_id),
        )
        return ControlCounts(by_type=by_type, by_priority=by_priority, by_status=by_status)


@dataclass(slots=True)
class SqlWorkItemRepository:
    """Incident-derived work reads."""

    database: Database

    async def list_work_items(self, filters: WorkItemFilters | None = None) -> list[WorkItem]:
        filters = filters or WorkItemFilters()
        stmt = select(WorkItemModel).order_by(
            WorkItemModel.created_at.desc(), WorkItemModel.id.desc()
        )
        if filters.service_id:
            stmt = stmt.where(WorkItemModel.service_id == filters.service_id)
        if filters.status:
            stmt = stmt.where(WorkItemModel.status == filters.status.value)
        if filters.work_type:
            stmt = stmt.where(WorkItemModel.work_type == filters.work_type.value)
        if filters.control_id is not None:
            stmt = stmt.where(WorkItemModel.control_id == filters.control_id)
        if filters.incident_id is not None:
            stmt = stmt.where(WorkItemModel.incident_id == filters.incident_id)

        async with self.database.session() as session:
            result = await session.execute(stmt)
            return [WorkItem.model_validate(row) for row in result.scalars()]

    async def get_work_item(self, work_item_id: int) -> WorkItem | None:
        async with self.database.session() as session:
            model = await session.get(WorkItemModel, work_item_id)
            return WorkItem.model_validate(model) if model else None

    async def count_work_items(self, service_id: str | None = None) -> WorkItemCounts:
        by_status, by_type = await asyncio.gather(
            _count_by(self.database, WorkItemModel.status, WorkItemModel.service_id, service_id),
            _count_by(self.database, WorkItemModel.work_type, WorkItemModel.service_id, service_id),
        )
        return WorkItemCounts(by_status=by_status, by_type=by_type)


@dataclass(slots=True)
class SqlReadinessRepository:
    """Readiness score history."""

    database: Database

    async def list_scores(self, filters: ReadinessFilters | None = None) -> list[ReadinessScore]:
        """Scores within the window, grouped by service and newest first per service."""
        filters = filters or ReadinessFilters()
        days_back = filters.days_back or DEFAULT_DAYS_BACK
        cutoff = utcnow() - timedelta(days=days_back)

        stmt = (
            select(ReadinessScoreModel)
            .where(ReadinessScoreModel.recorded_at >= cutoff)
            .order_by(
                ReadinessScoreModel.service_id,
                ReadinessScoreModel.recorded_at.desc(),
                ReadinessScoreModel.id.desc(),
            )
        )
        if filters.service_id:
            stmt = stmt.where(ReadinessScoreModel.service_id == filters.service_id)

        async with self.database.session() as session:
            result = await session.execute(stmt)
            return [ReadinessScore.model_validate(row) for row in result.scalars()]

    async def average_latest_score(self, service_id: str | None = None) -> float:
        """Mean of each service's most recent score (not of all history)."""
        ranked = select(
            ReadinessScoreModel.score.label("score"),
            func.row_number()
            .over(
                partition_by=ReadinessScoreModel.service_id,
                order_by=[ReadinessScoreModel.recorded_at.desc(), ReadinessScoreModel.id.desc()],
            )
            .label("position"),
        )
        if service_id:
            ranked = ranked.where(ReadinessScoreModel.service_id == service_id)
        latest = ranked.subquery("latest_scores")
        stmt = select(func.avg(latest.c.score)).where(latest.c.position == 1)

        async with self.database.session() as session:
            value = (await session.execute(stmt)).scalar_one_or_none()
        return float(value) if value is not None else 0.0

    async def count_tracked_services(self, service_id: str | None = None) -> int:
        stmt = select(func.count(func.distinct(ReadinessScoreModel.service_id)))
        if service_id:
            stmt = stmt.where(ReadinessScoreModel.service_id == service_id)
        async with self.database.session() as session:
            return int((await session.execute(stmt)).scalar_one())

    async def record_score(self, data: RecordScoreInput) -> ReadinessScore:
        now = utcnow()
        model = ReadinessScoreModel(
            service_id=data.service_id,
            service_name=data.service_name,
            score=data.score,
            section_scores=data.section_scores,
            recorded_at=data.recorded_at or now,
            created_at=now,
        )
        async with self.database.transaction() as session:
            session.add(model)
            await session.flush()
            return ReadinessScore.model_validate(model)


def _to_evidence(model: EvidenceItemModel) -> EvidenceItem:
    return EvidenceItem(
        id=model.id,
        service_id=model.service_id,
        evidence_type=model.evidence_type,
        source=model.source,
        body=model.body,
        tags=[tag.tag for tag in model.tags],
        confidence=model.confidence,
        ttl_hours=model.ttl_hours,
        collected_at=model.collected_at,
        expires_at=model.expires_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _replace_tags(model: EvidenceItemModel, tags: Sequence[str]) -> None:
    # Reuse rows for tags that survive so the (evidence_id, tag) key is never re-inserted.
    existing = {tag.tag: tag for tag in model.tags}
    replacement = []
    for position, value in enumerate(tags):
        tag = existing.get(value) or EvidenceTagModel(tag=value)
        tag.position = position
        replacement.append(tag)
    model.tags = replacement


@dataclass(slots=True)
class SqlEvidenceRepository:
    """Evidence items: search, upsert with expiry, delete."""

    database: Database

    async def get_evidence(self, evidence_id: int) -> EvidenceItem | None:
        async with self.database.session() as session:
            model = await session.get(EvidenceItemModel, evidence_id)
            return _to_evidence(model) if model else None

    async def search_evidence(self, filters: EvidenceFilters | None = None) -> list[EvidenceItem]:
        filters = filters or EvidenceFilters()
        stmt = select(EvidenceItemModel).order_by(
            EvidenceItemModel.collected_at.desc(), EvidenceItemModel.id.desc()
        )
        if filters.service_id:
            stmt = stmt.where(EvidenceItemModel.service_id == filters.service_id)
        if filters.evidence_type:
            stmt = stmt.where(EvidenceItemModel.evidence_type == filters.evidence_type.value)
        if filters.tags:
            # any-match: one shared tag is enough
            stmt = stmt.where(EvidenceItemModel.tags.any(EvidenceTagModel.tag.in_(filters.tags)))
        if filters.fresh_only:
            stmt = stmt.where(
                or_(EvidenceItemModel.expires_at.is_(None), EvidenceItemModel.expires_at > utcnow())
            )

        async with self.database.session() as session:
            result = await session.execute(stmt)
            return [_to_evidence(model) for model in result.scalars()]

    async def upsert_evidence(self, data: UpsertEvidenceInput) -> EvidenceItem:
        """Insert, or fully replace the row named by ``data.id``."""
        now = utcnow()
        collected_at = data.collected_at or now
        expires_at = compute_expires_at(collected_at, data.ttl_hours)

        async with self.database.transaction() as session:
            await _require_service(session, data.service_id)

            if data.id is not None:
                model = await session.get(EvidenceItemModel, data.id)
                if model is None:
                    raise NotFoundError("EvidenceItem", data.id)
            else:
                model = EvidenceItemModel(created_at=now, tags=[])
                session.add(model)

            model.service_id = data.service_id
            model.evidence_type = data.evidence_type.value
            model.source = data.source
            model.body = data.body
            model.confidence = data.confidence
            model.ttl_hours = data.ttl_hours
            model.collected_at = collected_at
            model.expires_at = expires_at
            model.updated_at = now
            _replace_tags(model, data.tags)

            await session.flush()
            item = _to_evidence(model)

        logger.info(
            "evidence_upserted",
            evidence_id=item.id,
            service_id=item.service_id,
            created=data.id is None,
        )
        return item

    async def delete_evidence(self, evidence_id: int) -> None:
        async with self.database.transaction() as session:
            await session.execute(
                delete(ClaimEvidenceModel).where(ClaimEvidenceModel.evidence_id == evidence_id)
            )
            await session.execute(
                delete(EvidenceTagModel).where(EvidenceTagModel.evidence_id == evidence_id)
            )
            await session.execute(delete(EvidenceItemModel).where(EvidenceItemModel.id == evidence_id))


@dataclass(slots=True)
class SqlClaimRepository:
    """Claims and their evidence links."""

    database: Database

    async def get_claim(self, claim_id: int) -> ClaimWithEvidence | None:
        async with self.database.session() as session:
            model = await session.get(ClaimModel, claim_id)
            if model is None:
                return None

            stmt = (
                select(EvidenceItemModel)
                .join(ClaimEvidenceModel, ClaimEvidenceModel.evidence_id == EvidenceItemModel.id)
                .where(ClaimEvidenceModel.claim_id == claim_id)
                .order_by(EvidenceItemModel.collected_at.desc(), EvidenceItemModel.id.desc())
            )
            result = await session.execute(stmt)
            evidence = [_to_evidence(row) for row in result.scalars()]

        claim = Claim.model_validate(model)
        return ClaimWithEvidence(**claim.model_dump(), evidence=evidence)

    async def list_claims(self, filters: ClaimFilters | None = None) -> list[Claim]:
        filters = filters or ClaimFilters()
        stmt = select(ClaimModel).order_by(ClaimModel.created_at.desc(), ClaimModel.id.desc())
        if filters.service_id:
            stmt = stmt.where(ClaimModel.service_id == filters.service_id)
        if filters.section:
            stmt = stmt.where(ClaimModel.section == filters.section)
        if filters.status:
            stmt = stmt.where(ClaimModel.status == filters.status.value)

        async with self.database.session() as session:
            result = await session.execute(stmt)
            return [Claim.model_validate(row) for row in result.scalars()]

    async def upsert_claim(self, data: UpsertClaimInput) -> Claim:
        """Insert or fully replace a claim.

        On update a supplied ``evidence_ids`` list replaces the whole link set in
        the same transaction as the row update; ``None`` leaves links untouched.
        """
        now = utcnow()
        async with self.database.transaction() as session:
            await _require_service(session, data.service_id)

            if data.id is not None:
                model = await session.get(ClaimModel, data.id)
                if model is None:
                    raise NotFoundError("Claim", data.id)
            else:
                model = ClaimModel(created_at=now)
                session.add(model)

            model.service_id = data.service_id
            model.title = data.title
            model.section = data.section
            model.status = data.status.value
            model.confidence = data.confidence
            model.reason = data.reason
            model.updated_at = now
            await session.flush()

            if data.id is not None and data.evidence_ids is not None:
                await session.execute(
                    delete(ClaimEvidenceModel).where(ClaimEvidenceModel.claim_id == model.id)
                )
                logger.info(
                    "claim_links_replaced", claim_id=model.id, evidence_ids=data.evidence_ids
                )
            if data.evidence_ids:
                await self._insert_links(session, model.id, data.evidence_ids)

            claim = Claim.model_validate(model)

        logger.info("claim_upserted", claim_id=claim.id, created=data.id is None)
        return claim

    async def link_evidence(self, claim_id: int, evidence_ids: Sequence[int]) -> None:
        """Link evidence to a claim; already-linked pairs are skipped."""
        if not evidence_ids:
            return
        async with self.database.transaction() as session:
            await self._insert_links(session, claim_id, evidence_ids)

    async def unlink_evidence(self, claim_id: int, evidence_ids: Sequence[int]) -> None:
        if not evidence_ids:
            return
        async with self.database.transaction() as session:
            await session.execute(
                delete(ClaimEvidenceModel).where(
                    ClaimEvidenceModel.claim_id == claim_id,
                    ClaimEvidenceModel.evidence_id.in_(list(evidence_ids)),
                )
            )

    async def delete_claim(self, claim_id: int) -> None:
        async with self.database.transaction() as session:
            await session.execute(
                delete(ClaimEvidenceModel).where(ClaimEvidenceModel.claim_id == claim_id)
            )
            await session.execute(delete(ClaimModel).where(ClaimModel.id == claim_id))

    async def _insert_links(
        self, session: AsyncSession, claim_id: int, evidence_ids: Sequence[int]
    ) -> None:
        rows = [{"claim_id": claim_id, "evidence_id": evidence_id} for evidence_id in unique_ids(evidence_ids)]
        dialect = self.database.dialect_name
        if dialect == "postgresql":
            stmt = pg_insert(ClaimEvidenceModel.__table__).values(rows).on_conflict_do_nothing()
        elif dialect == "sqlite":
            stmt = sqlite_insert(ClaimEvidenceModel.__table__).values(rows).on_conflict_do_nothing()
        else:
            raise ConfigurationError(f"Unsupported database dialect: {dialect}")
        await session.execute(stmt)
