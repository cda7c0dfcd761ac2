from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from ravegraph.domain.models import (
    ReadinessFilters,
    ReadinessScore,
    ReadinessTrend,
    RecordScoreInput,
)
from ravegraph.domain.ports import ReadinessRepository
from ravegraph.readiness.trends import build_trends
from ravegraph.services.base import parse_input

logger = structlog.get_logger()


@dataclass(slots=True)
class ReadinessService:
    """Readiness history and per-service trends."""

    repository: ReadinessRepository

    async def list_scores(
        self, filters: ReadinessFilters | Mapping[str, Any] | None = None
    ) -> list[ReadinessScore]:
        return await self.repository.list_scores(parse_input(ReadinessFilters, filters))

    async def get_trends(
        self, filters: ReadinessFilters | Mapping[str, Any] | None = None
    ) -> list[ReadinessTrend]:
        scores = await self.list_scores(filters)
        return build_trends(scores)

    async def average_latest_score(self, service_id: str | None = None) -> float:
        return await self.repository.average_latest_score(service_id)

    async def count_tracked_services(self, service_id: str | None = None) -> int:
        return await self.repository.count_tracked_services(service_id)

    async def record_score(self, data: RecordScoreInput | Mapping[str, Any]) -> ReadinessScore:
        score = await self.repository.record_score(parse_input(RecordScoreInput, data))
        logger.info("score_recorded", service_id=score.service_id, score=score.score)
        return score
