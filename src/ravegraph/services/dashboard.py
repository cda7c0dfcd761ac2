"""
Work dashboard aggregator.

Fans out four independent reads (backlog, incident work, readiness trends and
summary statistics) and joins them into one ``WorkDashboard``. The service-id
filter is applied to every read, counts and summary included.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from ravegraph.domain.models import (
    ControlFilters,
    DashboardFilters,
    DashboardSummary,
    IncidentWork,
    ReadinessFilters,
    ReadinessTrend,
    ResilienceBacklog,
    WorkDashboard,
    WorkItemFilters,
)
from ravegraph.domain.ports import ControlRepository, ReadinessRepository, WorkItemRepository
from ravegraph.readiness.trends import build_trends
from ravegraph.services.base import parse_input

logger = structlog.get_logger()


def _first_error(group: BaseExceptionGroup) -> BaseException:
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


@dataclass(slots=True)
class WorkDashboardService:
    controls: ControlRepository
    work_items: WorkItemRepository
    readiness: ReadinessRepository

    async def get_dashboard(
        self, filters: DashboardFilters | Mapping[str, Any] | None = None
    ) -> WorkDashboard:
        """
        Build the dashboard.

        The reads run concurrently; the first failure cancels the others and
        is re-raised as-is.

        Raises:
            DatabaseError: A read failed
            ValidationError: ``filters`` is malformed
        """
        filters = parse_input(DashboardFilters, filters)
        service_id = filters.service_id

        try:
            async with asyncio.TaskGroup() as tg:
                backlog_task = tg.create_task(self._resilience_backlog(service_id))
                work_task = tg.create_task(self._incident_work(service_id))
                trends_task = tg.create_task(self._readiness_trends(service_id))
                stats_task = tg.create_task(self._readiness_stats(service_id))
        except BaseExceptionGroup as group:
            raise _first_error(group) from None

        backlog = backlog_task.result()
        work = work_task.result()
        avg_score, services_tracked = stats_task.result()

        dashboard = WorkDashboard(
            resilience_backlog=backlog,
            incident_work=work,
            readiness_trends=trends_task.result(),
            summary=DashboardSummary(
                total_controls=len(backlog.controls),
                total_work_items=len(work.work_items),
                services_tracked=services_tracked,
                avg_readiness_score=avg_score,
            ),
        )
        logger.info(
            "dashboard_built",
            service_id=service_id,
            controls=dashboard.summary.total_controls,
            work_items=dashboard.summary.total_work_items,
            services_tracked=services_tracked,
        )
        return dashboard

    async def _resilience_backlog(self, service_id: str | None) -> ResilienceBacklog:
        controls, counts = await asyncio.gather(
            self.controls.list_controls(ControlFilters(service_id=service_id)),
            self.controls.count_controls(service_id),
        )
        return ResilienceBacklog(
            controls=controls,
            count_by_type=counts.by_type,
            count_by_priority=counts.by_priority,
            count_by_status=counts.by_status,
        )

    async def _incident_work(self, service_id: str | None) -> IncidentWork:
        work_items, counts = await asyncio.gather(
            self.work_items.list_work_items(WorkItemFilters(service_id=service_id)),
            self.work_items.count_work_items(service_id),
        )
        return IncidentWork(
            work_items=work_items,
            count_by_status=counts.by_status,
            count_by_type=counts.by_type,
        )

    async def _readiness_trends(self, service_id: str | None) -> list[ReadinessTrend]:
        scores = await self.readiness.list_scores(ReadinessFilters(service_id=service_id))
        return build_trends(scores)

    async def _readiness_stats(self, service_id: str | None) -> tuple[float, int]:
        avg_score, services_tracked = await asyncio.gather(
            self.readiness.average_latest_score(service_id),
            self.readiness.count_tracked_services(service_id),
        )
        return avg_score, services_tracked
