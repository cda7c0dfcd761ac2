"""Tests for the work dashboard aggregator."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from ravegraph.core.errors import DatabaseError, ValidationError
from ravegraph.domain.models import (
    Control,
    ControlCounts,
    ControlFilters,
    ControlType,
    Priority,
    ReadinessFilters,
    ReadinessScore,
    TrendDirection,
    WorkItem,
    WorkItemCounts,
    WorkItemFilters,
    WorkStatus,
)
from ravegraph.services.dashboard import WorkDashboardService

NOW = datetime(2026, 2, 10, tzinfo=UTC)


def make_control(id: int) -> Control:
    return Control(
        id=id,
        control_type=ControlType.DETECT,
        title=f"Control {id}",
        service_id="api-service",
        priority=Priority.HIGH,
        created_at=NOW,
        updated_at=NOW,
    )


def make_work_item(id: int) -> WorkItem:
    return WorkItem(id=id, title=f"Work {id}", created_at=NOW, updated_at=NOW)


@pytest.fixture
def control_repo():
    repo = AsyncMock()
    repo.list_controls.return_value = [make_control(1), make_control(2)]
    repo.count_controls.return_value = ControlCounts(
        by_type={ControlType.DETECT: 2}, by_priority={Priority.HIGH: 2}, by_status={}
    )
    return repo


@pytest.fixture
def work_item_repo():
    repo = AsyncMock()
    repo.list_work_items.return_value = [make_work_item(1)]
    repo.count_work_items.return_value = WorkItemCounts(by_status={WorkStatus.OPEN: 1})
    return repo


@pytest.fixture
def readiness_repo():
    repo = AsyncMock()
    repo.list_scores.return_value = [
        ReadinessScore(
            id=1, service_id="svc-1", service_name="Svc", score=90, recorded_at=NOW, created_at=NOW
        ),
        ReadinessScore(
            id=2, service_id="svc-1", service_name="Svc", score=80, recorded_at=NOW, created_at=NOW
        ),
    ]
    repo.average_latest_score.return_value = 75.0
    repo.count_tracked_services.return_value = 3
    return repo


@pytest.fixture
def service(control_repo, work_item_repo, readiness_repo):
    return WorkDashboardService(control_repo, work_item_repo, readiness_repo)


class TestWorkDashboardService:
    @pytest.mark.asyncio
    async def test_assembles_complete_dashboard(self, service):
        dashboard = await service.get_dashboard()

        assert [c.id for c in dashboard.resilience_backlog.controls] == [1, 2]
        assert dashboard.resilience_backlog.count_by_type == {ControlType.DETECT: 2}
        assert dashboard.incident_work.count_by_status == {WorkStatus.OPEN: 1}
        assert dashboard.readiness_trends[0].trend == TrendDirection.IMPROVING
        assert dashboard.summary.avg_readiness_score == 75
        assert dashboard.summary.services_tracked == 3

    @pytest.mark.asyncio
    async def test_totals_match_list_lengths(self, service):
        dashboard = await service.get_dashboard()

        assert dashboard.summary.total_controls == len(dashboard.resilience_backlog.controls) == 2
        assert dashboard.summary.total_work_items == len(dashboard.incident_work.work_items) == 1

    @pytest.mark.asyncio
    async def test_service_filter_reaches_every_fetch(
        self, service, control_repo, work_item_repo, readiness_repo
    ):
        await service.get_dashboard({"serviceId": "api-service"})

        control_repo.list_controls.assert_awaited_once_with(ControlFilters(service_id="api-service"))
        control_repo.count_controls.assert_awaited_once_with("api-service")
        work_item_repo.list_work_items.assert_awaited_once_with(
            WorkItemFilters(service_id="api-service")
        )
        work_item_repo.count_work_items.assert_awaited_once_with("api-service")
        readiness_repo.list_scores.assert_awaited_once_with(
            ReadinessFilters(service_id="api-service")
        )
        readiness_repo.average_latest_score.assert_awaited_once_with("api-service")
        readiness_repo.count_tracked_services.assert_awaited_once_with("api-service")

    @pytest.mark.asyncio
    async def test_no_filter_means_all_services(self, service, control_repo):
        await service.get_dashboard()

        control_repo.list_controls.assert_awaited_once_with(ControlFilters())
        control_repo.count_controls.assert_awaited_once_with(None)

    @pytest.mark.asyncio
    async def test_wire_format_is_camel_case(self, service):
        wire = (await service.get_dashboard()).to_dict()

        assert set(wire) == {"resilienceBacklog", "incidentWork", "readinessTrends", "summary"}
        assert wire["summary"] == {
            "totalControls": 2,
            "totalWorkItems": 1,
            "servicesTracked": 3,
            "avgReadinessScore": 75.0,
        }
        assert wire["resilienceBacklog"]["countByType"] == {"DETECT": 2}
        assert wire["readinessTrends"][0]["currentScore"] == 90
        assert wire["readinessTrends"][0]["trend"] == "IMPROVING"

    @pytest.mark.asyncio
    async def test_failure_propagates_unwrapped_and_cancels_siblings(
        self, service, control_repo, readiness_repo
    ):
        cancelled = asyncio.Event()

        async def slow_scores(filters):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        readiness_repo.list_scores.side_effect = slow_scores
        control_repo.list_controls.side_effect = DatabaseError("connection refused")

        with pytest.raises(DatabaseError, match="connection refused"):
            await asyncio.wait_for(service.get_dashboard(), timeout=5)

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_invalid_filter(self, service, control_repo):
        with pytest.raises(ValidationError):
            await service.get_dashboard({"service": "api-service"})

        control_repo.list_controls.assert_not_awaited()
