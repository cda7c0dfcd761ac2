"""Tests for the control, work item and readiness repositories (SQLite)."""

from datetime import UTC, datetime, timedelta

import pytest

from ravegraph.db.models import ControlModel, ReadinessScoreModel, WorkItemModel
from ravegraph.db.repositories import (
    SqlControlRepository,
    SqlReadinessRepository,
    SqlWorkItemRepository,
)
from ravegraph.domain.models import (
    ControlFilters,
    ControlStatus,
    ControlType,
    Priority,
    ReadinessFilters,
    RecordScoreInput,
    WorkItemFilters,
    WorkStatus,
    WorkType,
)

NOW = datetime.now(UTC)


def control(id, service_id="checkout-api", hours_ago=0, **kw):
    created = NOW - timedelta(hours=hours_ago)
    kw.setdefault("control_type", "DETECT")
    kw.setdefault("title", f"Control {id}")
    return ControlModel(id=id, service_id=service_id, created_at=created, updated_at=created, **kw)


def work_item(id, service_id="checkout-api", hours_ago=0, **kw):
    created = NOW - timedelta(hours=hours_ago)
    kw.setdefault("title", f"Work {id}")
    return WorkItemModel(id=id, service_id=service_id, created_at=created, updated_at=created, **kw)


def readiness(service_id, score, days_ago, name=None):
    recorded = NOW - timedelta(days=days_ago)
    return ReadinessScoreModel(
        service_id=service_id,
        service_name=name or service_id,
        score=score,
        recorded_at=recorded,
        created_at=recorded,
    )


@pytest.fixture
async def backlog(seed):
    await seed(
        control(1, hours_ago=3, control_type="PREVENT", priority="HIGH", status="APPROVED", incident_id=7),
        control(2, hours_ago=1, control_type="DETECT", priority=None),
        control(3, service_id="search-api", hours_ago=2, control_type="DETECT", priority="LOW"),
    )
    await seed(
        work_item(1, hours_ago=2, work_type="REMEDIATION", control_id=1, status="IN_PROGRESS"),
        work_item(2, hours_ago=1, work_type=None),
        work_item(3, service_id="search-api", work_type="INVESTIGATION", incident_id=7),
    )


class TestControlRepository:
    @pytest.mark.asyncio
    async def test_list_newest_first(self, database, backlog):
        controls = await SqlControlRepository(database).list_controls()
        assert [c.id for c in controls] == [2, 3, 1]

    @pytest.mark.asyncio
    async def test_list_with_filters(self, database, backlog):
        repo = SqlControlRepository(database)

        by_service = await repo.list_controls(ControlFilters(service_id="checkout-api"))
        assert [c.id for c in by_service] == [2, 1]

        combined = await repo.list_controls(
            ControlFilters(
                service_id="checkout-api",
                status=ControlStatus.APPROVED,
                priority=Priority.HIGH,
                control_type=ControlType.PREVENT,
                incident_id=7,
            )
        )
        assert [c.id for c in combined] == [1]

        assert await repo.list_controls(ControlFilters(service_id="unknown")) == []

    @pytest.mark.asyncio
    async def test_records_are_typed(self, database, backlog):
        found = await SqlControlRepository(database).get_control(1)

        assert found.control_type == ControlType.PREVENT
        assert found.status == ControlStatus.APPROVED
        assert found.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing(self, database, backlog):
        assert await SqlControlRepository(database).get_control(999) is None

    @pytest.mark.asyncio
    async def test_counts_omit_null_categories(self, database, backlog):
        counts = await SqlControlRepository(database).count_controls()

        assert counts.by_type == {ControlType.PREVENT: 1, ControlType.DETECT: 2}
        assert counts.by_priority == {Priority.HIGH: 1, Priority.LOW: 1}
        assert counts.by_status == {ControlStatus.APPROVED: 1, ControlStatus.PROPOSED: 2}

    @pytest.mark.asyncio
    async def test_counts_scoped_to_service(self, database, backlog):
        counts = await SqlControlRepository(database).count_controls("search-api")

        assert counts.by_type == {ControlType.DETECT: 1}
        assert counts.by_priority == {Priority.LOW: 1}


class TestWorkItemRepository:
    @pytest.mark.asyncio
    async def test_list_newest_first(self, database, backlog):
        items = await SqlWorkItemRepository(database).list_work_items()
        assert [w.id for w in items] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_list_with_filters(self, database, backlog):
        repo = SqlWorkItemRepository(database)

        assert [w.id for w in await repo.list_work_items(WorkItemFilters(control_id=1))] == [1]
        assert [w.id for w in await repo.list_work_items(WorkItemFilters(incident_id=7))] == [3]
        assert [
            w.id
            for w in await repo.list_work_items(
                WorkItemFilters(status=WorkStatus.OPEN, work_type=WorkType.INVESTIGATION)
            )
        ] == [3]

    @pytest.mark.asyncio
    async def test_counts(self, database, backlog):
        repo = SqlWorkItemRepository(database)

        counts = await repo.count_work_items()
        assert counts.by_status == {WorkStatus.IN_PROGRESS: 1, WorkStatus.OPEN: 2}
        assert counts.by_type == {WorkType.REMEDIATION: 1, WorkType.INVESTIGATION: 1}

        scoped = await repo.count_work_items("checkout-api")
        assert scoped.by_type == {WorkType.REMEDIATION: 1}

    @pytest.mark.asyncio
    async def test_get(self, database, backlog):
        repo = SqlWorkItemRepository(database)

        assert (await repo.get_work_item(1)).control_id == 1
        assert await repo.get_work_item(42) is None


class TestReadinessRepository:
    @pytest.fixture
    async def history(self, seed):
        await seed(
            readiness("checkout-api", 80, days_ago=5),
            readiness("checkout-api", 90, days_ago=1),
            readiness("checkout-api", 50, days_ago=45),
            readiness("search-api", 60, days_ago=2),
        )

    @pytest.mark.asyncio
    async def test_list_scores_default_window(self, database, history):
        scores = await SqlReadinessRepository(database).list_scores()

        assert [(s.service_id, s.score) for s in scores] == [
            ("checkout-api", 90),
            ("checkout-api", 80),
            ("search-api", 60),
        ]

    @pytest.mark.asyncio
    async def test_list_scores_wider_window(self, database, history):
        scores = await SqlReadinessRepository(database).list_scores(
            ReadinessFilters(service_id="checkout-api", days_back=60)
        )
        assert [s.score for s in scores] == [90, 80, 50]

    @pytest.mark.asyncio
    async def test_average_uses_latest_score_per_service(self, database, history):
        repo = SqlReadinessRepository(database)

        assert await repo.average_latest_score() == pytest.approx(75.0)
        assert await repo.average_latest_score("checkout-api") == pytest.approx(90.0)

    @pytest.mark.asyncio
    async def test_average_empty_store(self, database):
        assert await SqlReadinessRepository(database).average_latest_score() == 0.0

    @pytest.mark.asyncio
    async def test_tracked_services(self, database, history):
        repo = SqlReadinessRepository(database)

        assert await repo.count_tracked_services() == 2
        assert await repo.count_tracked_services("search-api") == 1
        assert await repo.count_tracked_services("nobody") == 0

    @pytest.mark.asyncio
    async def test_record_score(self, database):
        repo = SqlReadinessRepository(database)

        recorded = await repo.record_score(
            RecordScoreInput(
                service_id="checkout-api",
                service_name="Checkout API",
                score=82.5,
                section_scores={"monitoring": 90, "runbooks": 75},
            )
        )

        assert recorded.id is not None
        assert recorded.section_scores == {"monitoring": 90, "runbooks": 75}
        scores = await repo.list_scores()
        assert [s.score for s in scores] == [82.5]
