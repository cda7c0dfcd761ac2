"""Tests for the service layer with mocked repositories."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from ravegraph.core.errors import NotFoundError, ValidationError
from ravegraph.domain.models import (
    ClaimFilters,
    ClaimStatus,
    ClaimWithEvidence,
    ControlFilters,
    EvidenceFilters,
    EvidenceType,
    ReadinessFilters,
    ReadinessScore,
    TrendDirection,
    UpsertClaimInput,
    UpsertEvidenceInput,
    WorkItemFilters,
)
from ravegraph.services import (
    ClaimService,
    ControlService,
    EvidenceService,
    ReadinessService,
    WorkItemService,
)

NOW = datetime(2026, 2, 10, tzinfo=UTC)


class TestControlService:
    @pytest.mark.asyncio
    async def test_list_accepts_camel_case_mapping(self):
        repo = AsyncMock()
        repo.list_controls.return_value = []

        result = await ControlService(repo).list_controls({"serviceId": "checkout-api"})

        assert result == []
        repo.list_controls.assert_awaited_once_with(ControlFilters(service_id="checkout-api"))

    @pytest.mark.asyncio
    async def test_list_without_filters(self):
        repo = AsyncMock()
        repo.list_controls.return_value = []

        await ControlService(repo).list_controls()

        repo.list_controls.assert_awaited_once_with(ControlFilters())

    @pytest.mark.asyncio
    async def test_invalid_enum_rejected_before_io(self):
        repo = AsyncMock()

        with pytest.raises(ValidationError) as exc_info:
            await ControlService(repo).list_controls({"status": "DONE"})

        assert exc_info.value.details["fields"] == ["status"]
        repo.list_controls.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_filter_rejected(self):
        with pytest.raises(ValidationError):
            await ControlService(AsyncMock()).list_controls({"owner": "sre"})

    @pytest.mark.asyncio
    async def test_get_missing(self):
        repo = AsyncMock()
        repo.get_control.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await ControlService(repo).get_control(5)

        assert exc_info.value.entity == "Control"
        assert exc_info.value.entity_id == 5


class TestWorkItemService:
    @pytest.mark.asyncio
    async def test_list_passes_filters(self):
        repo = AsyncMock()
        repo.list_work_items.return_value = []

        await WorkItemService(repo).list_work_items(WorkItemFilters(control_id=3))

        repo.list_work_items.assert_awaited_once_with(WorkItemFilters(control_id=3))

    @pytest.mark.asyncio
    async def test_get_missing(self):
        repo = AsyncMock()
        repo.get_work_item.return_value = None

        with pytest.raises(NotFoundError, match="WorkItem with id 8 not found"):
            await WorkItemService(repo).get_work_item(8)

    @pytest.mark.asyncio
    async def test_rejects_non_positive_id(self):
        repo = AsyncMock()

        with pytest.raises(ValidationError):
            await WorkItemService(repo).get_work_item(0)

        repo.get_work_item.assert_not_awaited()


class TestReadinessService:
    @pytest.mark.asyncio
    async def test_trends_from_repository_scores(self):
        repo = AsyncMock()
        repo.list_scores.return_value = [
            ReadinessScore(
                id=2, service_id="svc-1", service_name="Svc", score=90, recorded_at=NOW, created_at=NOW
            ),
            ReadinessScore(
                id=1, service_id="svc-1", service_name="Svc", score=80, recorded_at=NOW, created_at=NOW
            ),
        ]

        trends = await ReadinessService(repo).get_trends({"serviceId": "svc-1", "daysBack": 7})

        repo.list_scores.assert_awaited_once_with(ReadinessFilters(service_id="svc-1", days_back=7))
        assert len(trends) == 1
        assert trends[0].trend == TrendDirection.IMPROVING

    @pytest.mark.asyncio
    async def test_days_back_must_be_positive(self):
        with pytest.raises(ValidationError):
            await ReadinessService(AsyncMock()).get_trends({"days_back": 0})

    @pytest.mark.asyncio
    async def test_record_score_validates_range(self):
        repo = AsyncMock()

        with pytest.raises(ValidationError):
            await ReadinessService(repo).record_score(
                {"service_id": "svc-1", "service_name": "Svc", "score": 101}
            )

        repo.record_score.assert_not_awaited()


class TestEvidenceService:
    @pytest.mark.asyncio
    async def test_get_missing(self):
        repo = AsyncMock()
        repo.get_evidence.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await EvidenceService(repo).get_evidence(3)

        assert exc_info.value.entity == "EvidenceItem"

    @pytest.mark.asyncio
    async def test_upsert_parses_mapping(self):
        repo = AsyncMock()

        await EvidenceService(repo).upsert_evidence(
            {
                "serviceId": "checkout-api",
                "evidenceType": "SBOM",
                "source": "syft",
                "body": {"packages": 212},
                "tags": ["supply-chain", "supply-chain"],
                "confidence": 90,
                "ttlHours": 24,
            }
        )

        data = repo.upsert_evidence.await_args.args[0]
        assert isinstance(data, UpsertEvidenceInput)
        assert data.evidence_type == EvidenceType.SBOM
        assert data.tags == ["supply-chain"]
        assert data.ttl_hours == 24

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "override",
        [{"confidence": 101}, {"confidence": -1}, {"ttl_hours": 0}, {"evidence_type": "LOGS"}],
    )
    async def test_upsert_rejects_out_of_range(self, override):
        repo = AsyncMock()
        data = {
            "service_id": "checkout-api",
            "evidence_type": "SBOM",
            "source": "syft",
            "body": {},
            "confidence": 50,
        }
        data.update(override)

        with pytest.raises(ValidationError):
            await EvidenceService(repo).upsert_evidence(data)

        repo.upsert_evidence.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_passes_filters(self):
        repo = AsyncMock()
        repo.search_evidence.return_value = []

        await EvidenceService(repo).search_evidence({"tags": ["slo"], "freshOnly": True})

        repo.search_evidence.assert_awaited_once_with(
            EvidenceFilters(tags=["slo"], fresh_only=True)
        )


class TestClaimService:
    @pytest.mark.asyncio
    async def test_get_missing_claim(self):
        repo = AsyncMock()
        repo.get_claim.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await ClaimService(repo).get_claim(77)

        assert exc_info.value.entity == "Claim"
        assert exc_info.value.entity_id == 77
        assert exc_info.value.details == {"entity": "Claim", "id": 77}

    @pytest.mark.asyncio
    async def test_get_claim(self):
        repo = AsyncMock()
        repo.get_claim.return_value = ClaimWithEvidence(
            id=1,
            service_id="checkout-api",
            title="t",
            section="s",
            created_at=NOW,
            updated_at=NOW,
        )

        claim = await ClaimService(repo).get_claim(1)

        assert claim.evidence == []

    @pytest.mark.asyncio
    async def test_upsert_keeps_absent_evidence_ids_as_none(self):
        repo = AsyncMock()

        await ClaimService(repo).upsert_claim(
            {"id": 4, "serviceId": "checkout-api", "title": "t", "section": "s", "status": "PASS"}
        )

        data = repo.upsert_claim.await_args.args[0]
        assert isinstance(data, UpsertClaimInput)
        assert data.status == ClaimStatus.PASS
        assert data.evidence_ids is None

    @pytest.mark.asyncio
    async def test_link_dedupes_ids(self):
        repo = AsyncMock()

        await ClaimService(repo).link_evidence(1, [3, 3, 2])

        repo.link_evidence.assert_awaited_once_with(1, [3, 2])

    @pytest.mark.asyncio
    async def test_link_rejects_bad_ids(self):
        repo = AsyncMock()

        with pytest.raises(ValidationError):
            await ClaimService(repo).link_evidence(1, [0])

        repo.link_evidence.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_claims(self):
        repo = AsyncMock()
        repo.list_claims.return_value = []

        await ClaimService(repo).list_claims({"status": "FAIL"})

        repo.list_claims.assert_awaited_once_with(ClaimFilters(status=ClaimStatus.FAIL))
