"""
Domain records for the work dashboard.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``); both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ravegraph.core.constants import SCORE_MAX, SCORE_MIN


def _ensure_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]
Score = Annotated[float, Field(ge=SCORE_MIN, le=SCORE_MAX)]
Confidence = Annotated[int, Field(ge=SCORE_MIN, le=SCORE_MAX)]


class ControlType(StrEnum):
    PREVENT = "PREVENT"
    DETECT = "DETECT"
    RESPOND = "RESPOND"
    LEARN = "LEARN"


class ControlStatus(StrEnum):
    PROPOSED = "PROPOSED"
    APPROVED = "APPROVED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class Priority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class WorkType(StrEnum):
    REMEDIATION = "REMEDIATION"
    INVESTIGATION = "INVESTIGATION"
    DOCUMENTATION = "DOCUMENTATION"
    MODEL_UPDATE = "MODEL_UPDATE"


class WorkStatus(StrEnum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"


class ExternalSystem(StrEnum):
    GITHUB = "GITHUB"
    JIRA = "JIRA"
    LINEAR = "LINEAR"


class Severity(StrEnum):
    SEV1 = "SEV1"
    SEV2 = "SEV2"
    SEV3 = "SEV3"
    SEV4 = "SEV4"


class EvidenceType(StrEnum):
    SBOM = "SBOM"
    VULNERABILITY_SCAN = "VULNERABILITY_SCAN"
    MONITORING = "MONITORING"
    TESTING = "TESTING"
    DEPLOYMENT = "DEPLOYMENT"
    PROVENANCE = "PROVENANCE"
    CONFIGURATION = "CONFIGURATION"
    OTHER = "OTHER"


class ClaimStatus(StrEnum):
    PASS = "PASS"
    PARTIAL = "PARTIAL"
    FAIL = "FAIL"
    UNKNOWN = "UNKNOWN"


class TrendDirection(StrEnum):
    IMPROVING = "IMPROVING"
    DECLINING = "DECLINING"
    STABLE = "STABLE"
    NEW = "NEW"


class DomainModel(BaseModel):
    """Base for all records crossing the service boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FilterModel(DomainModel):
    """Base for filter objects: unknown fields are rejected, absent fields do not constrain."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# Entities


class Service(DomainModel):
    id: str
    name: str
    tier: str | None = None
    created_at: UtcDatetime | None = None


class Incident(DomainModel):
    id: int
    title: str
    severity: Severity | None = None
    service_id: str | None = None
    started_at: UtcDatetime
    resolved_at: UtcDatetime | None = None
    impact: str | None = None
    created_at: UtcDatetime | None = None


class ReadinessScore(DomainModel):
    id: int
    service_id: str = Field(min_length=1)
    service_name: str
    score: Score
    section_scores: dict[str, float] | None = None
    recorded_at: UtcDatetime
    created_at: UtcDatetime


class ReadinessTrend(DomainModel):
    service_id: str
    service_name: str
    current_score: float
    previous_score: float | None = None
    trend: TrendDirection
    scores: list[ReadinessScore]


class Control(DomainModel):
    id: int
    control_type: ControlType
    title: str
    description: str | None = None
    incident_id: int | None = None
    service_id: str | None = None
    priority: Priority | None = None
    status: ControlStatus = ControlStatus.PROPOSED
    created_at: UtcDatetime
    updated_at: UtcDatetime


class WorkItem(DomainModel):
    id: int
    external_id: str | None = None
    external_system: ExternalSystem | None = None
    title: str
    description: str | None = None
    work_type: WorkType | None = None
    control_id: int | None = None
    incident_id: int | None = None
    service_id: str | None = None
    status: WorkStatus = WorkStatus.OPEN
    assigned_to: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class EvidenceItem(DomainModel):
    id: int
    service_id: str
    evidence_type: EvidenceType
    source: str
    body: dict[str, Any]
    tags: list[str] = Field(default_factory=list)
    confidence: Confidence
    ttl_hours: int | None = None
    collected_at: UtcDatetime
    expires_at: UtcDatetime | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    def is_fresh(self, now: datetime | None = None) -> bool:
        """True when the item never expires or expires strictly after ``now``."""
        if self.expires_at is None:
            return True
        return self.expires_at > (now or datetime.now(UTC))


class Claim(DomainModel):
    id: int
    service_id: str
    title: str
    section: str
    status: ClaimStatus = ClaimStatus.UNKNOWN
    confidence: Confidence = 0
    reason: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ClaimWithEvidence(Claim):
    evidence: list[EvidenceItem] = Field(default_factory=list)


# Counts


class ControlCounts(DomainModel):
    by_type: dict[ControlType, int] = Field(default_factory=dict)
    by_priority: dict[Priority, int] = Field(default_factory=dict)
    by_status: dict[ControlStatus, int] = Field(default_factory=dict)


class WorkItemCounts(DomainModel):
    by_status: dict[WorkStatus, int] = Field(default_factory=dict)
    by_type: dict[WorkType, int] = Field(default_factory=dict)


# Filters


class ControlFilters(FilterModel):
    service_id: str | None = None
    status: ControlStatus | None = None
    priority: Priority | None = None
    control_type: ControlType | None = None
    incident_id: int | None = None


class WorkItemFilters(FilterModel):
    service_id: str | None = None
    status: WorkStatus | None = None
    work_type: WorkType | None = None
    control_id: int | None = None
    incident_id: int | None = None


class ReadinessFilters(FilterModel):
    service_id: str | None = None
    # None means DEFAULT_DAYS_BACK
    days_back: int | None = Field(default=None, ge=1)


class EvidenceFilters(FilterModel):
    service_id: str | None = None
    evidence_type: EvidenceType | None = None
    tags: list[str] | None = None
    fresh_only: bool = False


class ClaimFilters(FilterModel):
    service_id: str | None = None
    section: str | None = None
    status: ClaimStatus | None = None


class DashboardFilters(FilterModel):
    service_id: str | None = None


# Write inputs


def _unique(values: list[Any]) -> list[Any]:
    return list(dict.fromkeys(values))


class RecordScoreInput(FilterModel):
    service_id: str = Field(min_length=1)
    service_name: str
    score: Score
    section_scores: dict[str, Score] | None = None
    recorded_at: UtcDatetime | None = None


class UpsertEvidenceInput(FilterModel):
    id: int | None = None
    service_id: str = Field(min_length=1)
    evidence_type: EvidenceType
    source: str = Field(min_length=1)
    body: dict[str, Any]
    tags: list[str] = Field(default_factory=list)
    confidence: Confidence
    ttl_hours: int | None = Field(default=None, ge=1)
    collected_at: UtcDatetime | None = None

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        return _unique(value)


class UpsertClaimInput(FilterModel):
    id: int | None = None
    service_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    section: str = Field(min_length=1)
    status: ClaimStatus = ClaimStatus.UNKNOWN
    confidence: Confidence = 0
    reason: str | None = None
    # None leaves existing links alone on update; a list replaces them.
    evidence_ids: list[int] | None = None

    @field_validator("evidence_ids")
    @classmethod
    def _dedupe_evidence_ids(cls, value: list[int] | None) -> list[int] | None:
        return None if value is None else _unique(value)


# Dashboard


class ResilienceBacklog(DomainModel):
    controls: list[Control]
    count_by_type: dict[ControlType, int]
    count_by_priority: dict[Priority, int]
    count_by_status: dict[ControlStatus, int]


class IncidentWork(DomainModel):
    work_items: list[WorkItem]
    count_by_status: dict[WorkStatus, int]
    count_by_type: dict[WorkType, int]


class DashboardSummary(DomainModel):
    total_controls: int
    total_work_items: int
    services_tracked: int
    avg_readiness_score: float


class WorkDashboard(DomainModel):
    resilience_backlog: ResilienceBacklog
    incident_work: IncidentWork
    readiness_trends: list[ReadinessTrend]
    summary: DashboardSummary

    def to_dict(self) -> dict[str, Any]:
        """Wire representation shared by both front ends."""
        return self.model_dump(mode="json", by_alias=True)


def to_wire(value: Any) -> Any:
    """JSON-ready form of records and lists of records (camelCase keys, ISO timestamps)."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    return value
