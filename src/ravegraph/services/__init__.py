"""Service layer: input validation, not-found translation and the dashboard aggregator."""

from ravegraph.services.claims import ClaimService
from ravegraph.services.controls import ControlService
from ravegraph.services.dashboard import WorkDashboardService
from ravegraph.services.evidence import EvidenceService
from ravegraph.services.readiness import ReadinessService
from ravegraph.services.work_items import WorkItemService

__all__ = [
    "ClaimService",
    "ControlService",
    "EvidenceService",
    "ReadinessService",
    "WorkDashboardService",
    "WorkItemService",
]
