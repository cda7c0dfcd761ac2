"""
Tool input schemas.

Each tool takes one pydantic model; its JSON schema (camelCase property
names) is what the server publishes as the tool's ``inputSchema``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from ravegraph.domain.models import (
    ClaimFilters,
    ControlFilters,
    DashboardFilters,
    EvidenceFilters,
    FilterModel,
    ReadinessFilters,
    UpsertClaimInput,
    UpsertEvidenceInput,
    WorkItemFilters,
)


class IdInput(FilterModel):
    id: int = Field(ge=1)


class ClaimLinkInput(FilterModel):
    claim_id: int = Field(ge=1)
    evidence_ids: list[int] = Field(min_length=1)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: type[BaseModel]

    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema(by_alias=True)


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        "get_resilience_backlog",
        "List resilience controls with counts by type, priority and status.",
        ControlFilters,
    ),
    ToolDefinition(
        "get_incident_work",
        "List incident-derived work items with counts by status and type.",
        WorkItemFilters,
    ),
    ToolDefinition(
        "get_readiness_trends",
        "Per-service readiness trend from the two most recent scores (default window 30 days).",
        ReadinessFilters,
    ),
    ToolDefinition(
        "get_work_dashboard",
        "Backlog, incident work, readiness trends and summary in one call.",
        DashboardFilters,
    ),
    ToolDefinition(
        "upsert_evidence",
        "Create an evidence item, or replace every field of an existing one when id is given.",
        UpsertEvidenceInput,
    ),
    ToolDefinition("get_evidence", "Fetch one evidence item by id.", IdInput),
    ToolDefinition(
        "search_evidence",
        "Search evidence by service, type and tags (any match); freshOnly hides expired items.",
        EvidenceFilters,
    ),
    ToolDefinition("delete_evidence", "Delete an evidence item and its claim links.", IdInput),
    ToolDefinition(
        "upsert_claim",
        "Create a claim, or replace an existing one when id is given. "
        "On update, evidenceIds replaces the linked evidence; omit it to keep links.",
        UpsertClaimInput,
    ),
    ToolDefinition("get_claim", "Fetch a claim with its linked evidence.", IdInput),
    ToolDefinition("list_claims", "List claims by service, section and status.", ClaimFilters),
    ToolDefinition("link_evidence", "Link evidence items to a claim (idempotent).", ClaimLinkInput),
    ToolDefinition("unlink_evidence", "Remove links between a claim and evidence items.", ClaimLinkInput),
    ToolDefinition("delete_claim", "Delete a claim and its evidence links.", IdInput),
)

TOOLS_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}
