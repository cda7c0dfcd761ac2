"""
Tool-calling server over stdio.

Exposes the dashboard and ledger operations as MCP tools. Results are JSON
text; domain errors come back as tool errors carrying the user-facing
message. Logs go to stderr, stdout belongs to the protocol.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import pydantic
import structlog
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ravegraph.app import App, build_app
from ravegraph.config import get_settings
from ravegraph.core.errors import (
    ConfigurationError,
    RavegraphError,
    describe_error,
    main_with_error_handling,
)
from ravegraph.domain.models import (
    ClaimWithEvidence,
    ControlFilters,
    DashboardFilters,
    EvidenceItem,
    IncidentWork,
    ReadinessFilters,
    ReadinessTrend,
    ResilienceBacklog,
    WorkDashboard,
    WorkItemFilters,
    to_wire,
)
from ravegraph.logging import configure_logging
from ravegraph.mcp.schemas import TOOL_DEFINITIONS, TOOLS_BY_NAME, ClaimLinkInput, IdInput
from ravegraph.services.base import parse_input

logger = structlog.get_logger()

SERVER_NAME = "ravegraph-work-dashboard"


class ToolError(Exception):
    """Raised out of the call handler; the SDK reports it as an ``isError`` result."""


class DashboardTools:
    """Maps tool names onto service calls."""

    def __init__(self, app: App) -> None:
        self.app = app
        self._handlers: dict[str, Callable[[Any], Awaitable[Any]]] = {
            "get_resilience_backlog": self.get_resilience_backlog,
            "get_incident_work": self.get_incident_work,
            "get_readiness_trends": self.get_readiness_trends,
            "get_work_dashboard": self.get_work_dashboard,
            "upsert_evidence": self.app.evidence.upsert_evidence,
            "get_evidence": self.get_evidence,
            "search_evidence": self.app.evidence.search_evidence,
            "delete_evidence": self.delete_evidence,
            "upsert_claim": self.app.claims.upsert_claim,
            "get_claim": self.get_claim,
            "list_claims": self.app.claims.list_claims,
            "link_evidence": self.link_evidence,
            "unlink_evidence": self.unlink_evidence,
            "delete_claim": self.delete_claim,
        }

    def list_tools(self) -> list[Tool]:
        return [
            Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema())
            for tool in TOOL_DEFINITIONS
        ]

    async def call(self, name: str, arguments: dict[str, Any] | None) -> Any:
        """Validate ``arguments`` against the tool's schema and run it; returns wire data."""
        tool = TOOLS_BY_NAME.get(name)
        if tool is None:
            raise ToolError(f"Unknown tool: {name}")
        params = parse_input(tool.input_model, arguments or {})
        result = await self._handlers[name](params)
        return to_wire(result)

    async def get_resilience_backlog(self, filters: ControlFilters) -> ResilienceBacklog:
        controls, counts = await asyncio.gather(
            self.app.controls.list_controls(filters),
            self.app.controls.count_controls(filters.service_id),
        )
        return ResilienceBacklog(
            controls=controls,
            count_by_type=counts.by_type,
            count_by_priority=counts.by_priority,
            count_by_status=counts.by_status,
        )

    async def get_incident_work(self, filters: WorkItemFilters) -> IncidentWork:
        work_items, counts = await asyncio.gather(
            self.app.work_items.list_work_items(filters),
            self.app.work_items.count_work_items(filters.service_id),
        )
        return IncidentWork(
            work_items=work_items,
            count_by_status=counts.by_status,
            count_by_type=counts.by_type,
        )

    async def get_readiness_trends(self, filters: ReadinessFilters) -> list[ReadinessTrend]:
        return await self.app.readiness.get_trends(filters)

    async def get_work_dashboard(self, filters: DashboardFilters) -> WorkDashboard:
        return await self.app.dashboard.get_dashboard(filters)

    async def get_evidence(self, params: IdInput) -> EvidenceItem:
        return await self.app.evidence.get_evidence(params.id)

    async def delete_evidence(self, params: IdInput) -> dict[str, Any]:
        await self.app.evidence.delete_evidence(params.id)
        return {"id": params.id, "deleted": True}

    async def get_claim(self, params: IdInput) -> ClaimWithEvidence:
        return await self.app.claims.get_claim(params.id)

    async def link_evidence(self, params: ClaimLinkInput) -> dict[str, Any]:
        await self.app.claims.link_evidence(params.claim_id, params.evidence_ids)
        return {"claimId": params.claim_id, "evidenceIds": params.evidence_ids, "linked": True}

    async def unlink_evidence(self, params: ClaimLinkInput) -> dict[str, Any]:
        await self.app.claims.unlink_evidence(params.claim_id, params.evidence_ids)
        return {"claimId": params.claim_id, "evidenceIds": params.evidence_ids, "unlinked": True}

    async def delete_claim(self, params: IdInput) -> dict[str, Any]:
        await self.app.claims.delete_claim(params.id)
        return {"id": params.id, "deleted": True}


def create_server(tools: DashboardTools) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return tools.list_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        log = logger.bind(tool=name)
        try:
            result = await tools.call(name, arguments)
        except RavegraphError as exc:
            log.warning("tool_failed", kind=exc.kind.value, error=exc.message)
            raise ToolError(describe_error(exc)) from exc
        log.info("tool_called")
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    return server


async def serve(app: App) -> None:
    """Serve over stdio until the client disconnects or a signal arrives."""
    server = create_server(DashboardTools(app))
    serving = asyncio.current_task()

    async def stop_serving() -> None:
        if serving is not None:
            serving.cancel()

    # Registered after the database, so it runs before disposal.
    app.shutdown_manager.register("mcp_server", stop_serving)
    app.shutdown_manager.install_signal_handlers(asyncio.get_running_loop())

    logger.info("mcp_server_starting", server=SERVER_NAME, tools=len(TOOL_DEFINITIONS))
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    except asyncio.CancelledError:
        logger.info("mcp_server_stopped")
    finally:
        await app.close()


@main_with_error_handling()
def run() -> int:
    try:
        settings = get_settings()
    except pydantic.ValidationError as exc:
        raise ConfigurationError(f"invalid RAVEGRAPH_ settings: {exc}") from exc

    configure_logging(settings.log_level, fmt=settings.log_format)
    asyncio.run(serve(build_app(settings)))
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
