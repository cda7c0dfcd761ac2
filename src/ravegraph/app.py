"""
Composition root.

Builds the one ``Database`` handle, the repositories over it and the services
over those. Front ends (CLI, tool server) only ever talk to an ``App``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ravegraph.config import Settings, get_settings
from ravegraph.db.repositories import (
    SqlClaimRepository,
    SqlControlRepository,
    SqlEvidenceRepository,
    SqlReadinessRepository,
    SqlWorkItemRepository,
)
from ravegraph.db.session import Database
from ravegraph.services import (
    ClaimService,
    ControlService,
    EvidenceService,
    ReadinessService,
    WorkDashboardService,
    WorkItemService,
)
from ravegraph.shutdown import ShutdownManager

logger = structlog.get_logger()


@dataclass
class App:
    database: Database
    controls: ControlService
    work_items: WorkItemService
    readiness: ReadinessService
    evidence: EvidenceService
    claims: ClaimService
    dashboard: WorkDashboardService
    shutdown_manager: ShutdownManager = field(default_factory=ShutdownManager)

    async def close(self) -> None:
        await self.shutdown_manager.shutdown()


def build_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
) -> App:
    """Wire the application; pass ``database`` to reuse an existing handle (tests)."""
    cfg = settings or get_settings()
    db = database or Database.from_settings(cfg)

    control_repo = SqlControlRepository(db)
    work_item_repo = SqlWorkItemRepository(db)
    readiness_repo = SqlReadinessRepository(db)

    app = App(
        database=db,
        controls=ControlService(control_repo),
        work_items=WorkItemService(work_item_repo),
        readiness=ReadinessService(readiness_repo),
        evidence=EvidenceService(SqlEvidenceRepository(db)),
        claims=ClaimService(SqlClaimRepository(db)),
        dashboard=WorkDashboardService(control_repo, work_item_repo, readiness_repo),
    )
    app.shutdown_manager.register("database", db.dispose)
    logger.debug("app_built", dialect=db.dialect_name, environment=cfg.environment)
    return app
