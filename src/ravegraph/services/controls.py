from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ravegraph.core.errors import NotFoundError
from ravegraph.domain.models import Control, ControlCounts, ControlFilters
from ravegraph.domain.ports import ControlRepository
from ravegraph.services.base import parse_input, require_positive_id


@dataclass(slots=True)
class ControlService:
    """Resilience backlog queries."""

    repository: ControlRepository

    async def list_controls(
        self, filters: ControlFilters | Mapping[str, Any] | None = None
    ) -> list[Control]:
        return await self.repository.list_controls(parse_input(ControlFilters, filters))

    async def get_control(self, control_id: int) -> Control:
        require_positive_id("Control", control_id)
        control = await self.repository.get_control(control_id)
        if control is None:
            raise NotFoundError("Control", control_id)
        return control

    async def count_controls(self, service_id: str | None = None) -> ControlCounts:
        return await self.repository.count_controls(service_id)
