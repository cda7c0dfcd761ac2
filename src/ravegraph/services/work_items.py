from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ravegraph.core.errors import NotFoundError
from ravegraph.domain.models import WorkItem, WorkItemCounts, WorkItemFilters
from ravegraph.domain.ports import WorkItemRepository
from ravegraph.services.base import parse_input, require_positive_id


@dataclass(slots=True)
class WorkItemService:
    """Incident-derived work queries."""

    repository: WorkItemRepository

    async def list_work_items(
        self, filters: WorkItemFilters | Mapping[str, Any] | None = None
    ) -> list[WorkItem]:
        return await self.repository.list_work_items(parse_input(WorkItemFilters, filters))

    async def get_work_item(self, work_item_id: int) -> WorkItem:
        require_positive_id("WorkItem", work_item_id)
        item = await self.repository.get_work_item(work_item_id)
        if item is None:
            raise NotFoundError("WorkItem", work_item_id)
        return item

    async def count_work_items(self, service_id: str | None = None) -> WorkItemCounts:
        return await self.repository.count_work_items(service_id)
