"""Input coercion shared by the services."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

import pydantic

from ravegraph.core.errors import ValidationError

M = TypeVar("M", bound=pydantic.BaseModel)


def parse_input(model: type[M], value: M | Mapping[str, Any] | None) -> M:
    """
    Accept a model instance or a plain mapping (snake_case or camelCase keys).

    ``None`` yields the model's defaults. Pydantic failures are re-raised as
    ``ValidationError`` carrying the offending fields in ``details``.
    """
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(dict(value or {}))
    except pydantic.ValidationError as exc:
        fields = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
        raise ValidationError(
            f"{model.__name__}: {exc.error_count()} invalid field(s): {', '.join(fields)}",
            details={"fields": fields},
        ) from exc


def require_positive_id(entity: str, entity_id: int) -> int:
    if isinstance(entity_id, bool) or not isinstance(entity_id, int) or entity_id < 1:
        raise ValidationError(f"{entity} id must be a positive integer, got {entity_id!r}")
    return entity_id
