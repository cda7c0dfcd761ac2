"""
Shared plumbing for CLI commands.

Every data command runs inside ``run_with_app``: build the app, check the
store answers, run the action, then shut down.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ravegraph.app import App, build_app
from ravegraph.core.errors import DatabaseError, ValidationError

T = TypeVar("T")


async def _with_app(action: Callable[[App], Awaitable[T]], check_store: bool) -> T:
    app = build_app()
    try:
        if check_store and not await app.database.ping():
            raise DatabaseError("store unreachable", is_connectivity=True)
        return await action(app)
    finally:
        await app.close()


def run_with_app(action: Callable[[App], Awaitable[T]], *, check_store: bool = True) -> T:
    """Run ``action`` against a freshly built app on a new event loop."""
    return asyncio.run(_with_app(action, check_store))


def parse_json_object(raw: str, option: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{option} is not valid JSON: {exc.msg}") from exc
    if not isinstance(value, dict):
        raise ValidationError(f"{option} must be a JSON object")
    return value


def drop_none(**values: Any) -> dict[str, Any]:
    """Keyword arguments minus the ones argparse left unset."""
    return {key: value for key, value in values.items() if value is not None}
