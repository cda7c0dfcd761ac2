"""Tests for ordered shutdown hooks."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from ravegraph.shutdown import ShutdownManager


@pytest.mark.asyncio
async def test_hooks_run_in_reverse_order():
    order = []
    manager = ShutdownManager()

    async def first():
        order.append("first")

    async def second():
        order.append("second")

    manager.register("first", first)
    manager.register("second", second)

    await manager.shutdown()

    assert order == ["second", "first"]


@pytest.mark.asyncio
async def test_failing_hook_does_not_stop_others():
    order = []
    manager = ShutdownManager()

    async def a():
        order.append("a")

    async def b():
        raise RuntimeError("oops")

    async def c():
        order.append("c")

    manager.register("a", a)
    manager.register("b", b)
    manager.register("c", c)

    await manager.shutdown()

    assert order == ["c", "a"]


@pytest.mark.asyncio
async def test_only_shuts_down_once():
    hook = AsyncMock()
    manager = ShutdownManager()
    manager.register("once", hook)

    await manager.shutdown()
    await manager.shutdown()

    hook.assert_awaited_once()
    assert manager.is_shut_down


@pytest.mark.asyncio
async def test_concurrent_shutdown_runs_hooks_once():
    hook = AsyncMock()
    manager = ShutdownManager()
    manager.register("once", hook)

    await asyncio.gather(manager.shutdown(), manager.shutdown())

    hook.assert_awaited_once()
