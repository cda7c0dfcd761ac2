"""
Ordered shutdown hooks.

Hooks run newest-first so resources are released in the reverse of the order
they were acquired. A failing hook is logged and the rest still run.
"""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger()

ShutdownHook = Callable[[], Awaitable[None]]


class ShutdownManager:
    def __init__(self) -> None:
        self._hooks: list[tuple[str, ShutdownHook]] = []
        self._done = False
        self._lock = asyncio.Lock()

    @property
    def is_shut_down(self) -> bool:
        return self._done

    def register(self, name: str, hook: ShutdownHook) -> None:
        self._hooks.append((name, hook))

    async def shutdown(self) -> None:
        """Run every hook once; later calls are no-ops."""
        async with self._lock:
            if self._done:
                return
            self._done = True

            logger.info("shutdown_started", hooks=len(self._hooks))
            for name, hook in reversed(self._hooks):
                try:
                    await hook()
                except Exception as exc:
                    logger.error("shutdown_handler_failed", handler=name, error=str(exc))
                else:
                    logger.debug("shutdown_handler_completed", handler=name)
            logger.info("shutdown_completed")

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Run ``shutdown`` on SIGINT/SIGTERM (no-op where the loop cannot add handlers)."""
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError):
                logger.debug("signal_handler_unsupported", signal=sig.name)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("shutdown_signal_received", signal=sig.name)
        asyncio.ensure_future(self.shutdown())
