"""Cancel-and-replace scheduling of lint runs per document.

Only one lint run exists per document URI. Scheduling a new run cancels
the pending or running one first, which kills its child process and
removes its scratch directory.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from alintlsp.logging import get_logger


class RequestScheduler:
    """Keeps at most one lint task per document URI."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._lock = asyncio.Lock()
        self._logger = logger or get_logger("lsp.scheduler")

    async def schedule(
        self,
        uri: str,
        func: Callable[[], Awaitable[None]],
        delay_ms: int = 0,
    ) -> asyncio.Task[None]:
        """
        Replace any task for the URI with a new one.

        Args:
            uri: The document URI.
            func: The async function to run.
            delay_ms: Delay before running, so bursts of saves collapse.

        Returns:
            The scheduled task.
        """
        async with self._lock:
            await self._cancel_locked(uri)
            task = asyncio.create_task(self._delayed_call(uri, func, delay_ms))
            self._tasks[uri] = task
            return task

    async def cancel(self, uri: str) -> None:
        """Cancel any pending or running task for the URI."""
        async with self._lock:
            await self._cancel_locked(uri)

    async def cancel_all(self) -> None:
        async with self._lock:
            for uri in list(self._tasks):
                await self._cancel_locked(uri)

    async def _cancel_locked(self, uri: str) -> None:
        task = self._tasks.pop(uri, None)
        if task is None or task.done():
            return
        self._logger.debug("Cancelling superseded lint run for %s", uri)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _delayed_call(
        self, uri: str, func: Callable[[], Awaitable[None]], delay_ms: int
    ) -> None:
        try:
            if delay_ms > 0:
                await asyncio.sleep(delay_ms / 1000)
            await func()
        except asyncio.CancelledError:
            raise
        except Exception:
            self._logger.exception("Lint run for %s failed", uri)
        finally:
            current = asyncio.current_task()
            if self._tasks.get(uri) is current:
                del self._tasks[uri]
