"""Search debouncer - single-slot cancellable timer for search input.

Each ``schedule`` cancels the pending call (if any) and arms a new one, so
only the last query typed within the quiet window reaches the callback.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from catalog_sync.infra.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class SearchDebouncer:
    """Debounces search queries into a single delayed callback."""

    def __init__(
        self,
        callback: Callable[[str], Awaitable[Any]],
        delay_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        """Initialize the debouncer.

        Args:
            callback: Coroutine function invoked with the settled query
            delay_seconds: Quiet window before the callback fires
        """
        self._callback = callback
        self.delay_seconds = delay_seconds
        self._task: asyncio.Task[None] | None = None
        self._pending_query: str | None = None
        # Every timer task still running, including callbacks already in flight
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """Whether a call is armed and has not fired yet."""
        return self._task is not None and not self._task.done() and self._pending_query is not None

    @property
    def pending_query(self) -> str | None:
        return self._pending_query if self.pending else None

    def schedule(self, query: str) -> None:
        """Arm the timer for ``query``, replacing any pending call."""
        self.cancel()
        self._pending_query = query
        self._task = asyncio.create_task(self._fire_after_delay(query))
        self._tasks.add(self._task)
        self._task.add_done_callback(self._tasks.discard)
        logger.debug("Search scheduled", query=query, delay_seconds=self.delay_seconds)

    def cancel(self) -> None:
        """Drop the pending call, if any.

        A callback that has already started is left to finish.
        """
        if self._task is not None and self._pending_query is not None and not self._task.done():
            self._task.cancel()
            logger.debug("Pending search cancelled", query=self._pending_query)
        self._pending_query = None

    async def _fire_after_delay(self, query: str) -> None:
        await asyncio.sleep(self.delay_seconds)
        # Past this point cancel() no longer drops the call; only aclose() stops it
        self._pending_query = None
        logger.debug("Search debounce elapsed", query=query)
        try:
            await self._callback(query)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Debounced search failed", query=query, error=str(e), exc_info=True)

    async def aclose(self) -> None:
        """Cancel the pending call and any callback still running, then wait for them."""
        self.cancel()
        self._task = None
        tasks = list(self._tasks)
        if not tasks:
            return
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("Search debouncer stopped", stopped_tasks=len(tasks))
