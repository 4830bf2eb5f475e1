"""
Debouncing

A cancellable scheduled task on the running asyncio loop: every new
``schedule`` call resets the timer, and only the last call within the quiet
window fires.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

logger = logging.getLogger("news_search.session")


class Debouncer:
    """
    Fire a coroutine function at most once per quiet window.

    Only the waiting period is cancellable. Once the timer has fired the
    coroutine runs as an independent task and later calls do not cancel it.
    """

    def __init__(self, delay: float) -> None:
        if delay < 0:
            raise ValueError("Debounce delay must be non-negative.")

        self._delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired."""
        return self._handle is not None

    @property
    def running(self) -> int:
        """Number of fired calls that have not finished yet."""
        return len(self._tasks)

    def schedule(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> None:
        """
        Arm the timer for ``func(*args)``, replacing any pending call.

        Must be called from within a running event loop.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, func, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def drain(self) -> None:
        """
        Wait until every fired call has finished.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _fire(self, func: Callable[..., Awaitable[Any]], args: tuple) -> None:
        self._handle = None
        task = asyncio.ensure_future(func(*args))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Debounced call failed: %s",
                type(task.exception()).__name__,
                exc_info=task.exception(),
            )
