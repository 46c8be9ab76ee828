"""
Trailing-edge debouncer.

Holds at most one pending action. Every schedule() call replaces the
pending action and restarts the quiet-period timer, so a burst of calls
collapses into a single run after the last one. Runs never overlap: each
one waits for the previous run to finish, so they complete in the order
they started.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]


class Debouncer:
    def __init__(self, delay_seconds: float, name: str = "debounce"):
        self.delay_seconds = delay_seconds
        self.name = name
        self._action: Action | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._running: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        return self._action is not None

    def schedule(self, action: Action) -> None:
        """
        Replace the pending action and restart the timer.

        Outside a running event loop the action is only stored; flush()
        runs it later.
        """
        self._cancel_timer()
        self._action = action

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"{self.name}: no running loop, action held until flush")
            return

        self._handle = loop.call_later(self.delay_seconds, self._fire)

    def cancel(self) -> None:
        """Drop the pending action without running it."""
        self._cancel_timer()
        self._action = None

    async def flush(self) -> None:
        """Run the pending action now, then wait for everything in flight."""
        self._cancel_timer()
        action, self._action = self._action, None
        if action is not None:
            await self._run(action)
        await self.drain()

    async def drain(self) -> None:
        """Wait for runs already started by the timer."""
        if self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        action, self._action = self._action, None
        if action is None:
            return
        task = asyncio.get_running_loop().create_task(self._run(action))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, action: Action) -> None:
        async with self._lock:
            try:
                await action()
            except Exception:
                logger.exception(f"{self.name}: debounced action failed")
