"""
Timer scheduling on the running asyncio loop.

The orchestrator and the push channel never create timers themselves; they
ask a scheduler, so tests can swap in one that fires on demand.
"""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any, Set

from config.logging_config import get_logger
logger = get_logger(__name__)


class AsyncioScheduler:
    """Delayed and periodic callbacks backed by the current event loop"""

    def __init__(self):
        self._handles: Set[asyncio.TimerHandle] = set()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of one-shot timers that have not fired or been cancelled"""
        return len(self._handles)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        loop = asyncio.get_running_loop()

        def _fire():
            self._handles.discard(handle)
            callback()

        handle = loop.call_later(delay, _fire)
        self._handles.add(handle)
        return handle

    def every(self, interval: float, callback: Callable[[], Any], name: str = "periodic") -> asyncio.Task:
        """
        Run ``callback`` every ``interval`` seconds until cancelled.

        ``callback`` may be sync or async. Its failures are logged and the
        loop keeps going.
        """
        async def _loop():
            while True:
                await asyncio.sleep(interval)
                try:
                    result = callback()
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception(f"Periodic task '{name}' failed")

        task = asyncio.get_running_loop().create_task(_loop(), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel_all(self):
        """Cancel every pending timer and periodic task."""
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        for task in list(self._tasks):
            task.cancel()
