"""Scheduler adapter backed by an asyncio event loop."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine


class AsyncioScheduler:
    """Schedules callbacks and tasks on an asyncio event loop.

    Without an explicit loop, the running loop is looked up on each call,
    so the scheduler can be created before the loop starts running.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay, callback)

    def create_task(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        return self._get_loop().create_task(coro)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()
