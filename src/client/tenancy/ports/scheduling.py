"""Scheduling ports used by the session guard.

The guard runs on the same cooperative scheduler as the UI. These
protocols let it start single-shot timers, spawn follow-up work and
listen for user activity without depending on a concrete event loop or
UI toolkit.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine, Protocol, runtime_checkable

from tenancy.domain.value_objects import ActivitySignal


@runtime_checkable
class TimerHandle(Protocol):
    """Handle of a scheduled callback."""

    def cancel(self) -> None:
        """Cancel the callback; cancelling twice is a no-op."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Schedules single-shot callbacks and the tasks they start."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        ...

    def create_task(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        """Run ``coro`` on the loop this scheduler fires callbacks on."""
        ...


@runtime_checkable
class ActivitySource(Protocol):
    """Source of user activity signals (pointer, keyboard, scroll)."""

    def attach(self, listener: Callable[[ActivitySignal], None]) -> Callable[[], None]:
        """Start delivering activity signals to ``listener``.

        Returns:
            A callable that detaches the listener
        """
        ...
