"""Inactivity session guard.

While a session with an active tenant exists the guard is armed: a
single-shot timer runs and every user activity signal restarts it. When
the timer fires the guard disarms and asks the identity provider to sign
the user out, once. The timer is cancelled on every other exit path
(sign-out, tenant change, teardown) so a stale sign-out can never fire
after a fresh sign-in.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Callable

from tenancy.application.observability import (
    DefaultSessionGuardProbe,
    SessionGuardProbe,
)
from tenancy.domain.value_objects import ActivitySignal, Identity
from tenancy.ports.identity import IIdentityProvider
from tenancy.ports.scheduling import ActivitySource, Scheduler, TimerHandle

DEFAULT_TIMEOUT_SECONDS = 30 * 60


class GuardState(StrEnum):
    """States of the session guard."""

    ARMED = "armed"
    DISARMED = "disarmed"


class SessionGuard:
    """Signs the user out after a period without activity."""

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        scheduler: Scheduler,
        activity_source: ActivitySource | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        probe: SessionGuardProbe | None = None,
    ):
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._identity_provider = identity_provider
        self._scheduler = scheduler
        self._activity_source = activity_source
        self._timeout_seconds = timeout_seconds
        self._probe = probe or DefaultSessionGuardProbe()
        self._armed_for: tuple[str, str] | None = None
        self._timer: TimerHandle | None = None
        self._detach_activity: Callable[[], None] | None = None
        self._expiry_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> GuardState:
        return GuardState.ARMED if self._armed_for is not None else GuardState.DISARMED

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    @property
    def expiry_task(self) -> asyncio.Task[None] | None:
        """The sign-out task started by the last expiry, if any."""
        return self._expiry_task

    def sync(self, identity: Identity | None, active_tenant_id: str | None) -> None:
        """Arm or disarm the guard to match the current session.

        Arms when both an identity and an active tenant are present and
        disarms otherwise. A change of identity or tenant while armed
        restarts the timer.
        """
        if identity is None or not active_tenant_id:
            self._disarm(reason="session_absent")
            return

        key = (identity.id, active_tenant_id)
        if self._armed_for == key:
            return

        if self._armed_for is not None:
            self._cancel_timer()
        self._armed_for = key
        self._start_timer()
        if self._activity_source is not None and self._detach_activity is None:
            self._detach_activity = self._activity_source.attach(self.record_activity)
        self._probe.guard_armed(
            user_id=identity.id,
            tenant_id=active_tenant_id,
            timeout_seconds=self._timeout_seconds,
        )

    def record_activity(self, signal: ActivitySignal | str) -> None:
        """Restart the inactivity timer; ignored while disarmed."""
        signal = ActivitySignal(signal)
        if self._armed_for is None:
            return
        self._cancel_timer()
        self._start_timer()
        self._probe.activity_recorded(signal=signal)

    def close(self) -> None:
        """Disarm for component teardown."""
        self._disarm(reason="teardown")

    def _start_timer(self) -> None:
        self._timer = self._scheduler.call_later(self._timeout_seconds, self._on_timeout)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _disarm(self, reason: str) -> None:
        was_armed = self._armed_for is not None
        self._cancel_timer()
        if self._detach_activity is not None:
            detach, self._detach_activity = self._detach_activity, None
            detach()
        self._armed_for = None
        if was_armed:
            self._probe.guard_disarmed(reason=reason)

    def _on_timeout(self) -> None:
        if self._armed_for is None:
            return
        user_id, tenant_id = self._armed_for
        self._timer = None
        self._disarm(reason="inactivity_timeout")
        self._probe.inactivity_timeout(user_id=user_id, tenant_id=tenant_id)
        self._expiry_task = self._scheduler.create_task(self._sign_out(user_id))

    async def _sign_out(self, user_id: str) -> None:
        try:
            await self._identity_provider.sign_out()
        except Exception as e:
            # The transport drops the user regardless; no retry.
            self._probe.forced_sign_out_failed(user_id=user_id, error=e)
