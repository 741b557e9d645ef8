"""Throttled rate limit logging.

Every GitHub response reports the remaining quota. Logging each one would
flood the logs during pagination, so updates are coalesced: the first
update in a quiet period arms a timer, later updates replace the pending
snapshot, and when the timer fires the latest snapshot is logged once.

States:
    idle     no timer armed, nothing pending
    pending  timer armed, holding the newest snapshot of the window

Transitions:
    record (idle)     -> arm timer, hold snapshot           -> pending
    record (pending)  -> overwrite held snapshot            -> pending
    fire              -> emit held snapshot                 -> idle

An update arriving after the fire finds the throttle idle and arms a new
window, so coalescing continues for as long as updates keep coming.
"""

from __future__ import annotations

import asyncio

from github_pr_bot.config import get_settings
from github_pr_bot.logging import get_logger

from .schemas import RateLimitSnapshot

logger = get_logger(__name__)


class RateLimitLogThrottle:
    """Coalesces rate limit updates into at most one log line per window.

    Usage:
        throttle = RateLimitLogThrottle()
        throttle.record(remaining=4999, limit=5000)
        throttle.record(remaining=4998, limit=5000)
        # ~10s later: "rate limit 4998/5000" is logged once

    The timer is an asyncio TimerHandle; a pending handle never keeps the
    event loop from finishing. Outside a running loop there is nothing to
    schedule on, so updates are logged immediately.
    """

    def __init__(self, interval_seconds: float | None = None) -> None:
        """Initialize the throttle.

        Args:
            interval_seconds: Coalescing window (uses settings if not provided)
        """
        self._interval = (
            interval_seconds
            if interval_seconds is not None
            else get_settings().rate_limit.log_interval_seconds
        )
        self._latest: RateLimitSnapshot | None = None
        self._pending: RateLimitSnapshot | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def interval(self) -> float:
        """Coalescing window in seconds."""
        return self._interval

    @property
    def latest(self) -> RateLimitSnapshot | None:
        """Most recently recorded snapshot (None if nothing recorded yet)."""
        return self._latest

    @property
    def pending(self) -> RateLimitSnapshot | None:
        """Snapshot waiting for the timer to fire (None when idle)."""
        return self._pending

    @property
    def is_pending(self) -> bool:
        """Whether a log emission is scheduled."""
        if self._timer is None:
            return False
        # A timer armed on a loop that has since closed will never fire
        return self._loop is not None and not self._loop.is_closed()

    def record(self, remaining: int, limit: int) -> None:
        """Record the counters from a response."""
        snapshot = RateLimitSnapshot(remaining=remaining, limit=limit)
        self.record_snapshot(snapshot)

    def record_snapshot(self, snapshot: RateLimitSnapshot) -> None:
        """Record a parsed snapshot, scheduling or overwriting the pending emission."""
        self._latest = snapshot

        if self.is_pending:
            self._pending = snapshot
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._reset()
            self._emit(snapshot)
            return

        self._pending = snapshot
        self._loop = loop
        self._timer = loop.call_later(self._interval, self._fire)

    def close(self) -> None:
        """Cancel the timer and emit whatever is still pending."""
        snapshot = self._pending
        if self._timer is not None:
            self._timer.cancel()
        self._reset()
        if snapshot is not None:
            self._emit(snapshot)

    def _fire(self) -> None:
        snapshot = self._pending
        self._reset()
        if snapshot is not None:
            self._emit(snapshot)

    def _reset(self) -> None:
        self._pending = None
        self._timer = None
        self._loop = None

    def _emit(self, snapshot: RateLimitSnapshot) -> None:
        logger.info(
            "rate limit {remaining}/{limit}",
            type="githubRateLimit",
            remaining=snapshot.remaining,
            limit=snapshot.limit,
        )
