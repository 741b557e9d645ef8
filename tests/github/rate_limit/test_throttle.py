"""Tests for RateLimitLogThrottle.

These tests verify the idle/pending state machine: one emission per
window carrying the last value recorded in it, re-arming after a fire,
and behavior outside a running event loop.
"""

import asyncio

from github_pr_bot.github.rate_limit import RateLimitLogThrottle, RateLimitSnapshot
from tests.conftest import rate_limit_records

WINDOW = 0.05


class TestThrottleWindow:
    """Tests for coalescing within one window."""

    async def test_burst_emits_once_with_last_value(self, log_records) -> None:
        """Many updates in one window produce one log line with the latest values."""
        throttle = RateLimitLogThrottle(interval_seconds=WINDOW)

        throttle.record(4999, 5000)
        throttle.record(4998, 5000)
        throttle.record(4990, 5000)

        assert rate_limit_records(log_records) == []
        assert throttle.is_pending is True

        await asyncio.sleep(WINDOW * 3)

        emitted = rate_limit_records(log_records)
        assert len(emitted) == 1
        assert emitted[0]["extra"]["remaining"] == 4990
        assert emitted[0]["extra"]["limit"] == 5000
        assert emitted[0]["message"] == "rate limit 4990/5000"
        assert throttle.is_pending is False

    async def test_pending_snapshot_is_overwritten(self) -> None:
        """Recording while pending replaces the held snapshot."""
        throttle = RateLimitLogThrottle(interval_seconds=WINDOW)

        throttle.record(10, 100)
        first = throttle.pending
        throttle.record(9, 100)

        assert first is not None
        assert first.remaining == 10
        assert throttle.pending is not None
        assert throttle.pending.remaining == 9

    async def test_no_emission_before_window_elapses(self, log_records) -> None:
        """Nothing is logged until the timer fires."""
        throttle = RateLimitLogThrottle(interval_seconds=10.0)
        throttle.record(4999, 5000)

        await asyncio.sleep(0)

        assert rate_limit_records(log_records) == []
        throttle.close()


class TestThrottleRearm:
    """Tests for the fire -> idle -> pending cycle."""

    async def test_update_after_fire_starts_new_window(self, log_records) -> None:
        """A value arriving after the fire is logged in its own window."""
        throttle = RateLimitLogThrottle(interval_seconds=WINDOW)

        throttle.record(100, 5000)
        await asyncio.sleep(WINDOW * 3)
        assert throttle.is_pending is False

        throttle.record(99, 5000)
        assert throttle.is_pending is True
        await asyncio.sleep(WINDOW * 3)

        emitted = rate_limit_records(log_records)
        assert [r["extra"]["remaining"] for r in emitted] == [100, 99]

    async def test_continuous_updates_keep_coalescing(self, log_records) -> None:
        """Updates spanning several windows yield one line per window."""
        throttle = RateLimitLogThrottle(interval_seconds=WINDOW)

        for remaining in range(50, 40, -1):
            throttle.record(remaining, 5000)
            await asyncio.sleep(WINDOW / 4)
        await asyncio.sleep(WINDOW * 3)

        remaining_logged = [r["extra"]["remaining"] for r in rate_limit_records(log_records)]
        assert remaining_logged
        assert remaining_logged == sorted(set(remaining_logged), reverse=True)
        assert remaining_logged[-1] == 41


class TestThrottleState:
    """Tests for snapshots, close and loop handling."""

    async def test_latest_tracks_most_recent(self) -> None:
        """latest always holds the newest snapshot."""
        throttle = RateLimitLogThrottle(interval_seconds=WINDOW)
        assert throttle.latest is None

        throttle.record(5, 10)
        throttle.record_snapshot(RateLimitSnapshot(remaining=4, limit=10))

        assert throttle.latest is not None
        assert throttle.latest.remaining == 4
        throttle.close()

    async def test_close_flushes_pending(self, log_records) -> None:
        """close() cancels the timer and logs what was pending."""
        throttle = RateLimitLogThrottle(interval_seconds=10.0)
        throttle.record(123, 5000)

        throttle.close()

        assert throttle.is_pending is False
        emitted = rate_limit_records(log_records)
        assert len(emitted) == 1
        assert emitted[0]["extra"]["remaining"] == 123

    async def test_close_when_idle_is_noop(self, log_records) -> None:
        """close() without anything pending logs nothing."""
        throttle = RateLimitLogThrottle(interval_seconds=WINDOW)
        throttle.close()
        assert rate_limit_records(log_records) == []

    def test_record_without_running_loop_emits_immediately(self, log_records) -> None:
        """Outside an event loop nothing can be scheduled, so the update is logged."""
        throttle = RateLimitLogThrottle(interval_seconds=10.0)

        throttle.record(4000, 5000)

        emitted = rate_limit_records(log_records)
        assert len(emitted) == 1
        assert emitted[0]["extra"]["remaining"] == 4000
        assert throttle.is_pending is False

    def test_pending_timer_does_not_keep_loop_alive(self) -> None:
        """asyncio.run() returns even with an emission scheduled far in the future."""
        throttle = RateLimitLogThrottle(interval_seconds=3600.0)

        async def main() -> bool:
            throttle.record(1, 5000)
            return throttle.is_pending

        assert asyncio.run(main()) is True
        # The loop that held the timer is closed, so the throttle is idle again
        assert throttle.is_pending is False

    def test_interval_defaults_to_settings(self) -> None:
        """Without an explicit interval the configured 10s window is used."""
        throttle = RateLimitLogThrottle()
        assert throttle.interval == 10.0
