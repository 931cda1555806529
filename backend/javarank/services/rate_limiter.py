"""
In-memory fixed-window rate limiter.

Each key ("<action>_<client-ip>") owns one RateLimitRecord:
  • count      — accepted requests in the current window
  • reset_time — monotonic instant at which the window ends

Design decisions:
  • Check BEFORE increment — rejected requests (429) don't inflate counters.
  • Fixed window, lazily reset on the next access after reset_time.
    Bursting across a window boundary is accepted behaviour.
  • One RateLimiter per app (app.state.rate_limiter), not a module global,
    so tests build isolated instances and drive the clock.
  • A lock guards each read-modify-write; the limiter is safe to call from
    worker threads as well as the event loop.
  • Bounded memory: expired records are swept periodically, and past
    max_keys the least recently touched key is evicted.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class RateLimitRecord:
    """Request count for one key in its current window."""

    count: int
    reset_time: float


@dataclass(frozen=True, slots=True)
class RateLimitRule:
    """max_attempts accepted calls per window_seconds."""

    max_attempts: int
    window_seconds: float


# ── Per-IP limits ───────────────────────────────────────────
GLOBAL_LIMIT = RateLimitRule(1000, 60)
REGISTER_LIMIT = RateLimitRule(5, 300)
LOGIN_LIMIT = RateLimitRule(10, 300)
CHALLENGE_WRITE_LIMIT = RateLimitRule(50, 60)
BLOG_CREATE_LIMIT = RateLimitRule(5, 300)
ANALYTICS_SUMMARY_LIMIT = RateLimitRule(20, 60)
ANALYTICS_RESET_LIMIT = RateLimitRule(3, 300)
EXECUTE_LIMIT = RateLimitRule(10, 60)


class RateLimiter:
    """Fixed-window counters keyed by action + client identity."""

    def __init__(
        self,
        clock: Clock = time.monotonic,
        max_keys: int = 100_000,
        sweep_interval: float = 300.0,
    ) -> None:
        self._clock = clock
        self._max_keys = max_keys
        self._sweep_interval = sweep_interval
        self._records: OrderedDict[str, RateLimitRecord] = OrderedDict()
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._records)

    def check(self, key: str, max_attempts: int, window_seconds: float) -> bool:
        """
        Record one attempt for `key` and say whether it is allowed.

        Order: normalise the window, check, then increment.
        A rejected call leaves the record untouched.
        """
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep_locked(now)

            record = self._records.get(key)
            if record is None or now > record.reset_time:
                record = RateLimitRecord(count=0, reset_time=now + window_seconds)
                self._records[key] = record
            self._records.move_to_end(key)

            if record.count >= max_attempts:
                return False

            record.count += 1

            while len(self._records) > self._max_keys:
                evicted, _ = self._records.popitem(last=False)
                logger.debug("Rate limit table full, evicted %s", evicted)

            return True

    def allow(self, key: str, rule: RateLimitRule) -> bool:
        """check() with a predefined rule."""
        return self.check(key, rule.max_attempts, rule.window_seconds)

    def sweep(self) -> int:
        """Drop records whose window has ended. Returns how many went."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key."""
        with self._lock:
            if key is None:
                self._records.clear()
            else:
                self._records.pop(key, None)

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, r in self._records.items() if now > r.reset_time]
        for key in expired:
            del self._records[key]
        self._last_sweep = now
        if expired:
            logger.info("Swept %d expired rate limit records", len(expired))
        return len(expired)
