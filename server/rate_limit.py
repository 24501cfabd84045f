"""Fixed-window rate limiting per client identity."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from loguru import logger

from .errors import CounterStoreError

KEY_PREFIX = "ratelimit:"


class CounterStore(Protocol):
    """Expiring integer counters (the subset of a key-value store we need)."""

    async def get(self, key: str) -> int:
        """Current value, 0 for a missing or expired key."""
        ...

    async def incr(self, key: str) -> int:
        """Increment (creating at 0 if missing) and return the new value."""
        ...

    async def expire(self, key: str, seconds: float) -> None: ...


class MemoryCounterStore:
    """In-process CounterStore.

    Safe to share between request threads: every operation holds one lock,
    so an increment and its read of the new value are atomic. Each increment
    drops every record whose window has expired.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}
        self._expiry: dict[str, float] = {}

    def _purge(self, key: str) -> None:
        deadline = self._expiry.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._counts.pop(key, None)
            self._expiry.pop(key, None)

    def _sweep(self) -> None:
        now = self._clock()
        for key in [k for k, deadline in self._expiry.items() if now >= deadline]:
            self._counts.pop(key, None)
            self._expiry.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    async def get(self, key: str) -> int:
        with self._lock:
            self._purge(key)
            return self._counts.get(key, 0)

    async def incr(self, key: str) -> int:
        with self._lock:
            self._sweep()
            value = self._counts.get(key, 0) + 1
            self._counts[key] = value
            return value

    async def expire(self, key: str, seconds: float) -> None:
        with self._lock:
            if key in self._counts:
                self._expiry[key] = self._clock() + seconds


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int


class RateLimiter:
    """Allows `limit` sends per identity per fixed window.

    The counter is created by the first send of a window, which also starts
    the window's expiry. If the store fails the request is allowed anyway.

    Usage:
        limiter = RateLimiter(MemoryCounterStore())
        decision = await limiter.check("203.0.113.7")
        if not decision.allowed:
            ...
    """

    def __init__(self, store: CounterStore, limit: int = 50, window: float = 60 * 60 * 24) -> None:
        self.store = store
        self.limit = limit
        self.window = window

    async def check(self, identity: str) -> RateLimitDecision:
        key = f"{KEY_PREFIX}{identity}"
        try:
            count = await self.store.get(key)
            if count >= self.limit:
                logger.info("Rate limit reached for {}", identity)
                return RateLimitDecision(allowed=False, remaining=0)

            count = await self.store.incr(key)
            if count == 1:
                await self.store.expire(key, self.window)
        except (CounterStoreError, OSError) as e:
            logger.error("Rate limit check failed, allowing request: {}", e)
            return RateLimitDecision(allowed=True, remaining=self.limit)

        remaining = max(0, self.limit - count)
        logger.debug("{} has {} sends left in this window", identity, remaining)
        return RateLimitDecision(allowed=True, remaining=remaining)
