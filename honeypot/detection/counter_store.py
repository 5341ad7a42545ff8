"""
Per-key attempt counters with a sliding time window.

The brute force analyzer is the only analyzer that keeps state between
requests. It records one attempt per login POST keyed by client IP and
asks how many attempts that IP made inside the window. Stores never raise
into the analyzer: any backend failure degrades to "no prior attempts".

Under heavy concurrent load an occasional increment may be lost (the Redis
window is trimmed and counted in one pipeline but not under a lock shared
with other writers). That is an accepted approximation for a heuristic.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Deque, Dict, Optional

import redis

from ..config import Settings, get_settings
from .exceptions import CounterStoreError

logger = logging.getLogger(__name__)


class AttemptCounter(ABC):
    """Abstract base class for attempt counter backends."""

    def record_attempt(self, key: str, window_seconds: int) -> int:
        """
        Record one attempt and count attempts inside the window.

        Args:
            key: Counter key, normally the client IP
            window_seconds: Sliding window length

        Returns:
            Attempts inside the window including this one; 1 when the
            backend fails
        """
        try:
            return self._record(key, window_seconds)
        except CounterStoreError:
            logger.warning(f"Attempt counter unavailable for {key}, assuming no prior attempts")
            return 1

    @abstractmethod
    def _record(self, key: str, window_seconds: int) -> int:
        """Backend specific record-and-count; raises CounterStoreError on failure."""
        pass

    def reset(self, key: str) -> None:
        """Forget every attempt recorded for key."""
        pass


class InMemoryAttemptCounter(AttemptCounter):
    """
    Process-local counter backed by timestamp deques.

    Thread-safe; keys whose attempts have all expired are evicted.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._attempts: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def _record(self, key: str, window_seconds: int) -> int:
        now = self._clock()
        with self._lock:
            self._prune(now, window_seconds)
            attempts = self._attempts.setdefault(key, deque())
            attempts.append(now)
            return len(attempts)

    def _prune(self, now: float, window_seconds: int) -> None:
        for key in list(self._attempts):
            attempts = self._attempts[key]
            while attempts and now - attempts[0] >= window_seconds:
                attempts.popleft()
            if not attempts:
                del self._attempts[key]

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

    def __len__(self) -> int:
        return len(self._attempts)


class RedisAttemptCounter(AttemptCounter):
    """Counter shared across workers, one sorted set of timestamps per key."""

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "honeypot:login_attempts:",
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.key_prefix = key_prefix
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "honeypot:login_attempts:") -> "RedisAttemptCounter":
        client = redis.Redis.from_url(url, decode_responses=True)
        return cls(client, key_prefix=key_prefix)

    def _record(self, key: str, window_seconds: int) -> int:
        redis_key = f"{self.key_prefix}{key}"
        now = self._clock()
        member = f"{now:.6f}:{uuid.uuid4().hex[:8]}"

        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.zremrangebyscore(redis_key, 0, now - window_seconds)
            pipe.zadd(redis_key, {member: now})
            pipe.zcard(redis_key)
            pipe.expire(redis_key, window_seconds)
            results = pipe.execute()
        except redis.RedisError as e:
            raise CounterStoreError(redis_key, str(e)) from e

        return int(results[2])

    def reset(self, key: str) -> None:
        try:
            self.client.delete(f"{self.key_prefix}{key}")
        except redis.RedisError as e:
            logger.warning(f"Failed to reset attempt counter {key}: {e}")


def build_counter_store(settings: Optional[Settings] = None) -> AttemptCounter:
    """Redis-backed store when REDIS_URL is configured, in-memory otherwise."""
    settings = settings or get_settings()
    if settings.REDIS_URL:
        logger.info("Using Redis attempt counter")
        return RedisAttemptCounter.from_url(settings.REDIS_URL, key_prefix=settings.BRUTE_FORCE_KEY_PREFIX)
    logger.info("Using in-memory attempt counter")
    return InMemoryAttemptCounter()
