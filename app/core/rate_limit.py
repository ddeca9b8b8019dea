"""Fixed-window rate limiting over a pluggable counter store.

Counters are keyed by ``<scope>:<identity>:<bucket>`` where ``bucket`` is the
index of the current window, so old windows simply stop being read. The
in-memory store serves single-instance deployments; the Redis store shares
counters across instances.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis
from fastapi import Request
from redis.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import Settings
from app.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class CounterStore(ABC):
    """Time-bucketed counter storage."""

    @abstractmethod
    def increment(self, key: str, ttl_seconds: int) -> int:
        """Increment ``key`` and return the new count; the key expires after ``ttl_seconds``."""


class InMemoryCounterStore(CounterStore):
    """Process-local counters, pruned lazily on write."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, ttl_seconds: int) -> int:
        now = self._clock()
        with self._lock:
            self._prune(now)
            count, expires_at = self._counters.get(key, (0, now + ttl_seconds))
            count += 1
            self._counters[key] = (count, expires_at)
            return count

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._counters.items() if expires_at <= now]
        for key in expired:
            del self._counters[key]

    def __len__(self) -> int:
        return len(self._counters)


class RedisCounterStore(CounterStore):
    """Counters shared through Redis INCR + EXPIRE."""

    def __init__(self, settings: Settings, client: Optional[redis.Redis] = None):
        if client is None:
            pool = ConnectionPool(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                password=settings.REDIS_PASSWORD or None,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
                decode_responses=True,
            )
            client = redis.Redis(connection_pool=pool)
        self._client = client
        logger.info(f"RedisCounterStore using {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=1),
        retry=retry_if_exception_type((ConnectionError, TimeoutError)),
        reraise=True,
    )
    def increment(self, key: str, ttl_seconds: int) -> int:
        pipe = self._client.pipeline()
        pipe.incr(key)
        pipe.expire(key, ttl_seconds)
        count, _ = pipe.execute()
        return int(count)


class RateLimiter:
    """FastAPI dependency enforcing ``max_requests`` per ``window_seconds`` per caller."""

    def __init__(
        self,
        store: CounterStore,
        max_requests: int,
        window_seconds: int,
        scope: str = "api",
        clock: Callable[[], float] = time.time,
        enabled: bool = True,
    ):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.scope = scope
        self.enabled = enabled
        self._clock = clock

    def hit(self, identity: str) -> int:
        """
        Record one request for ``identity``; raise when the window is exhausted.

        When the counter store is unreachable the request is allowed and 0
        is returned.
        """
        if not self.enabled:
            return 0

        now = self._clock()
        bucket = int(now // self.window_seconds)
        key = f"ratelimit:{self.scope}:{identity}:{bucket}"
        try:
            count = self.store.increment(key, self.window_seconds)
        except RedisError as e:
            logger.warning(f"Rate limit store unavailable ({e}). Allowing request from {identity}.")
            return 0

        if count > self.max_requests:
            retry_after = max(1, int((bucket + 1) * self.window_seconds - now))
            logger.warning(
                f"Rate limit exceeded for {identity} on {self.scope} "
                f"({count}/{self.max_requests}), retry in {retry_after}s"
            )
            raise RateLimitExceededError(retry_after)

        return count

    # Store calls block; FastAPI runs sync dependencies in its threadpool
    def __call__(self, request: Request) -> None:
        identity = _request_identity(request)
        self.hit(identity)


def _request_identity(request: Request) -> str:
    """Bearer token when present, client address otherwise."""
    auth = request.headers.get("authorization")
    if auth:
        return f"token:{auth.rsplit(' ', 1)[-1][-32:]}"
    if request.client:
        return f"ip:{request.client.host}"
    return "unknown"


def build_counter_store(settings: Settings) -> CounterStore:
    """Pick the counter backend from settings."""
    if settings.RATE_LIMIT_BACKEND == "redis":
        return RedisCounterStore(settings)
    return InMemoryCounterStore()
