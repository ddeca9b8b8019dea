import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.config import Settings
from app.core.exceptions import RateLimitExceededError
from app.core.rate_limit import (
    InMemoryCounterStore,
    RateLimiter,
    RedisCounterStore,
    build_counter_store,
)


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


class FakePipeline:
    def __init__(self, data):
        self.data = data
        self.ops = []

    def incr(self, key):
        self.ops.append(("incr", key))

    def expire(self, key, ttl):
        self.ops.append(("expire", key, ttl))

    def execute(self):
        results = []
        for op in self.ops:
            if op[0] == "incr":
                self.data[op[1]] = self.data.get(op[1], 0) + 1
                results.append(self.data[op[1]])
            else:
                results.append(True)
        return results


class FakeRedis:
    def __init__(self):
        self.data = {}

    def pipeline(self):
        return FakePipeline(self.data)


class DownPipeline(FakePipeline):
    def execute(self):
        raise RedisConnectionError("Connection refused")


class DownRedis:
    def __init__(self):
        self.calls = 0

    def pipeline(self):
        self.calls += 1
        return DownPipeline({})


def make_limiter(max_requests=3, window=60, clock=None):
    clock = clock or FakeClock()
    store = InMemoryCounterStore(clock=clock)
    return RateLimiter(store, max_requests=max_requests, window_seconds=window, clock=clock), clock


def test_rejects_request_over_limit_in_window():
    limiter, _ = make_limiter(max_requests=3)
    for expected in (1, 2, 3):
        assert limiter.hit("user-1") == expected

    with pytest.raises(RateLimitExceededError) as exc:
        limiter.hit("user-1")
    assert exc.value.status_code == 429
    assert 1 <= exc.value.retry_after <= 60


def test_identities_are_counted_separately():
    limiter, _ = make_limiter(max_requests=1)
    limiter.hit("a")
    limiter.hit("b")
    with pytest.raises(RateLimitExceededError):
        limiter.hit("a")


def test_new_window_resets_count():
    limiter, clock = make_limiter(max_requests=1, window=60)
    limiter.hit("user-1")
    clock.now += 60
    assert limiter.hit("user-1") == 1


def test_expired_counters_are_pruned():
    clock = FakeClock()
    store = InMemoryCounterStore(clock=clock)
    store.increment("a", 10)
    store.increment("b", 10)
    clock.now += 11
    store.increment("c", 10)
    assert len(store) == 1


def test_disabled_limiter_never_raises():
    clock = FakeClock()
    limiter = RateLimiter(InMemoryCounterStore(clock=clock), 1, 60, clock=clock, enabled=False)
    for _ in range(5):
        limiter.hit("user-1")


def test_redis_store_shares_counts():
    client = FakeRedis()
    clock = FakeClock()
    first = RateLimiter(RedisCounterStore(Settings(), client=client), 2, 60, clock=clock)
    second = RateLimiter(RedisCounterStore(Settings(), client=client), 2, 60, clock=clock)

    first.hit("user-1")
    second.hit("user-1")
    with pytest.raises(RateLimitExceededError):
        first.hit("user-1")


def test_build_counter_store_defaults_to_memory():
    assert isinstance(build_counter_store(Settings(RATE_LIMIT_BACKEND="memory")), InMemoryCounterStore)


def test_unreachable_redis_allows_requests():
    client = DownRedis()
    limiter = RateLimiter(RedisCounterStore(Settings(), client=client), 1, 60, clock=FakeClock())

    for _ in range(2):
        assert limiter.hit("user-1") == 0
    assert client.calls == 6
