from __future__ import annotations

from unittest import mock

import fakeredis
import pytest

from redis_ratelimit.clock import ManualClock
from redis_ratelimit.limiter import RedisRateLimiter

T0_SECONDS = 1_700_000_000
T0_MILLIS = T0_SECONDS * 1000


@pytest.fixture()
def redis_client() -> fakeredis.FakeStrictRedis:
    client = fakeredis.FakeStrictRedis()
    client.flushall()
    return client


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(start_ms=T0_MILLIS)


@pytest.fixture()
def limiter(redis_client, clock) -> RedisRateLimiter:
    return RedisRateLimiter(redis_client, clock=clock)


@pytest.fixture()
def scripted_client():
    """Client double whose registered scripts are a single mock, for failure injection."""
    script = mock.Mock()
    client = mock.Mock()
    client.register_script.return_value = script
    return client, script
