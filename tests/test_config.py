from __future__ import annotations

import fakeredis
import pytest

from redis_ratelimit import config
from redis_ratelimit.clock import ManualClock, TimeUnit
from redis_ratelimit.config import Settings, build_rate_limiter, get_settings


def test_default_settings():
    settings = Settings()
    assert settings.key_prefix == "rate"
    assert settings.unit is TimeUnit.seconds
    assert settings.window == 60
    assert settings.requests == 20


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_build_rate_limiter_uses_given_client():
    client = fakeredis.FakeStrictRedis()
    limiter = build_rate_limiter(Settings(key_prefix="api"), client=client, clock=ManualClock(start_ms=5000))

    assert limiter.access_in_seconds("tenant", 10, 1) == (True, 0)
    assert client.lrange("api:tenant", 0, -1) == [b"5"]


def test_build_rate_limiter_without_prefix_uses_raw_keys():
    client = fakeredis.FakeStrictRedis()
    limiter = build_rate_limiter(Settings(key_prefix=""), client=client)

    limiter.access_in_seconds("tenant", 10, 1)
    assert client.exists("tenant") == 1


def test_build_rate_limiter_connects_from_url(monkeypatch):
    fake = fakeredis.FakeStrictRedis()
    seen: list[str] = []

    def from_url(url):
        seen.append(url)
        return fake

    monkeypatch.setattr(config.redis, "from_url", from_url)
    limiter = build_rate_limiter(Settings(redis_url="redis://cache:6379/2"))

    assert seen == ["redis://cache:6379/2"]
    assert limiter.access_in_milliseconds("tenant", 100, 1).allowed


def test_settings_from_env(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("RATE_LIMIT_UNIT", "Milliseconds")
    monkeypatch.setenv("RATE_LIMIT_WINDOW", "1500")
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "3")
    monkeypatch.setenv("RATE_LIMIT_KEY_PREFIX", "edge")

    settings = Settings.from_env()

    assert settings == Settings(key_prefix="edge", unit=TimeUnit.milliseconds, window=1500, requests=3)


def test_invalid_unit_fails_only_when_settings_are_read(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_UNIT", "minutes")
    get_settings.cache_clear()
    try:
        assert Settings().unit is TimeUnit.seconds
        with pytest.raises(ValueError):
            get_settings()
    finally:
        get_settings.cache_clear()
