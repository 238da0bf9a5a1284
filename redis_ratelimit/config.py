from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis

from .clock import Clock, TimeUnit
from .limiter import RedisRateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for limiters and the FastAPI dependency."""

    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "rate"
    unit: TimeUnit = TimeUnit.seconds
    window: int = 60
    requests: int = 20

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from ``REDIS_URL`` and the ``RATE_LIMIT_*`` variables."""
        return cls(
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            key_prefix=os.getenv("RATE_LIMIT_KEY_PREFIX", cls.key_prefix),
            unit=TimeUnit(os.getenv("RATE_LIMIT_UNIT", cls.unit.value).lower()),
            window=int(os.getenv("RATE_LIMIT_WINDOW", str(cls.window))),
            requests=int(os.getenv("RATE_LIMIT_REQUESTS", str(cls.requests))),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings.from_env()


def build_rate_limiter(
    settings: Settings | None = None,
    client: redis.Redis | None = None,
    clock: Clock | None = None,
) -> RedisRateLimiter:
    """Create a limiter from settings, connecting to ``redis_url`` when no client is given."""
    settings = settings or get_settings()
    if client is None:
        client = redis.from_url(settings.redis_url)
        logger.info("rate limiter connecting to redis at %s", settings.redis_url)
    return RedisRateLimiter(client, clock=clock, key_prefix=settings.key_prefix or None)
