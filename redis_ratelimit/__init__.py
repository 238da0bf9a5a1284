"""Distributed sliding window rate limiting backed by Redis."""

from .aio import AsyncRedisRateLimiter
from .clock import Clock, ManualClock, SystemClock, TimeUnit
from .config import Settings, build_rate_limiter, get_settings
from .errors import ProtocolError, RateLimitError, StoreError, UnexpectedResultType, UnparsableResult
from .limiter import Decision, RedisRateLimiter, access_in_milliseconds, access_in_seconds, parse_result

__all__ = [
    "AsyncRedisRateLimiter",
    "Clock",
    "Decision",
    "ManualClock",
    "ProtocolError",
    "RateLimitError",
    "RedisRateLimiter",
    "Settings",
    "StoreError",
    "SystemClock",
    "TimeUnit",
    "UnexpectedResultType",
    "UnparsableResult",
    "access_in_milliseconds",
    "access_in_seconds",
    "build_rate_limiter",
    "get_settings",
    "parse_result",
]
