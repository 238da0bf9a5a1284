"""FastAPI dependencies enforcing a Redis rate limit per request."""

from __future__ import annotations

import logging
import math
from typing import Callable

from fastapi import HTTPException, Request, status

from ..aio import AsyncRedisRateLimiter
from ..clock import TimeUnit
from ..config import Settings, get_settings
from ..errors import RateLimitError
from ..limiter import Decision, RedisRateLimiter

logger = logging.getLogger(__name__)

KeyFunc = Callable[[Request], str]
ErrorHandler = Callable[[Request, RateLimitError], None]


def client_host_key(request: Request) -> str:
    """Default key: the remote address, or ``anonymous`` when unknown."""
    return request.client.host if request.client else "anonymous"


def retry_after_seconds(wait: int, unit: TimeUnit) -> int:
    """Convert a wait in ``unit`` into the whole seconds advertised by ``Retry-After``."""
    if unit is TimeUnit.milliseconds:
        wait = math.ceil(wait / 1000)
    return max(1, wait)


class _RateLimitBase:
    def __init__(
        self,
        *,
        window: int | None = None,
        limit: int | None = None,
        unit: TimeUnit | None = None,
        settings: Settings | None = None,
        key_func: KeyFunc = client_host_key,
        scope: str | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        """Fill ``window``, ``limit`` and ``unit`` left as ``None`` from ``settings``."""
        settings = settings or get_settings()
        self.window = settings.window if window is None else window
        self.limit = settings.requests if limit is None else limit
        self.unit = settings.unit if unit is None else unit
        self.key_func = key_func
        self.scope = scope
        self.on_error = on_error

    def _key(self, request: Request) -> str:
        key = self.key_func(request)
        return f"{self.scope}:{key}" if self.scope else key

    def _handle_error(self, request: Request, exc: RateLimitError) -> None:
        """Delegate to ``on_error``; without one the failure propagates."""
        if self.on_error is None:
            raise exc
        self.on_error(request, exc)

    def _enforce(self, key: str, decision: Decision) -> None:
        if decision.allowed:
            return
        retry_after = retry_after_seconds(decision.wait, self.unit)
        logger.info("rejecting request for %s, retry after %ss", key, retry_after)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="rate limited",
            headers={"Retry-After": str(retry_after)},
        )


class RateLimitDependency(_RateLimitBase):
    """Callable for ``Depends`` that answers 429 once ``key_func`` exceeds its limit.

    ``on_error`` decides what a Redis outage means for the request: return to
    let it through, raise to block it. Without a handler the error propagates.
    """

    def __init__(self, limiter: RedisRateLimiter, **kwargs) -> None:
        super().__init__(**kwargs)
        self.limiter = limiter

    def __call__(self, request: Request) -> None:
        key = self._key(request)
        try:
            decision = self.limiter.access(key, self.window, self.limit, self.unit)
        except RateLimitError as exc:
            self._handle_error(request, exc)
            return
        self._enforce(key, decision)


class AsyncRateLimitDependency(_RateLimitBase):
    """Async counterpart of :class:`RateLimitDependency` for ``redis.asyncio`` clients."""

    def __init__(self, limiter: AsyncRedisRateLimiter, **kwargs) -> None:
        super().__init__(**kwargs)
        self.limiter = limiter

    async def __call__(self, request: Request) -> None:
        key = self._key(request)
        try:
            decision = await self.limiter.access(key, self.window, self.limit, self.unit)
        except RateLimitError as exc:
            self._handle_error(request, exc)
            return
        self._enforce(key, decision)
