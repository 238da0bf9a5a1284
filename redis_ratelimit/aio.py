"""asyncio flavour of the Redis rate limiter."""

from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .clock import Clock, SystemClock, TimeUnit
from .limiter import Decision, _interpret_reply, _prepare_call, _store_failure
from .scripts import SCRIPTS


class AsyncRedisRateLimiter:
    """Same contract as :class:`~redis_ratelimit.limiter.RedisRateLimiter` over ``redis.asyncio``."""

    def __init__(
        self,
        client: Redis,
        *,
        clock: Clock | None = None,
        key_prefix: str | None = None,
    ) -> None:
        self._client = client
        self._clock = clock or SystemClock()
        self._key_prefix = key_prefix
        self._scripts = {unit: client.register_script(source) for unit, source in SCRIPTS.items()}

    async def access(
        self,
        key: str,
        window: int,
        limit: int,
        unit: TimeUnit,
        now: int | None = None,
    ) -> Decision:
        """Await one script evaluation and return the admission decision."""
        redis_key, args = _prepare_call(key, window, limit, unit, now, self._clock, self._key_prefix)
        try:
            result = await self._scripts[unit](keys=[redis_key], args=args)
        except RedisError as exc:
            raise _store_failure(redis_key, unit, exc) from exc
        return _interpret_reply(redis_key, unit, result)

    async def access_in_seconds(
        self, key: str, window: int, limit: int, now: int | None = None
    ) -> Decision:
        return await self.access(key, window, limit, TimeUnit.seconds, now)

    async def access_in_milliseconds(
        self, key: str, window: int, limit: int, now: int | None = None
    ) -> Decision:
        return await self.access(key, window, limit, TimeUnit.milliseconds, now)
