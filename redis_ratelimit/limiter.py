"""Redis-backed distributed sliding window rate limiter."""

from __future__ import annotations

import logging
from typing import Any, NamedTuple

from redis import Redis
from redis.exceptions import RedisError

from . import metrics
from .clock import Clock, SystemClock, TimeUnit
from .errors import ProtocolError, StoreError, UnexpectedResultType, UnparsableResult
from .scripts import ADMITTED, SCRIPTS

logger = logging.getLogger(__name__)

_MAX_WAIT = 2**63 - 1


class Decision(NamedTuple):
    """Outcome of one access attempt; ``wait`` is 0 when ``allowed``."""

    allowed: bool
    wait: int


def parse_result(value: Any) -> Decision:
    """Translate the script reply into a :class:`Decision`.

    Raises:
        UnexpectedResultType: The reply is neither ``str`` nor ``bytes``.
        UnparsableResult: The text is neither ``OK`` nor a non-negative int64.
    """
    if isinstance(value, bytes):
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UnparsableResult(repr(value)) from exc
    elif isinstance(value, str):
        text = value
    else:
        raise UnexpectedResultType(value)

    if text == ADMITTED:
        return Decision(True, 0)
    if not text.isascii() or not text.isdigit():
        raise UnparsableResult(text)
    wait = int(text)
    if wait > _MAX_WAIT:
        raise UnparsableResult(text)
    return Decision(False, wait)


def _prepare_call(
    key: str,
    window: int,
    limit: int,
    unit: TimeUnit,
    now: int | None,
    clock: Clock,
    key_prefix: str | None,
) -> tuple[str, list[int]]:
    """Validate caller input and build the script's key and argument list."""
    if not key:
        raise ValueError("rate limit key must not be empty")
    if limit < 1:
        raise ValueError(f"rate limit must be at least 1, got {limit}")
    if window < 1:
        window = 1
    if now is None:
        now = clock.now(unit)
    redis_key = f"{key_prefix}:{key}" if key_prefix else key
    return redis_key, [window, limit, now]


def _interpret_reply(redis_key: str, unit: TimeUnit, result: Any) -> Decision:
    """Parse a script reply, logging and counting the outcome."""
    try:
        decision = parse_result(result)
    except ProtocolError as exc:
        logger.warning("rate limit script returned an invalid reply for %s: %s", redis_key, exc)
        metrics.record_error(unit.value, "protocol")
        raise
    metrics.record_decision(unit.value, decision.allowed)
    if not decision.allowed:
        logger.debug("rate limited %s, retry in %d %s", redis_key, decision.wait, unit.value)
    return decision


def _store_failure(redis_key: str, unit: TimeUnit, exc: RedisError) -> StoreError:
    logger.warning("rate limit script failed for %s: %s", redis_key, exc)
    metrics.record_error(unit.value, "store")
    return StoreError(exc)


class RedisRateLimiter:
    """Sliding window limiter whose state lives in Redis lists.

    Every call is a single script evaluation, so concurrent callers in any
    number of processes see one consistent access log per key. The client is
    borrowed: the limiter never opens or closes connections.

    A key's expiry is refreshed to the full window on each admission, so a log
    idle for a whole window disappears and the count starts over.
    """

    def __init__(
        self,
        client: Redis,
        *,
        clock: Clock | None = None,
        key_prefix: str | None = None,
    ) -> None:
        """Register both script variants on the client and keep the clock."""
        self._client = client
        self._clock = clock or SystemClock()
        self._key_prefix = key_prefix
        self._scripts = {unit: client.register_script(source) for unit, source in SCRIPTS.items()}

    def access(
        self,
        key: str,
        window: int,
        limit: int,
        unit: TimeUnit,
        now: int | None = None,
    ) -> Decision:
        """Record an access to ``key`` if fewer than ``limit`` happened in ``window``.

        Args:
            key: Identifier scoping the limit, e.g. ``tenant:endpoint``.
            window: Window length in ``unit``; values below 1 are treated as 1.
            limit: Maximum admissions per window; must be at least 1.
            unit: Unit of ``window`` and ``now``. Never mix units on the same key.
            now: Timestamp override in ``unit``; defaults to the limiter's clock.

        Returns:
            ``(True, 0)`` when admitted, otherwise ``(False, wait)`` with the
            time until the oldest logged access leaves the window.

        Raises:
            StoreError: The Redis call failed.
            ProtocolError: The script reply could not be interpreted.
        """
        redis_key, args = _prepare_call(key, window, limit, unit, now, self._clock, self._key_prefix)
        try:
            result = self._scripts[unit](keys=[redis_key], args=args)
        except RedisError as exc:
            raise _store_failure(redis_key, unit, exc) from exc
        return _interpret_reply(redis_key, unit, result)

    def access_in_seconds(self, key: str, window: int, limit: int, now: int | None = None) -> Decision:
        """Seconds variant of :meth:`access`; ``wait`` is in seconds."""
        return self.access(key, window, limit, TimeUnit.seconds, now)

    def access_in_milliseconds(
        self, key: str, window: int, limit: int, now: int | None = None
    ) -> Decision:
        """Milliseconds variant of :meth:`access`; ``wait`` is in milliseconds."""
        return self.access(key, window, limit, TimeUnit.milliseconds, now)


def access_in_seconds(
    client: Redis, key: str, window: int, limit: int, now: int | None = None
) -> Decision:
    """One-off seconds check against ``client`` without keeping a limiter around."""
    return RedisRateLimiter(client).access_in_seconds(key, window, limit, now)


def access_in_milliseconds(
    client: Redis, key: str, window: int, limit: int, now: int | None = None
) -> Decision:
    """One-off milliseconds check against ``client`` without keeping a limiter around."""
    return RedisRateLimiter(client).access_in_milliseconds(key, window, limit, now)
