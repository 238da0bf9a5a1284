"""Exception hierarchy raised by the rate limiter."""

from __future__ import annotations

from typing import Any


class RateLimitError(Exception):
    """Base class for every failure surfaced by the rate limiter."""


class StoreError(RateLimitError):
    """The Redis round trip failed; no admission decision was made."""

    def __init__(self, original: Exception) -> None:
        super().__init__(f"redis ratelimit: script evaluation failed: {original}")
        self.original = original


class ProtocolError(RateLimitError):
    """The script replied with something other than ``OK`` or a wait duration."""

    def __init__(self, message: str, value: Any) -> None:
        super().__init__(message)
        self.value = value


class UnexpectedResultType(ProtocolError):
    def __init__(self, value: Any) -> None:
        super().__init__(
            f"redis ratelimit: lua eval result type is not string: {type(value).__name__}",
            value,
        )


class UnparsableResult(ProtocolError):
    def __init__(self, value: str) -> None:
        super().__init__(f"redis ratelimit: parse lua eval result {value!r}", value)
