"""FastAPI integration helpers."""

from .dependencies import AsyncRateLimitDependency, RateLimitDependency, client_host_key

__all__ = ["AsyncRateLimitDependency", "RateLimitDependency", "client_host_key"]
