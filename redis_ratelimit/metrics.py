"""Prometheus counters describing limiter outcomes."""

from __future__ import annotations

from prometheus_client import Counter

DECISIONS = Counter(
    "ratelimit_decisions_total",
    "Rate limit decisions returned by the Redis script.",
    ["unit", "outcome"],
)

ERRORS = Counter(
    "ratelimit_errors_total",
    "Rate limit calls that ended without a decision.",
    ["unit", "kind"],
)


def record_decision(unit: str, allowed: bool) -> None:
    DECISIONS.labels(unit=unit, outcome="allowed" if allowed else "rejected").inc()


def record_error(unit: str, kind: str) -> None:
    ERRORS.labels(unit=unit, kind=kind).inc()
