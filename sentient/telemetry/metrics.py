"""Prometheus metrics for HTTP traffic and the meditation pipeline."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

_HTTP_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
# Script generation and a full narration batch take seconds to tens of seconds.
_STAGE_BUCKETS = (0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 80.0, 160.0)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=_HTTP_BUCKETS,
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

STAGE_LATENCY = Histogram(
    "meditation_stage_duration_seconds",
    "Time spent in one meditation pipeline stage",
    ("stage",),
    buckets=_STAGE_BUCKETS,
)

SCRIPTS_GENERATED = Counter(
    "meditation_scripts_generated_total",
    "Number of six-phase scripts returned to callers",
)

SCRIPT_FAILURES = Counter(
    "meditation_script_failures_total",
    "Number of unusable language model replies",
    ("reason",),
)

NARRATION_PHASES = Counter(
    "meditation_narration_phases_total",
    "Number of phase narrations synthesised",
    ("mode",),
)

NARRATION_BATCH_FAILURES = Counter(
    "meditation_narration_batch_failures_total",
    "Number of narration batches aborted by a failing phase",
)

SESSIONS_RECORDED = Counter(
    "meditation_sessions_recorded_total",
    "Number of completed meditation sessions stored",
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record count, latency and 5xx errors for a finished HTTP request."""

    labels = {"method": method or "UNKNOWN", "route": route or "unknown"}
    REQUEST_COUNT.labels(status=str(status_code), **labels).inc()
    REQUEST_LATENCY.labels(**labels).observe(max(0.0, duration_seconds))
    if status_code >= 500:
        ERROR_COUNTER.labels(**labels).inc()


@contextmanager
def time_stage(stage: str) -> Iterator[None]:
    """Observe the wall time of a pipeline stage, including failed runs."""

    started = time.perf_counter()
    try:
        yield
    finally:
        STAGE_LATENCY.labels(stage=stage).observe(time.perf_counter() - started)


def increment_sessions_recorded() -> None:
    SESSIONS_RECORDED.inc()
