"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    NARRATION_BATCH_FAILURES,
    NARRATION_PHASES,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    SCRIPT_FAILURES,
    SCRIPTS_GENERATED,
    SESSIONS_RECORDED,
    STAGE_LATENCY,
    increment_sessions_recorded,
    observe_request,
    time_stage,
)

__all__ = [
    "ERROR_COUNTER",
    "NARRATION_BATCH_FAILURES",
    "NARRATION_PHASES",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SCRIPT_FAILURES",
    "SCRIPTS_GENERATED",
    "SESSIONS_RECORDED",
    "STAGE_LATENCY",
    "increment_sessions_recorded",
    "observe_request",
    "time_stage",
]
