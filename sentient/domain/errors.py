"""Failure taxonomy shared by the meditation preparation pipeline.

Every error knows the HTTP status it maps to so the FastAPI exception
handler in ``sentient.main`` can render it without a lookup table.
"""

from __future__ import annotations


class MeditationPipelineError(RuntimeError):
    """Base class for pipeline failures surfaced to the caller."""

    status_code: int = 500
    code: str = "pipeline_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        return {"detail": self.message, "code": self.code}


class ValidationError(MeditationPipelineError):
    """Caller-supplied input is malformed; never retried."""

    status_code = 400
    code = "validation_error"


class UpstreamResponseError(MeditationPipelineError):
    """The language model answered with unusable content."""

    status_code = 502
    code = "upstream_response_error"

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        payload["raw"] = self.raw
        return payload


class MalformedResponseError(UpstreamResponseError):
    """The model output could not be parsed as JSON."""

    code = "malformed_response"


class ShapeError(UpstreamResponseError):
    """The model output parsed but is not a list of exactly six phases."""

    code = "shape_error"


class UpstreamUnavailable(MeditationPipelineError):
    """A backend (storage, speech or language model) is not configured."""

    status_code = 500
    code = "upstream_unavailable"


class PersistenceError(MeditationPipelineError):
    """Uploading or signing narration audio failed."""

    status_code = 500
    code = "persistence_error"

    def __init__(self, message: str, *, phase_index: int | None = None) -> None:
        super().__init__(message)
        self.phase_index = phase_index


class NotFoundRedirect(MeditationPipelineError):
    """An expected record is missing; the client recovers by navigating."""

    status_code = 404
    code = "not_found_redirect"

    def __init__(self, message: str, *, target: str) -> None:
        super().__init__(message)
        self.target = target


__all__ = [
    "MalformedResponseError",
    "MeditationPipelineError",
    "NotFoundRedirect",
    "PersistenceError",
    "ShapeError",
    "UpstreamResponseError",
    "UpstreamUnavailable",
    "ValidationError",
]
