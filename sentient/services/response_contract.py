"""Pydantic models for validating the meditation script returned by the LLM.

The parser never raises: it returns ``ScriptOk`` or ``ScriptErr`` so callers
decide where the failure becomes an HTTP error. A partially valid shape is
always an error, never padded or truncated.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sentient.config.settings import settings
from sentient.domain.errors import (
    MalformedResponseError,
    ShapeError,
    UpstreamResponseError,
)

PHASE_COUNT = settings.narration.phase_count
DEFAULT_PHASE_SECONDS = settings.narration.default_phase_seconds


class MeditationTheme(BaseModel):
    duration: int = DEFAULT_PHASE_SECONDS

    model_config = ConfigDict(extra="allow")

    @field_validator("duration", mode="before")
    @classmethod
    def _positive_number_or_default(cls, value: Any) -> int:
        return phase_duration({"duration": value})


class MeditationPhase(BaseModel):
    phase: str
    text: str
    theme: MeditationTheme = Field(default_factory=MeditationTheme)


def phase_duration(theme: Any) -> int:
    """Seconds a phase lasts: a positive numeric ``duration`` or the default."""

    if isinstance(theme, BaseModel):
        theme = theme.model_dump()
    if not isinstance(theme, dict):
        return DEFAULT_PHASE_SECONDS
    value = theme.get("duration")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_PHASE_SECONDS
    if value <= 0:
        return DEFAULT_PHASE_SECONDS
    return int(value)


@dataclass(frozen=True)
class ScriptOk:
    phases: tuple[MeditationPhase, ...]

    def unwrap(self) -> list[MeditationPhase]:
        return list(self.phases)


@dataclass(frozen=True)
class ScriptErr:
    error: UpstreamResponseError

    def unwrap(self) -> list[MeditationPhase]:
        raise self.error


ScriptResult = Union[ScriptOk, ScriptErr]


def strip_code_fences(payload: Optional[str]) -> str:
    """Remove a leading ```json / ``` marker and a trailing ``` marker."""

    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    return cleaned.strip()


def _normalise_phase(index: int, item: Any) -> MeditationPhase:
    data = item if isinstance(item, dict) else {}
    label = data.get("phase")
    text = data.get("text")
    # Model-proposed durations are discarded on purpose.
    return MeditationPhase(
        phase=label if isinstance(label, str) else f"Phase {index + 1}",
        text=text if isinstance(text, str) else "",
        theme=MeditationTheme(duration=DEFAULT_PHASE_SECONDS),
    )


def parse_meditation_script(raw: Optional[str]) -> ScriptResult:
    """Parse and normalise the model output into exactly ``PHASE_COUNT`` phases."""

    raw_text = (raw or "").strip() or "[]"
    cleaned = strip_code_fences(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return ScriptErr(
            MalformedResponseError(f"Invalid JSON returned from AI: {exc}", raw_text)
        )

    if not isinstance(data, list) or len(data) != PHASE_COUNT:
        return ScriptErr(
            ShapeError(f"AI did not return {PHASE_COUNT} valid phases", raw_text)
        )

    return ScriptOk(tuple(_normalise_phase(i, item) for i, item in enumerate(data)))


__all__ = [
    "DEFAULT_PHASE_SECONDS",
    "MeditationPhase",
    "MeditationTheme",
    "PHASE_COUNT",
    "ScriptErr",
    "ScriptOk",
    "ScriptResult",
    "parse_meditation_script",
    "phase_duration",
    "strip_code_fences",
]
