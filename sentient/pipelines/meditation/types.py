"""Typed containers shared across the meditation preparation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

NarrationMode = Literal["stream", "upload"]


@dataclass(frozen=True)
class ScriptRequest:
    """Validated input for script generation."""

    start: str
    destination: str
    note: Optional[str] = None


@dataclass(frozen=True)
class StreamedNarration:
    """Raw audio returned in ``stream`` mode."""

    audio_bytes: bytes
    media_type: str = "audio/mpeg"


@dataclass(frozen=True)
class UploadedNarration:
    """Signed reference returned in ``upload`` mode."""

    signed_url: str
    path: str
