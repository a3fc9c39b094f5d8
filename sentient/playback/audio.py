"""Audio handles used for ambience and narration playback."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class AudioPlaybackError(RuntimeError):
    """Raised by a handle that cannot start playback."""


class AudioHandle(Protocol):
    source: str

    def play(self) -> None: ...

    def pause(self) -> None: ...


class AudioPlayer(Protocol):
    def load(self, source: str, *, volume: float = 1.0, loop: bool = False) -> AudioHandle: ...


class TrackedAudioHandle:
    """Handle that records its state instead of producing sound."""

    def __init__(self, source: str, *, volume: float, loop: bool) -> None:
        self.source = source
        self.volume = volume
        self.loop = loop
        self.playing = False
        self.play_count = 0

    def play(self) -> None:
        self.playing = True
        self.play_count += 1
        logger.debug("Playing %s", self.source)

    def pause(self) -> None:
        self.playing = False


class TrackedAudioPlayer:
    """Player for headless clients; keeps every handle it created."""

    def __init__(self) -> None:
        self.handles: list[TrackedAudioHandle] = []

    def load(self, source: str, *, volume: float = 1.0, loop: bool = False) -> TrackedAudioHandle:
        handle = TrackedAudioHandle(source, volume=volume, loop=loop)
        self.handles.append(handle)
        return handle

    @property
    def playing(self) -> list[TrackedAudioHandle]:
        return [handle for handle in self.handles if handle.playing]


__all__ = [
    "AudioHandle",
    "AudioPlaybackError",
    "AudioPlayer",
    "TrackedAudioHandle",
    "TrackedAudioPlayer",
]
