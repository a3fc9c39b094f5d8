"""Authored emotion tables and the mood transition resolver.

The transition map is product content, not derived data: high-arousal
negative states lead toward low-arousal ones, low-arousal negative states
toward positive valence, and positive states toward higher energy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

FALLBACK_DESTINATIONS: tuple[str, ...] = ("calm", "peaceful", "content")

EMOTIONAL_JOURNEY_MAP: Mapping[str, tuple[str, ...]] = {
    # High arousal, negative
    "anxious": ("calm", "grounded", "peaceful"),
    "worried": ("calm", "accepting", "peaceful"),
    "stressed": ("relaxed", "calm", "peaceful"),
    "angry": ("calm", "accepting", "peaceful"),
    "frustrated": ("patient", "calm", "accepting"),
    "irritated": ("calm", "patient", "accepting"),
    # Low arousal, negative
    "sad": ("accepting", "content", "peaceful"),
    "depressed": ("accepting", "hopeful", "calm"),
    "lonely": ("connected", "accepting", "peaceful"),
    # Mid-range
    "bored": ("curious", "interested", "content"),
    "confused": ("clear", "focused", "understanding"),
    "tired": ("rested", "peaceful", "calm"),
    # Already positive
    "content": ("grateful", "joyful", "energized"),
    "calm": ("peaceful", "grateful", "content"),
    "happy": ("joyful", "grateful", "energized"),
}


def _normalise(state: str | None) -> str:
    return (state or "").strip().lower()


def resolve_destinations(start_state: str | None) -> tuple[str, ...]:
    """Return the ordered destination states reachable from ``start_state``."""

    return EMOTIONAL_JOURNEY_MAP.get(_normalise(start_state), FALLBACK_DESTINATIONS)


def is_known_mood(state: str | None) -> bool:
    return _normalise(state) in EMOTIONAL_JOURNEY_MAP


@dataclass(frozen=True)
class HSLColor:
    hue: float
    sat: float
    light: float


EMOTION_COLORS: Mapping[str, HSLColor] = {
    "sad": HSLColor(210, 60, 40),
    "anxious": HSLColor(150, 50, 45),
    "angry": HSLColor(0, 70, 50),
    "frustrated": HSLColor(30, 65, 48),
    "confused": HSLColor(280, 45, 50),
    "calm": HSLColor(180, 50, 55),
    "content": HSLColor(45, 70, 60),
    "peaceful": HSLColor(240, 40, 50),
    "grateful": HSLColor(270, 55, 58),
    "happy": HSLColor(50, 80, 65),
}

MUSIC_MAP: Mapping[str, str] = {
    "accepting": "accepting.mp3",
    "calm": "calm.mp3",
    "peaceful": "peaceful.mp3",
    "grateful": "grateful.mp3",
    "content": "content.mp3",
    "grounded": "grounded.mp3",
    "connected": "connected.mp3",
    "patient": "patient.mp3",
    "hopeful": "hopeful.mp3",
    "joyful": "joyful.mp3",
    "energized": "energized.mp3",
    "rested": "rested.mp3",
    "understanding": "understanding.mp3",
    "focused": "focused.mp3",
    "relaxed": "calm.mp3",
    "clear": "focused.mp3",
}


def ambient_track_for(destination: str | None) -> str:
    """Music file name for the destination state (``calm`` when unmapped)."""

    return MUSIC_MAP.get(_normalise(destination), MUSIC_MAP["calm"])


@dataclass(frozen=True)
class CheckInMood:
    id: str
    label: str
    description: str


CHECK_IN_MOODS: tuple[CheckInMood, ...] = (
    CheckInMood("anxious", "Anxious", "Restless and on edge"),
    CheckInMood("stressed", "Stressed", "Stretched too thin"),
    CheckInMood("angry", "Angry", "Heated and tense"),
    CheckInMood("frustrated", "Frustrated", "Blocked and impatient"),
    CheckInMood("sad", "Sad", "Heavy and low"),
    CheckInMood("lonely", "Lonely", "Disconnected"),
    CheckInMood("tired", "Tired", "Drained of energy"),
    CheckInMood("confused", "Confused", "Foggy and uncertain"),
    CheckInMood("content", "Content", "Gently satisfied"),
    CheckInMood("happy", "Happy", "Light and bright"),
)


__all__ = [
    "CHECK_IN_MOODS",
    "EMOTIONAL_JOURNEY_MAP",
    "EMOTION_COLORS",
    "FALLBACK_DESTINATIONS",
    "HSLColor",
    "MUSIC_MAP",
    "ambient_track_for",
    "is_known_mood",
    "resolve_destinations",
]
