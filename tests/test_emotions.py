"""Mood transition resolver and companion tables."""

from __future__ import annotations

import pytest

from sentient.domain.emotions import (
    CHECK_IN_MOODS,
    EMOTION_COLORS,
    EMOTIONAL_JOURNEY_MAP,
    FALLBACK_DESTINATIONS,
    ambient_track_for,
    resolve_destinations,
)


@pytest.mark.parametrize("start", sorted(EMOTIONAL_JOURNEY_MAP))
def test_known_states_resolve_to_authored_destinations(start):
    destinations = resolve_destinations(start)

    assert destinations == EMOTIONAL_JOURNEY_MAP[start]
    assert len(destinations) == 3
    assert resolve_destinations(start) == destinations


def test_lookup_is_case_and_whitespace_insensitive():
    assert resolve_destinations("  Anxious ") == ("calm", "grounded", "peaceful")


@pytest.mark.parametrize("start", [None, "", "   ", "euphoric"])
def test_unknown_or_empty_states_use_fallback(start):
    assert resolve_destinations(start) == FALLBACK_DESTINATIONS == ("calm", "peaceful", "content")


def test_every_check_in_mood_has_destinations_of_its_own():
    for mood in CHECK_IN_MOODS:
        assert mood.id in EMOTIONAL_JOURNEY_MAP


def test_ambient_track_falls_back_to_calm():
    assert ambient_track_for("clear") == "focused.mp3"
    assert ambient_track_for("unknown") == "calm.mp3"
    assert ambient_track_for(None) == "calm.mp3"


def test_color_table_has_fallback_entries():
    assert "calm" in EMOTION_COLORS
    assert "peaceful" in EMOTION_COLORS
