"""Background colour interpolation."""

from __future__ import annotations

import pytest

from sentient.domain.emotions import EMOTION_COLORS, HSLColor
from sentient.playback.colors import (
    background_color,
    interpolate_color,
    phase_progress,
    to_css_hsl,
)


def test_interpolation_endpoints_and_midpoint():
    start = HSLColor(0, 0, 0)
    end = HSLColor(100, 50, 20)

    assert interpolate_color(start, end, 0) == start
    assert interpolate_color(start, end, 1) == end
    assert interpolate_color(start, end, 0.5) == HSLColor(50, 25, 10)


@pytest.mark.parametrize(
    "index, total, expected",
    [(0, 6, 0.0), (5, 6, 1.0), (1, 6, 0.2), (0, 1, 0.0), (0, 0, 0.0)],
)
def test_progress_uses_index_over_total_minus_one(index, total, expected):
    assert phase_progress(index, total) == pytest.approx(expected)


def test_unknown_moods_fall_back_to_calm_and_peaceful():
    assert background_color("euphoric", "calm", 0, 6) == EMOTION_COLORS["calm"]
    assert background_color("sad", "unknown", 5, 6) == EMOTION_COLORS["peaceful"]


def test_background_is_deterministic_per_phase():
    first = background_color("sad", "content", 2, 6)

    assert first == background_color("SAD", "content", 2, 6)
    assert to_css_hsl(first) == "hsl(144, 64%, 48%)"
