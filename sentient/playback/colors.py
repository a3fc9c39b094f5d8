"""Background colour drift from the check-in mood to the destination mood."""

from __future__ import annotations

from typing import Optional

from sentient.domain.emotions import EMOTION_COLORS, HSLColor


def interpolate_color(start: HSLColor, end: HSLColor, progress: float) -> HSLColor:
    """Per-channel linear interpolation; ``progress`` 0 is ``start``, 1 is ``end``."""

    return HSLColor(
        hue=start.hue + (end.hue - start.hue) * progress,
        sat=start.sat + (end.sat - start.sat) * progress,
        light=start.light + (end.light - start.light) * progress,
    )


def phase_progress(phase_index: int, total_phases: int) -> float:
    return phase_index / max(1, total_phases - 1)


def _lookup(mood: Optional[str], fallback: str) -> HSLColor:
    key = (mood or "").strip().lower()
    return EMOTION_COLORS.get(key, EMOTION_COLORS[fallback])


def background_color(
    start: Optional[str],
    destination: Optional[str],
    phase_index: int,
    total_phases: int,
) -> HSLColor:
    return interpolate_color(
        _lookup(start, "calm"),
        _lookup(destination, "peaceful"),
        phase_progress(phase_index, total_phases),
    )


def to_css_hsl(color: HSLColor) -> str:
    return f"hsl({color.hue:g}, {color.sat:g}%, {color.light:g}%)"


__all__ = ["background_color", "interpolate_color", "phase_progress", "to_css_hsl"]
