"""Prompt construction for the script generation stage."""

from __future__ import annotations

import logging
from typing import Sequence

from sentient.config.settings import settings

from .types import ScriptRequest

logger = logging.getLogger("sentient.services.meditation_pipeline")

SYSTEM_PROMPT = (
    "You are a compassionate meditation guide who writes spoken, present-tense "
    "narration. You follow the output format exactly and never add commentary."
)

_FORMAT_RULES = """Return ONLY a JSON array with exactly {count} objects, in order, each shaped as:
{{"phase": "<short title>", "text": "<narration>", "theme": {{"duration": <seconds>}}}}
Rules:
- Exactly {count} phases. The order moves gradually from the starting feeling to the destination feeling.
- Phase 1 meets the listener where they are; the final phase settles them in the destination feeling.
- Each "text" is calm second-person narration of 40 to 90 words, under {max_chars} characters.
- You may use [pause] for a longer silence between sentences.
- No markdown, no code fences, no keys other than phase, text and theme."""


def _format_inspiration(lines: Sequence[str]) -> str:
    if not lines:
        return ""
    bullets = "\n".join(f"- {line.strip()}" for line in lines if line and line.strip())
    if not bullets:
        return ""
    return (
        "\nInspiration from our library (adapt the ideas, do not quote verbatim):\n"
        f"{bullets}\n"
    )


def _truncate(value: str, max_length: int = 240) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def build_user_prompt(request: ScriptRequest, inspiration: Sequence[str] = ()) -> str:
    note_line = ""
    if request.note and request.note.strip():
        note_line = f'The listener shared: "{request.note.strip()}"\n'

    prompt = (
        f"Write a guided meditation for someone who currently feels {request.start}"
        f" and wants to feel {request.destination}.\n"
        f"{note_line}"
        f"{_format_inspiration(inspiration)}\n"
        + _FORMAT_RULES.format(
            count=settings.narration.phase_count,
            max_chars=settings.narration.max_chars,
        )
    )
    logger.info(
        "Prompt built %s -> %s inspiration=%s\nUSER> %s",
        request.start,
        request.destination,
        len(inspiration),
        _truncate(prompt, 500),
    )
    return prompt


__all__ = ["SYSTEM_PROMPT", "build_user_prompt"]
