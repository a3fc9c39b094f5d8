"""Narration stage: Polly speech per phase, stored in S3 behind signed URLs."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence, Union

from sentient.config.settings import settings
from sentient.domain.errors import (
    MeditationPipelineError,
    PersistenceError,
    UpstreamUnavailable,
    ValidationError,
)
from sentient.services.narration_tts import (
    NarrationTtsError,
    SpeechNotConfiguredError,
    ensure_speech_configured,
    get_narration_tts_service,
)
from sentient.services.storage import (
    StorageError,
    StorageNotConfiguredError,
    ensure_storage_configured,
    store_narration,
)
from sentient.telemetry import NARRATION_BATCH_FAILURES, NARRATION_PHASES, time_stage

from .types import NarrationMode, StreamedNarration, UploadedNarration

logger = logging.getLogger("sentient.services.meditation_pipeline")

NARRATION_CONCURRENCY = settings.narration.concurrency
MAX_NARRATION_CHARS = settings.narration.max_chars
PHASE_COUNT = settings.narration.phase_count

_TTS_SERVICE = get_narration_tts_service()


def validate_text(text: Optional[str]) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Narration text is required")
    if len(cleaned) > MAX_NARRATION_CHARS:
        raise ValidationError(f"Narration text exceeds {MAX_NARRATION_CHARS} characters")
    return cleaned


def validate_texts(entry_id: Optional[str], texts: Optional[Sequence[str]]) -> list[str]:
    """Pre-flight checks for a batch; nothing is synthesised when this raises."""

    if not entry_id or not str(entry_id).strip():
        raise ValidationError("entryId is required")
    if texts is None or len(texts) != PHASE_COUNT:
        raise ValidationError(f"Exactly {PHASE_COUNT} phases are required")

    cleaned: list[str] = []
    for index, text in enumerate(texts, start=1):
        value = (text or "").strip() if isinstance(text, str) else ""
        if not value:
            raise ValidationError(f"Phase {index} text is empty")
        if len(value) > MAX_NARRATION_CHARS:
            raise ValidationError(f"Phase {index} text exceeds {MAX_NARRATION_CHARS} characters")
        cleaned.append(value)
    return cleaned


def _ensure_backends(*, storage: bool) -> None:
    try:
        if storage:
            ensure_storage_configured()
        ensure_speech_configured()
    except (StorageNotConfiguredError, SpeechNotConfiguredError) as exc:
        raise UpstreamUnavailable(str(exc)) from exc


async def _narrate_phase(
    entry_id: str,
    phase_number: int,
    text: str,
    voice: Optional[str],
    engine: Optional[str],
) -> UploadedNarration:
    try:
        speech = await _TTS_SERVICE.synthesize(text, voice_id=voice, engine=engine)
        asset = await store_narration(entry_id, phase_number, speech.audio_bytes)
    except (NarrationTtsError, StorageError) as exc:
        raise PersistenceError(
            f"Narration failed for phase {phase_number}: {exc}",
            phase_index=phase_number,
        ) from exc

    NARRATION_PHASES.labels(mode="upload").inc()
    logger.info("Narration stored entry=%s phase=%s key=%s", entry_id, phase_number, asset.path)
    return UploadedNarration(signed_url=asset.signed_url, path=asset.path)


async def synthesize_all(
    entry_id: Optional[str],
    texts: Optional[Sequence[str]],
    voice: Optional[str] = None,
    engine: Optional[str] = None,
) -> list[str]:
    """Narrate every phase and return signed URLs in phase order.

    Phases run in windows of ``NARRATION_CONCURRENCY``; a window of one is
    strictly sequential. The first failing phase (in phase order) aborts the
    batch and no URLs are returned.
    """

    cleaned = validate_texts(entry_id, texts)
    entry_key = str(entry_id).strip()
    _ensure_backends(storage=True)

    window = max(1, int(NARRATION_CONCURRENCY))
    urls: list[str] = []
    with time_stage("narration_batch"):
        for offset in range(0, len(cleaned), window):
            chunk = cleaned[offset : offset + window]
            results = await asyncio.gather(
                *(
                    _narrate_phase(entry_key, offset + position + 1, text, voice, engine)
                    for position, text in enumerate(chunk)
                ),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    NARRATION_BATCH_FAILURES.inc()
                    logger.error("Narration batch aborted entry=%s: %s", entry_key, result)
                    raise result
                urls.append(result.signed_url)

    logger.info("Narration batch complete entry=%s phases=%s", entry_key, len(urls))
    return urls


async def synthesize_one(
    text: Optional[str],
    mode: NarrationMode = "stream",
    entry_id: Optional[str] = None,
    phase_index: Optional[int] = None,
    voice: Optional[str] = None,
    engine: Optional[str] = None,
) -> Union[StreamedNarration, UploadedNarration]:
    """Narrate one text, either returning the audio or storing it.

    ``phase_index`` is zero-based here; the stored key uses ``phase_index + 1``.
    """

    cleaned = validate_text(text)

    if mode == "stream":
        _ensure_backends(storage=False)
        try:
            speech = await _TTS_SERVICE.synthesize(cleaned, voice_id=voice, engine=engine)
        except NarrationTtsError as exc:
            raise MeditationPipelineError(f"Speech synthesis failed: {exc}") from exc
        NARRATION_PHASES.labels(mode="stream").inc()
        return StreamedNarration(audio_bytes=speech.audio_bytes, media_type=speech.media_type)

    if mode != "upload":
        raise ValidationError("as must be 'stream' or 'upload'")
    if not entry_id or not str(entry_id).strip():
        raise ValidationError("entryId is required for upload")
    if phase_index is None or isinstance(phase_index, bool) or phase_index < 0:
        raise ValidationError("phaseIndex must be a non-negative integer for upload")

    _ensure_backends(storage=True)
    return await _narrate_phase(str(entry_id).strip(), phase_index + 1, cleaned, voice, engine)


__all__ = [
    "NARRATION_CONCURRENCY",
    "synthesize_all",
    "synthesize_one",
    "validate_text",
    "validate_texts",
]
