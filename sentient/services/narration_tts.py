"""Amazon Polly TTS tuned for calm, paced meditation narration."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from html import escape as html_escape
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from sentient.config.settings import settings
from sentient.services.aws import create_boto3_client, credentials_available

logger = logging.getLogger(__name__)

SUPPORTED_ENGINES = frozenset({"standard", "neural", "generative", "long-form"})

_PAUSE_RE = re.compile(r"\[(pause|breath)\]", re.IGNORECASE)
_PAUSE_MS = {"pause": 900, "breath": 400}


@dataclass(frozen=True)
class NarrationTtsResult:
    """Synthesised MP3 bytes for one phase."""

    audio_bytes: bytes
    media_type: str
    voice_id: str
    engine: str


class NarrationTtsError(RuntimeError):
    """Raised when the Polly narration request fails."""


class SpeechNotConfiguredError(NarrationTtsError):
    """Raised before any call when no AWS credentials can be resolved."""


_polly_client = create_boto3_client("polly", region_name=settings.polly.region)


def ensure_speech_configured() -> None:
    if not credentials_available():
        raise SpeechNotConfiguredError("Speech synthesis credentials are not configured.")


class NarrationTtsService:
    """Generate narration audio with Amazon Polly."""

    def __init__(
        self,
        *,
        default_voice_id: str = settings.polly.default_voice_id,
        default_engine: str = settings.polly.engine,
        rate: float = 0.9,
    ) -> None:
        self._default_voice_id = default_voice_id
        self._default_engine = default_engine
        self._rate = rate

    def resolve_engine(self, engine: str | None) -> str:
        candidate = (engine or "").strip().lower()
        if candidate in SUPPORTED_ENGINES:
            return candidate
        if candidate:
            logger.info("Unknown Polly engine '%s'; using '%s'", candidate, self._default_engine)
        return self._default_engine

    async def synthesize(
        self,
        text: str,
        *,
        voice_id: str | None = None,
        engine: str | None = None,
    ) -> NarrationTtsResult:
        """Convert narration text to MP3 bytes."""

        voice = voice_id or self._default_voice_id
        resolved_engine = self.resolve_engine(engine)
        ssml = self._build_ssml(text)
        try:
            response: dict[str, Any] = await run_in_threadpool(
                _polly_client.synthesize_speech,
                TextType="ssml",
                Text=ssml,
                VoiceId=voice,
                Engine=resolved_engine,
                OutputFormat="mp3",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Polly synth failed for voice '%s'", voice)
            raise NarrationTtsError(f"Failed to synthesize speech: {exc}") from exc

        audio_stream = response.get("AudioStream")
        if audio_stream is None:
            raise NarrationTtsError("Polly returned no audio stream.")
        audio_bytes = audio_stream.read()
        if not audio_bytes:
            raise NarrationTtsError("Polly returned an empty audio stream.")

        return NarrationTtsResult(
            audio_bytes=audio_bytes,
            media_type="audio/mpeg",
            voice_id=voice,
            engine=resolved_engine,
        )

    def _build_ssml(self, text: str) -> str:
        parts: list[str] = []
        cursor = 0
        for match in _PAUSE_RE.finditer(text):
            parts.append(html_escape(text[cursor:match.start()]))
            parts.append(f'<break time="{_PAUSE_MS[match.group(1).lower()]}ms"/>')
            cursor = match.end()
        parts.append(html_escape(text[cursor:]))
        body = "".join(parts).strip()

        rate_pct = max(60, min(140, int(round(self._rate * 100))))
        if rate_pct != 100:
            return f'<speak><prosody rate="{rate_pct}%">{body}</prosody></speak>'
        return f"<speak>{body}</speak>"


def get_narration_tts_service() -> NarrationTtsService:
    """Return the default narration TTS service instance."""

    return _DEFAULT_SERVICE


_DEFAULT_SERVICE = NarrationTtsService()


__all__ = [
    "NarrationTtsError",
    "NarrationTtsResult",
    "NarrationTtsService",
    "SUPPORTED_ENGINES",
    "SpeechNotConfiguredError",
    "ensure_speech_configured",
    "get_narration_tts_service",
]
