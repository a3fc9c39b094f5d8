"""Hand-off of a prepared meditation from the preparer to the playback engine.

The store mirrors a tab-scoped key/value slot: values are serialised JSON
strings under fixed keys, so a corrupted or partial slot is detected on
read and reported as missing rather than raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from pydantic import ValidationError

from sentient.services.response_contract import PHASE_COUNT, MeditationPhase

logger = logging.getLogger(__name__)

ENTRY_ID_KEY = "entryId"
MEDITATION_KEY = "meditation"
TTS_URLS_KEY = "ttsUrls"


@dataclass(frozen=True)
class SessionBundle:
    entry_id: str
    phases: tuple[MeditationPhase, ...]
    narration_refs: tuple[str, ...]


class BundleStore(Protocol):
    def put(
        self,
        entry_id: str,
        phases: Sequence[MeditationPhase],
        narration_refs: Sequence[str],
    ) -> SessionBundle: ...

    def get(self) -> Optional[SessionBundle]: ...

    def read_script(self, entry_id: str) -> Optional[list[MeditationPhase]]: ...

    def clear(self) -> None: ...


class InMemoryBundleStore:
    """One bundle slot per client session."""

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def set_item(self, key: str, value: str) -> None:
        self._slots[key] = value

    def get_item(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def put(
        self,
        entry_id: str,
        phases: Sequence[MeditationPhase],
        narration_refs: Sequence[str],
    ) -> SessionBundle:
        """Replace the slot with a complete bundle; partial bundles are rejected."""

        if not entry_id:
            raise ValueError("Bundle requires an entry id")
        if len(phases) != PHASE_COUNT or len(narration_refs) != len(phases):
            raise ValueError(
                f"Bundle requires {PHASE_COUNT} phases and one narration reference per phase"
            )

        bundle = SessionBundle(
            entry_id=entry_id,
            phases=tuple(phases),
            narration_refs=tuple(narration_refs),
        )
        self._slots[ENTRY_ID_KEY] = entry_id
        self._slots[MEDITATION_KEY] = json.dumps([phase.model_dump() for phase in bundle.phases])
        self._slots[TTS_URLS_KEY] = json.dumps(list(bundle.narration_refs))
        return bundle

    def get(self) -> Optional[SessionBundle]:
        entry_id = self._slots.get(ENTRY_ID_KEY)
        if not entry_id:
            return None
        phases = self._parse_phases(self._slots.get(MEDITATION_KEY))
        urls = self._parse_urls(self._slots.get(TTS_URLS_KEY))
        if phases is None or urls is None or len(urls) != len(phases):
            return None
        return SessionBundle(entry_id=entry_id, phases=tuple(phases), narration_refs=tuple(urls))

    def read_script(self, entry_id: str) -> Optional[list[MeditationPhase]]:
        """Return the stored script for ``entry_id`` even when its narration is unusable."""

        if self._slots.get(ENTRY_ID_KEY) != entry_id:
            return None
        return self._parse_phases(self._slots.get(MEDITATION_KEY))

    def clear(self) -> None:
        self._slots.clear()

    @staticmethod
    def _parse_phases(raw: Optional[str]) -> Optional[list[MeditationPhase]]:
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Invalid meditation data in bundle store")
            return None
        if not isinstance(data, list) or len(data) != PHASE_COUNT:
            return None
        try:
            return [MeditationPhase.model_validate(item) for item in data]
        except ValidationError:
            logger.warning("Meditation phases in bundle store failed validation")
            return None

    @staticmethod
    def _parse_urls(raw: Optional[str]) -> Optional[list[str]]:
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Invalid narration URL data in bundle store")
            return None
        if not isinstance(data, list) or not data:
            return None
        if not all(isinstance(item, str) and item for item in data):
            return None
        return data


__all__ = [
    "BundleStore",
    "ENTRY_ID_KEY",
    "InMemoryBundleStore",
    "MEDITATION_KEY",
    "SessionBundle",
    "TTS_URLS_KEY",
]
