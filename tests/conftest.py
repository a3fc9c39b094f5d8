"""Shared fakes for the meditation pipeline and playback tests."""

from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from sentient.playback.gateways import EntrySnapshot, GatewayError  # noqa: E402
from sentient.services.response_contract import (  # noqa: E402
    MeditationPhase,
    MeditationTheme,
)


def make_phases(durations=(30, 30, 30, 30, 30, 30)) -> list[MeditationPhase]:
    return [
        MeditationPhase(
            phase=f"Phase {index}",
            text=f"Breathe in and notice moment {index}.",
            theme=MeditationTheme(duration=duration),
        )
        for index, duration in enumerate(durations, start=1)
    ]


def make_urls(entry_id: str = "entry-1", count: int = 6) -> list[str]:
    return [f"https://signed.example/tts/{entry_id}/phase-{n}.mp3" for n in range(1, count + 1)]


class FakeEntries:
    def __init__(self, entry: EntrySnapshot | None = None, error: Exception | None = None) -> None:
        self.entry = entry
        self.error = error
        self.calls = 0

    async def fetch_entry(self, entry_id: str):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.entry


class FakeScripts:
    def __init__(self, phases=None, error: Exception | None = None) -> None:
        self.phases = make_phases() if phases is None else phases
        self.error = error
        self.calls = []

    async def generate(self, start, destination, note=None):
        self.calls.append((start, destination, note))
        if self.error is not None:
            raise self.error
        return list(self.phases)


class FakeNarration:
    def __init__(self, urls=None, error: Exception | None = None) -> None:
        self.urls = urls
        self.error = error
        self.calls = []

    async def synthesize_batch(self, entry_id, texts):
        self.calls.append((entry_id, list(texts)))
        if self.error is not None:
            raise self.error
        return list(self.urls) if self.urls is not None else make_urls(entry_id, len(texts))


class FakeRecorder:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.records = []

    async def record_completion(self, entry_id, duration_seconds):
        self.records.append((entry_id, duration_seconds))
        if self.fail:
            raise GatewayError("database unavailable")


class RecordingNavigator:
    def __init__(self) -> None:
        self.calls = []

    def navigate(self, target, *, delay=0.0):
        self.calls.append((target, delay))


@pytest.fixture
def entry() -> EntrySnapshot:
    return EntrySnapshot(id="entry-1", checked_in_mood="anxious", destination_mood="calm", note=None)
