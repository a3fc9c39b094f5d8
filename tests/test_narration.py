"""Narration synthesis: batch uploads, single stream/upload and their HTTP routes."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from sentient.domain.errors import PersistenceError, UpstreamUnavailable, ValidationError
from sentient.main import app
from sentient.pipelines.meditation import narration
from sentient.services.narration_tts import NarrationTtsResult
from sentient.services.storage import (
    SignedAsset,
    StorageError,
    StorageNotConfiguredError,
    narration_key,
)

client = TestClient(app)

TEXTS = [f"Phase {n} narration." for n in range(1, 7)]


class FakeTts:
    def __init__(self) -> None:
        self.calls = []

    async def synthesize(self, text, *, voice_id=None, engine=None):
        self.calls.append((text, voice_id, engine))
        return NarrationTtsResult(
            audio_bytes=b"ID3" + text.encode("utf-8"),
            media_type="audio/mpeg",
            voice_id=voice_id or "Joanna",
            engine=engine or "neural",
        )


class FakeBucket:
    def __init__(self, fail_on_phase: int | None = None) -> None:
        self.objects: dict[str, bytes] = {}
        self.uploads: list[str] = []
        self.fail_on_phase = fail_on_phase

    async def store(self, entry_id, phase_number, audio_bytes):
        if phase_number == self.fail_on_phase:
            raise StorageError("Upload failed: AccessDenied")
        key = narration_key(entry_id, phase_number)
        self.objects[key] = audio_bytes
        self.uploads.append(key)
        return SignedAsset(path=key, signed_url=f"https://signed.example/{key}?ttl=3600")


@pytest.fixture
def tts(monkeypatch: pytest.MonkeyPatch) -> FakeTts:
    fake = FakeTts()
    monkeypatch.setattr(narration, "_TTS_SERVICE", fake)
    monkeypatch.setattr(narration, "ensure_storage_configured", lambda: None)
    monkeypatch.setattr(narration, "ensure_speech_configured", lambda: None)
    return fake


@pytest.fixture
def bucket(monkeypatch: pytest.MonkeyPatch) -> FakeBucket:
    fake = FakeBucket()
    monkeypatch.setattr(narration, "store_narration", fake.store)
    return fake


def test_batch_returns_urls_in_phase_order(tts, bucket):
    urls = asyncio.run(narration.synthesize_all("entry-9", TEXTS))

    assert urls == [f"https://signed.example/tts/entry-9/phase-{n}.mp3?ttl=3600" for n in range(1, 7)]
    assert [call[0] for call in tts.calls] == TEXTS


def test_rerunning_a_batch_overwrites_the_same_six_paths(tts, bucket):
    first = asyncio.run(narration.synthesize_all("entry-9", TEXTS))
    second = asyncio.run(narration.synthesize_all("entry-9", TEXTS))

    assert first == second
    assert sorted(bucket.objects) == sorted(f"tts/entry-9/phase-{n}.mp3" for n in range(1, 7))
    assert len(bucket.uploads) == 12


def test_concurrent_windows_keep_phase_order(tts, bucket, monkeypatch):
    monkeypatch.setattr(narration, "NARRATION_CONCURRENCY", 4)

    urls = asyncio.run(narration.synthesize_all("entry-9", TEXTS))

    assert [url.split("/")[-1].split("?")[0] for url in urls] == [f"phase-{n}.mp3" for n in range(1, 7)]


def test_failing_phase_four_aborts_the_batch(tts, bucket):
    bucket.fail_on_phase = 4

    with pytest.raises(PersistenceError) as excinfo:
        asyncio.run(narration.synthesize_all("entry-9", TEXTS))

    assert excinfo.value.phase_index == 4
    assert "phase 4" in excinfo.value.message
    assert len(tts.calls) == 4


def test_failing_phase_is_reported_over_http_without_urls(tts, bucket):
    bucket.fail_on_phase = 4

    response = client.post(
        "/api/tts-batch",
        json={"entryId": "entry-9", "phases": [{"text": text} for text in TEXTS]},
    )

    assert response.status_code == 500
    payload = response.json()
    assert payload["code"] == "persistence_error"
    assert "phase 4" in payload["detail"]
    assert "urls" not in payload


@pytest.mark.parametrize(
    "entry_id, texts",
    [
        ("", TEXTS),
        ("entry-9", TEXTS[:5]),
        ("entry-9", TEXTS[:5] + ["   "]),
        ("entry-9", TEXTS[:5] + ["x" * 2001]),
    ],
)
def test_batch_preflight_rejects_bad_input(tts, bucket, entry_id, texts):
    with pytest.raises(ValidationError):
        asyncio.run(narration.synthesize_all(entry_id, texts))

    assert tts.calls == []


def test_missing_storage_configuration_is_fatal_before_any_call(tts, bucket, monkeypatch):
    def not_configured():
        raise StorageNotConfiguredError("S3 bucket name is not configured.")

    monkeypatch.setattr(narration, "ensure_storage_configured", not_configured)

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(narration.synthesize_all("entry-9", TEXTS))

    assert tts.calls == []


def test_batch_route_maps_model_to_engine(tts, bucket):
    response = client.post(
        "/api/tts-batch",
        json={
            "entryId": "entry-9",
            "phases": [{"text": text} for text in TEXTS],
            "voice": "Matthew",
            "model": "standard",
        },
    )

    assert response.status_code == 200
    assert len(response.json()["urls"]) == 6
    assert tts.calls[0][1:] == ("Matthew", "standard")


def test_batch_route_rejects_wrong_phase_count(tts, bucket):
    response = client.post("/api/tts-batch", json={"entryId": "entry-9", "phases": [{"text": "hi"}]})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_stream_round_trip_yields_six_mpeg_payloads(tts, bucket):
    for text in TEXTS:
        response = client.post("/api/tts", json={"text": text, "as": "stream"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/mpeg"
        assert response.headers["cache-control"] == "no-store"
        assert response.content.startswith(b"ID3")
        assert len(response.content) > 3

    assert bucket.uploads == []


def test_upload_mode_uses_one_based_key(tts, bucket):
    response = client.post(
        "/api/tts",
        json={"text": "Rest here.", "as": "upload", "entryId": "entry-9", "phaseIndex": 0},
    )

    assert response.status_code == 200
    assert response.json() == {
        "signedUrl": "https://signed.example/tts/entry-9/phase-1.mp3?ttl=3600",
        "path": "tts/entry-9/phase-1.mp3",
    }


@pytest.mark.parametrize(
    "body",
    [
        {"text": "Rest here.", "as": "upload", "phaseIndex": 0},
        {"text": "Rest here.", "as": "upload", "entryId": "entry-9"},
        {"text": "Rest here.", "as": "upload", "entryId": "entry-9", "phaseIndex": -1},
        {"text": "", "as": "stream"},
        {"text": "x" * 2001, "as": "stream"},
    ],
)
def test_single_narration_validation(tts, bucket, body):
    response = client.post("/api/tts", json=body)

    assert response.status_code == 400
    assert tts.calls == []


@pytest.mark.parametrize(
    "body",
    [
        {"text": "Breathe.", "as": "foo"},
        {"text": "Breathe.", "as": "upload", "entryId": "entry-1", "phaseIndex": "first"},
        {"entryId": "entry-1", "phases": "not-a-list"},
    ],
)
def test_type_invalid_narration_bodies_are_validation_errors(tts, bucket, body):
    route = "/api/tts-batch" if "phases" in body else "/api/tts"

    response = client.post(route, json=body)

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert tts.calls == []
