"""Script generation through ``POST /api/generate``."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from sentient.main import app
from sentient.pipelines.meditation import script as script_stage

client = TestClient(app)


class FakeLlm:
    def __init__(self, reply: str | None, available: bool = True) -> None:
        self.reply = reply
        self.available = available
        self.calls = []

    async def invoke(self, *, system_prompt, user_prompt, **kwargs):
        self.calls.append(user_prompt)
        return self.reply


def _reply(count: int) -> str:
    return json.dumps(
        [{"phase": f"Step {i}", "text": f"Let go, {i}.", "theme": {"duration": 12}} for i in range(count)]
    )


@pytest.fixture
def fake_llm(monkeypatch: pytest.MonkeyPatch):
    llm = FakeLlm(_reply(6))

    async def no_inspiration(start, destination, note=None):
        return ["Soften the shoulders with every exhale."]

    monkeypatch.setattr(script_stage, "_LLM_CLIENT", llm)
    monkeypatch.setattr(script_stage, "retrieve_inspiration", no_inspiration)
    return llm


def test_generate_returns_six_normalised_phases(fake_llm):
    response = client.post(
        "/api/generate",
        json={"checked_in_mood": "anxious", "destination_mood": "calm", "note": "big exam tomorrow"},
    )

    assert response.status_code == 200
    phases = response.json()
    assert len(phases) == 6
    assert all(phase["theme"] == {"duration": 30} for phase in phases)
    assert len(fake_llm.calls) == 1
    assert "anxious" in fake_llm.calls[0]
    assert "big exam tomorrow" in fake_llm.calls[0]
    assert "Soften the shoulders" in fake_llm.calls[0]


@pytest.mark.parametrize(
    "body",
    [
        {"destination_mood": "calm"},
        {"checked_in_mood": "anxious"},
        {"checked_in_mood": "  ", "destination_mood": "calm"},
    ],
)
def test_missing_moods_are_rejected_without_calling_the_model(fake_llm, body):
    response = client.post("/api/generate", json=body)

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert fake_llm.calls == []


def test_five_phases_return_502_with_raw_payload(fake_llm, monkeypatch):
    raw = _reply(5)
    fake_llm.reply = raw

    async def narration_must_not_run(*args, **kwargs):
        raise AssertionError("narration should not be attempted")

    monkeypatch.setattr("sentient.controllers.meditation.synthesize_all", narration_must_not_run)

    response = client.post(
        "/api/generate",
        json={"checked_in_mood": "anxious", "destination_mood": "calm"},
    )

    assert response.status_code == 502
    payload = response.json()
    assert payload["code"] == "shape_error"
    assert payload["raw"] == raw


def test_non_json_reply_returns_502_malformed(fake_llm):
    fake_llm.reply = "I'm sorry, I can't do that."

    response = client.post(
        "/api/generate",
        json={"checked_in_mood": "sad", "destination_mood": "hopeful"},
    )

    assert response.status_code == 502
    assert response.json()["code"] == "malformed_response"
    assert response.json()["raw"] == "I'm sorry, I can't do that."


def test_unconfigured_model_is_upstream_unavailable(fake_llm):
    fake_llm.available = False

    response = client.post(
        "/api/generate",
        json={"checked_in_mood": "sad", "destination_mood": "hopeful"},
    )

    assert response.status_code == 500
    assert response.json()["code"] == "upstream_unavailable"
    assert fake_llm.calls == []


def test_retrieval_failure_does_not_block_generation(fake_llm, monkeypatch):
    from sentient.pipelines.meditation import retrieval

    class BrokenEmbeddings:
        async def embed(self, text):
            raise RuntimeError("embedding endpoint down")

    monkeypatch.setattr(script_stage, "retrieve_inspiration", retrieval.retrieve_inspiration)
    monkeypatch.setattr(retrieval, "get_llm_client", lambda: BrokenEmbeddings())

    response = client.post(
        "/api/generate",
        json={"checked_in_mood": "tired", "destination_mood": "rested"},
    )

    assert response.status_code == 200
    assert "Inspiration" not in fake_llm.calls[0]


def test_type_invalid_body_is_a_validation_error(fake_llm):
    response = client.post("/api/generate", json={"checked_in_mood": 5, "destination_mood": "calm"})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert "checked_in_mood" in response.json()["detail"]
    assert fake_llm.calls == []
