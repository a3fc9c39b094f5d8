"""Application wiring: health, metrics and request logging."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from starlette.requests import Request

from sentient import main
from sentient.middleware import logging as request_logging
from sentient.telemetry import time_stage
from sentient.utils import create_access_token

client = TestClient(main.app)


def _request(headers: dict[str, str]) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/profile/stats",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


def test_health_reports_backend_readiness(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(main, "get_llm_client", lambda: SimpleNamespace(available=False))
    monkeypatch.setattr(main, "credentials_available", lambda: True)

    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["script_generation"] is False
    assert body["narration"] is True


def test_metrics_include_route_templates():
    client.get("/moods/destinations", params={"start": "sad"})

    text = client.get("/metrics").text

    assert 'route="/moods/destinations"' in text
    assert "meditation_stage_duration_seconds" in text


def test_stage_timer_observes_failed_runs():
    sample = ("meditation_stage_duration_seconds_count", {"stage": "unit"})
    before = REGISTRY.get_sample_value(*sample) or 0

    with pytest.raises(RuntimeError):
        with time_stage("unit"):
            raise RuntimeError("boom")

    assert REGISTRY.get_sample_value(*sample) == before + 1


def test_caller_descriptor_seals_session_details():
    token = create_access_token("00000000-0000-0000-0000-000000000007")

    caller = request_logging.caller_descriptor(_request({"Authorization": f"Bearer {token}"}))

    assert caller["user_id"] == "00000000-0000-0000-0000-000000000007"
    opened = json.loads(request_logging._cipher().decrypt(caller["id"].encode()))
    assert opened["user_id"] == caller["user_id"]
    assert "fingerprint" in opened


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer not-a-jwt"}],
)
def test_caller_descriptor_ignores_missing_or_invalid_tokens(headers):
    assert request_logging.caller_descriptor(_request(headers)) is None


def test_log_line_colour_follows_status():
    line = request_logging.format_line(
        {"method": "POST", "path": "/api/tts-batch", "status_code": 502, "duration_ms": 1.5}
    )

    assert line.startswith("\u001b[31m")
    assert "status_code=502" in line
    assert "user_id=-" in line
