"""Check-in, destination, session and profile endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from sentient.controllers.dependencies import Principal, get_current_user
from sentient.database import get_session
from sentient.main import app
from sentient.services import entry_repository
from sentient.services.entry_repository import CheckInSummary, ProfileStats
from sentient.utils import create_access_token

USER_ID = UUID("00000000-0000-0000-0000-000000000042")


def _entry(**overrides):
    values = {
        "id": uuid4(),
        "user_id": USER_ID,
        "checked_in_mood": "anxious",
        "destination_mood": None,
        "note": None,
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class FakeRepository:
    def __init__(self) -> None:
        self.entries: dict[UUID, SimpleNamespace] = {}
        self.sessions = []

    async def create_entry(self, session, *, user_id, checked_in_mood, note):
        entry = _entry(user_id=user_id, checked_in_mood=checked_in_mood, note=note)
        self.entries[entry.id] = entry
        return entry

    async def get_entry(self, session, entry_id, *, user_id):
        entry = self.entries.get(entry_id)
        if entry is None or entry.user_id != user_id:
            return None
        return entry

    async def update_check_in(self, session, entry, *, checked_in_mood, note):
        entry.checked_in_mood = checked_in_mood
        entry.note = note
        return entry

    async def set_destination(self, session, entry, destination_mood):
        entry.destination_mood = destination_mood
        return entry

    async def record_session(self, session, *, user_id, mood_entry_id, duration_seconds, completed=True):
        record = SimpleNamespace(
            id=uuid4(),
            mood_entry_id=mood_entry_id,
            completed=completed,
            duration_seconds=duration_seconds,
            created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        self.sessions.append(record)
        return record

    async def session_stats(self, session, *, user_id):
        return ProfileStats(
            total_sessions=len(self.sessions),
            completed_sessions=sum(1 for s in self.sessions if s.completed),
            total_seconds=sum(s.duration_seconds for s in self.sessions),
            recent_check_ins=[
                CheckInSummary(e.created_at, e.checked_in_mood, e.destination_mood)
                for e in self.entries.values()
            ],
        )


@pytest.fixture
def repo(monkeypatch: pytest.MonkeyPatch):
    fake = FakeRepository()
    for name in (
        "create_entry",
        "get_entry",
        "update_check_in",
        "set_destination",
        "record_session",
        "session_stats",
    ):
        monkeypatch.setattr(entry_repository, name, getattr(fake, name))

    async def fake_session():
        yield None

    async def fake_user():
        return Principal(id=USER_ID)

    app.dependency_overrides[get_session] = fake_session
    app.dependency_overrides[get_current_user] = fake_user
    yield fake
    app.dependency_overrides.clear()


client = TestClient(app)


def test_check_in_then_choose_a_reachable_destination(repo):
    created = client.post("/entries", json={"checked_in_mood": " Anxious ", "note": "deadline"})
    assert created.status_code == 201
    entry_id = created.json()["id"]
    assert created.json()["checked_in_mood"] == "anxious"

    rejected = client.put(f"/entries/{entry_id}/destination", json={"destination_mood": "joyful"})
    assert rejected.status_code == 400

    chosen = client.put(f"/entries/{entry_id}/destination", json={"destination_mood": "grounded"})
    assert chosen.status_code == 200
    assert chosen.json()["destination_mood"] == "grounded"


def test_check_in_can_be_edited_only_before_destination(repo):
    entry = _entry()
    repo.entries[entry.id] = entry

    edited = client.put(f"/entries/{entry.id}", json={"checked_in_mood": "sad", "note": "actually"})
    assert edited.status_code == 200
    assert edited.json()["checked_in_mood"] == "sad"

    entry.destination_mood = "content"
    locked = client.put(f"/entries/{entry.id}", json={"checked_in_mood": "angry"})
    assert locked.status_code == 409


def test_entries_of_other_users_are_not_found(repo):
    entry = _entry(user_id=uuid4())
    repo.entries[entry.id] = entry

    assert client.get(f"/entries/{entry.id}").status_code == 404
    assert client.get(f"/entries/{uuid4()}").status_code == 404


def test_recorded_sessions_feed_profile_stats(repo):
    entry = _entry(destination_mood="calm")
    repo.entries[entry.id] = entry

    for seconds in (180, 40):
        response = client.post(
            "/sessions",
            json={"mood_entry_id": str(entry.id), "duration_seconds": seconds},
        )
        assert response.status_code == 201

    stats = client.get("/profile/stats").json()
    assert stats["total_sessions"] == 2
    assert stats["completed_sessions"] == 2
    assert stats["total_minutes"] == 4
    assert stats["recent_check_ins"][0]["destination_mood"] == "calm"


def test_session_for_unknown_entry_is_rejected(repo):
    response = client.post(
        "/sessions",
        json={"mood_entry_id": str(uuid4()), "duration_seconds": 30},
    )

    assert response.status_code == 404
    assert repo.sessions == []


def test_requests_without_a_valid_token_are_unauthorised(repo):
    app.dependency_overrides.pop(get_current_user)

    assert client.get("/profile/stats").status_code == 401
    assert (
        client.get("/profile/stats", headers={"Authorization": "Bearer not-a-jwt"}).status_code
        == 401
    )


def test_bearer_token_subject_becomes_the_principal(repo):
    app.dependency_overrides.pop(get_current_user)
    token = create_access_token(str(USER_ID))

    response = client.get("/profile/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


def test_destination_lookup_is_public():
    response = client.get("/moods/destinations", params={"start": "Lonely"})

    assert response.json() == {
        "start": "lonely",
        "destinations": ["connected", "accepting", "peaceful"],
    }
    assert client.get("/moods/destinations").json()["destinations"] == ["calm", "peaceful", "content"]


def test_metrics_expose_domain_counters():
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "meditation_scripts_generated_total" in response.text


def test_invalid_entry_bodies_keep_the_default_status(repo):
    response = client.post("/entries", json={"checked_in_mood": ""})

    assert response.status_code == 422
