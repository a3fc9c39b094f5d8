"""HTTP implementation of the client gateways, backed by ``requests``."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import requests
from fastapi.concurrency import run_in_threadpool

from sentient.services.response_contract import MeditationPhase

from .gateways import EntrySnapshot, GatewayError

logger = logging.getLogger(__name__)


class ApiError(GatewayError):
    """Non-success response from the backend API."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class SentientApiClient:
    """Talks to the backend on behalf of one signed-in user."""

    def __init__(self, base_url: str, token: Optional[str] = None, *, timeout: float = 120.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        try:
            response = self._session.request(
                method,
                f"{self._base_url}{path}",
                timeout=self._timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise GatewayError(f"{method} {path} failed: {exc}") from exc
        if response.status_code >= 400:
            raise ApiError(response.status_code, self._error_detail(response))
        return response

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text or response.reason
        if isinstance(payload, dict) and payload.get("detail"):
            return str(payload["detail"])
        return str(payload)

    async def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await run_in_threadpool(self._request, method, path, **kwargs)
        return response.json()

    async def list_check_in_moods(self) -> list[dict[str, str]]:
        return await self._json("GET", "/moods/check-in")

    async def destinations(self, start: str) -> list[str]:
        payload = await self._json("GET", "/moods/destinations", params={"start": start})
        return list(payload.get("destinations", []))

    async def create_entry(self, checked_in_mood: str, note: Optional[str] = None) -> EntrySnapshot:
        payload = await self._json(
            "POST", "/entries", json={"checked_in_mood": checked_in_mood, "note": note}
        )
        return self._entry(payload)

    async def update_entry(
        self, entry_id: str, checked_in_mood: str, note: Optional[str] = None
    ) -> EntrySnapshot:
        payload = await self._json(
            "PUT", f"/entries/{entry_id}", json={"checked_in_mood": checked_in_mood, "note": note}
        )
        return self._entry(payload)

    async def set_destination(self, entry_id: str, destination_mood: str) -> EntrySnapshot:
        payload = await self._json(
            "PUT",
            f"/entries/{entry_id}/destination",
            json={"destination_mood": destination_mood},
        )
        return self._entry(payload)

    async def fetch_entry(self, entry_id: str) -> Optional[EntrySnapshot]:
        try:
            payload = await self._json("GET", f"/entries/{entry_id}")
        except ApiError as exc:
            if exc.status_code in (404, 422):
                return None
            raise
        return self._entry(payload)

    async def generate(
        self,
        start: str,
        destination: str,
        note: Optional[str] = None,
    ) -> list[MeditationPhase]:
        payload = await self._json(
            "POST",
            "/api/generate",
            json={"checked_in_mood": start, "destination_mood": destination, "note": note},
        )
        if not isinstance(payload, list):
            raise GatewayError("Script endpoint returned a non-list payload")
        return [MeditationPhase.model_validate(item) for item in payload]

    async def synthesize_batch(self, entry_id: str, texts: Sequence[str]) -> list[str]:
        payload = await self._json(
            "POST",
            "/api/tts-batch",
            json={"entryId": entry_id, "phases": [{"text": text} for text in texts]},
        )
        return list(payload.get("urls", []))

    async def record_completion(self, entry_id: str, duration_seconds: int) -> None:
        await self._json(
            "POST",
            "/sessions",
            json={"mood_entry_id": entry_id, "duration_seconds": duration_seconds, "completed": True},
        )
        logger.info("Completion recorded entry=%s duration=%ss", entry_id, duration_seconds)

    async def profile_stats(self) -> dict[str, Any]:
        return await self._json("GET", "/profile/stats")

    def close(self) -> None:
        self._session.close()

    @staticmethod
    def _entry(payload: dict[str, Any]) -> EntrySnapshot:
        return EntrySnapshot(
            id=str(payload["id"]),
            checked_in_mood=payload["checked_in_mood"],
            destination_mood=payload.get("destination_mood"),
            note=payload.get("note"),
        )


__all__ = ["ApiError", "SentientApiClient"]
