"""Collaborators the client-side preparer and playback engine talk to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from sentient.services.response_contract import MeditationPhase

CHECK_IN_PATH = "/check-in"
PROFILE_PATH = "/profile"


def destination_path(entry_id: str) -> str:
    return f"/meditation/destination?entry_id={entry_id}"


def ready_path(entry_id: str) -> str:
    return f"/meditation/ready?entry_id={entry_id}"


def session_path(entry_id: str) -> str:
    return f"/meditation/session?entry_id={entry_id}"


class GatewayError(RuntimeError):
    """A backend call made on behalf of the client failed."""


@dataclass(frozen=True)
class EntrySnapshot:
    id: str
    checked_in_mood: str
    destination_mood: Optional[str] = None
    note: Optional[str] = None


class EntryGateway(Protocol):
    async def fetch_entry(self, entry_id: str) -> Optional[EntrySnapshot]: ...


class ScriptGateway(Protocol):
    async def generate(
        self,
        start: str,
        destination: str,
        note: Optional[str] = None,
    ) -> list[MeditationPhase]: ...


class NarrationGateway(Protocol):
    async def synthesize_batch(self, entry_id: str, texts: Sequence[str]) -> list[str]: ...


class CompletionRecorder(Protocol):
    async def record_completion(self, entry_id: str, duration_seconds: int) -> None: ...


class Navigator(Protocol):
    def navigate(self, target: str, *, delay: float = 0.0) -> None: ...


__all__ = [
    "CHECK_IN_PATH",
    "CompletionRecorder",
    "EntryGateway",
    "EntrySnapshot",
    "GatewayError",
    "NarrationGateway",
    "Navigator",
    "PROFILE_PATH",
    "ScriptGateway",
    "destination_path",
    "ready_path",
    "session_path",
]
