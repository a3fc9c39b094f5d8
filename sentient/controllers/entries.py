"""Mood check-in and destination selection endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from sentient.controllers.dependencies import CurrentUserDep, SessionDep
from sentient.domain.emotions import resolve_destinations
from sentient.models.mood_entry import MoodEntry
from sentient.services import entry_repository
from sentient.views import (
    DestinationRequest,
    EntryCreateRequest,
    EntryResponse,
    EntryUpdateRequest,
)

router = APIRouter(prefix="/entries", tags=["entries"])

logger = logging.getLogger(__name__)


def _normalise_mood(value: str) -> str:
    mood = value.strip().lower()
    if not mood:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Mood is required",
        )
    return mood


async def _owned_entry(session: SessionDep, entry_id: UUID, user: CurrentUserDep) -> MoodEntry:
    entry = await entry_repository.get_entry(session, entry_id, user_id=user.id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Mood entry not found",
        )
    return entry


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: EntryCreateRequest,
    current_user: CurrentUserDep,
    db_session: SessionDep,
) -> EntryResponse:
    """Record a check-in for the current user."""

    entry = await entry_repository.create_entry(
        db_session,
        user_id=current_user.id,
        checked_in_mood=_normalise_mood(request.checked_in_mood),
        note=request.note,
    )
    return EntryResponse.model_validate(entry)


@router.get("/{entry_id}")
async def read_entry(
    entry_id: UUID,
    current_user: CurrentUserDep,
    db_session: SessionDep,
) -> EntryResponse:
    entry = await _owned_entry(db_session, entry_id, current_user)
    return EntryResponse.model_validate(entry)


@router.put("/{entry_id}")
async def update_entry(
    entry_id: UUID,
    request: EntryUpdateRequest,
    current_user: CurrentUserDep,
    db_session: SessionDep,
) -> EntryResponse:
    """Edit a check-in in place; allowed only until a destination is chosen."""

    entry = await _owned_entry(db_session, entry_id, current_user)
    if entry.destination_mood:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Check-in can no longer be edited",
        )
    entry = await entry_repository.update_check_in(
        db_session,
        entry,
        checked_in_mood=_normalise_mood(request.checked_in_mood),
        note=request.note,
    )
    return EntryResponse.model_validate(entry)


@router.put("/{entry_id}/destination")
async def choose_destination(
    entry_id: UUID,
    request: DestinationRequest,
    current_user: CurrentUserDep,
    db_session: SessionDep,
) -> EntryResponse:
    """Set the destination mood; it must be reachable from the check-in mood."""

    entry = await _owned_entry(db_session, entry_id, current_user)
    destination = _normalise_mood(request.destination_mood)
    allowed = resolve_destinations(entry.checked_in_mood)
    if destination not in allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Destination must be one of: {', '.join(allowed)}",
        )
    entry = await entry_repository.set_destination(db_session, entry, destination)
    return EntryResponse.model_validate(entry)
