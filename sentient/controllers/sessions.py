"""Completed meditation records."""

import logging

from fastapi import APIRouter, HTTPException, status

from sentient.controllers.dependencies import CurrentUserDep, SessionDep
from sentient.services import entry_repository
from sentient.telemetry import increment_sessions_recorded
from sentient.views import SessionRecordRequest, SessionRecordResponse

router = APIRouter(prefix="/sessions", tags=["sessions"])

logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_201_CREATED)
async def record_session(
    request: SessionRecordRequest,
    current_user: CurrentUserDep,
    db_session: SessionDep,
) -> SessionRecordResponse:
    """Store one completion record; records are never edited afterwards."""

    entry = await entry_repository.get_entry(
        db_session, request.mood_entry_id, user_id=current_user.id
    )
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Mood entry not found",
        )

    record = await entry_repository.record_session(
        db_session,
        user_id=current_user.id,
        mood_entry_id=entry.id,
        duration_seconds=request.duration_seconds,
        completed=request.completed,
    )
    increment_sessions_recorded()
    return SessionRecordResponse.model_validate(record)
