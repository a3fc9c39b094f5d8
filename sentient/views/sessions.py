"""Schemas for completion records and profile statistics."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SessionRecordRequest(BaseModel):
    mood_entry_id: UUID
    duration_seconds: int = Field(..., ge=0)
    completed: bool = True


class SessionRecordResponse(BaseModel):
    id: UUID
    mood_entry_id: UUID
    completed: bool
    duration_seconds: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecentCheckIn(BaseModel):
    created_at: datetime
    checked_in_mood: str
    destination_mood: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileStatsResponse(BaseModel):
    total_sessions: int
    completed_sessions: int
    total_minutes: int
    recent_check_ins: List[RecentCheckIn] = Field(default_factory=list)
