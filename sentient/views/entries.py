"""Schemas for mood check-ins and destination selection."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EntryCreateRequest(BaseModel):
    checked_in_mood: str = Field(..., min_length=1, max_length=64)
    note: Optional[str] = Field(None, max_length=2000)


class EntryUpdateRequest(BaseModel):
    checked_in_mood: str = Field(..., min_length=1, max_length=64)
    note: Optional[str] = Field(None, max_length=2000)


class DestinationRequest(BaseModel):
    destination_mood: str = Field(..., min_length=1, max_length=64)


class EntryResponse(BaseModel):
    id: UUID
    checked_in_mood: str
    destination_mood: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DestinationsResponse(BaseModel):
    start: str
    destinations: List[str]


class CheckInMoodResponse(BaseModel):
    id: str
    label: str
    description: str
