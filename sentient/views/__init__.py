"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .entries import (
    CheckInMoodResponse,
    DestinationRequest,
    DestinationsResponse,
    EntryCreateRequest,
    EntryResponse,
    EntryUpdateRequest,
)
from .meditation import (
    BatchNarrationRequest,
    BatchNarrationResponse,
    GenerateRequest,
    NarrationRequest,
    NarrationUploadResponse,
    PhaseText,
)
from .sessions import (
    ProfileStatsResponse,
    RecentCheckIn,
    SessionRecordRequest,
    SessionRecordResponse,
)

__all__ = [
    "BatchNarrationRequest",
    "BatchNarrationResponse",
    "CheckInMoodResponse",
    "DestinationRequest",
    "DestinationsResponse",
    "EntryCreateRequest",
    "EntryResponse",
    "EntryUpdateRequest",
    "ErrorResponse",
    "GenerateRequest",
    "NarrationRequest",
    "NarrationUploadResponse",
    "PhaseText",
    "ProfileStatsResponse",
    "RecentCheckIn",
    "SessionRecordRequest",
    "SessionRecordResponse",
]
