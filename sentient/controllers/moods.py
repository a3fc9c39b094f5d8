"""Mood catalogue and transition lookup endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Query

from sentient.domain.emotions import CHECK_IN_MOODS, resolve_destinations
from sentient.views import CheckInMoodResponse, DestinationsResponse

router = APIRouter(prefix="/moods", tags=["moods"])


@router.get("/check-in")
async def list_check_in_moods() -> List[CheckInMoodResponse]:
    """Moods offered on the check-in screen."""

    return [
        CheckInMoodResponse(id=mood.id, label=mood.label, description=mood.description)
        for mood in CHECK_IN_MOODS
    ]


@router.get("/destinations")
async def list_destinations(
    start: Optional[str] = Query(None, description="Current emotional state"),
) -> DestinationsResponse:
    """Destination moods reachable from ``start``; unknown states get the fallback."""

    return DestinationsResponse(
        start=(start or "").strip().lower(),
        destinations=list(resolve_destinations(start)),
    )
