"""Profile statistics endpoint."""

from fastapi import APIRouter

from sentient.controllers.dependencies import CurrentUserDep, SessionDep
from sentient.services import entry_repository
from sentient.views import ProfileStatsResponse, RecentCheckIn

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/stats")
async def profile_stats(
    current_user: CurrentUserDep,
    db_session: SessionDep,
) -> ProfileStatsResponse:
    """Session totals and the most recent check-ins for the current user."""

    stats = await entry_repository.session_stats(db_session, user_id=current_user.id)
    return ProfileStatsResponse(
        total_sessions=stats.total_sessions,
        completed_sessions=stats.completed_sessions,
        total_minutes=stats.total_minutes,
        recent_check_ins=[
            RecentCheckIn(
                created_at=item.created_at,
                checked_in_mood=item.checked_in_mood,
                destination_mood=item.destination_mood,
            )
            for item in stats.recent_check_ins
        ],
    )
