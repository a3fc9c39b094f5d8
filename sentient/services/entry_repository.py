"""Repository helpers for mood entries and completed meditation sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sentient.models.meditation_session import MeditationSession
from sentient.models.mood_entry import MoodEntry

logger = logging.getLogger(__name__)

RECENT_CHECK_INS_LIMIT = 10


@dataclass(frozen=True)
class CheckInSummary:
    created_at: datetime
    checked_in_mood: str
    destination_mood: str | None


@dataclass(frozen=True)
class ProfileStats:
    total_sessions: int
    completed_sessions: int
    total_seconds: int
    recent_check_ins: list[CheckInSummary] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return round(self.total_seconds / 60)


async def create_entry(
    session: AsyncSession,
    *,
    user_id: UUID,
    checked_in_mood: str,
    note: str | None,
) -> MoodEntry:
    entry = MoodEntry(user_id=user_id, checked_in_mood=checked_in_mood, note=note or None)
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    logger.info("Mood entry created id=%s mood=%s", entry.id, checked_in_mood)
    return entry


async def get_entry(session: AsyncSession, entry_id: UUID, *, user_id: UUID) -> MoodEntry | None:
    """Return the entry when it exists and belongs to ``user_id``."""

    result = await session.execute(
        select(MoodEntry).where(MoodEntry.id == entry_id, MoodEntry.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def update_check_in(
    session: AsyncSession,
    entry: MoodEntry,
    *,
    checked_in_mood: str,
    note: str | None,
) -> MoodEntry:
    entry.checked_in_mood = checked_in_mood
    entry.note = note or None
    await session.commit()
    await session.refresh(entry)
    return entry


async def set_destination(session: AsyncSession, entry: MoodEntry, destination_mood: str) -> MoodEntry:
    entry.destination_mood = destination_mood
    await session.commit()
    await session.refresh(entry)
    logger.info("Destination set id=%s %s -> %s", entry.id, entry.checked_in_mood, destination_mood)
    return entry


async def record_session(
    session: AsyncSession,
    *,
    user_id: UUID,
    mood_entry_id: UUID,
    duration_seconds: int,
    completed: bool = True,
) -> MeditationSession:
    """Insert one completion record; records are never updated afterwards."""

    record = MeditationSession(
        user_id=user_id,
        mood_entry_id=mood_entry_id,
        completed=completed,
        duration_seconds=max(0, int(duration_seconds)),
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    logger.info(
        "Meditation session recorded entry=%s duration=%ss",
        mood_entry_id,
        record.duration_seconds,
    )
    return record


async def session_stats(session: AsyncSession, *, user_id: UUID) -> ProfileStats:
    totals = await session.execute(
        select(
            func.count(MeditationSession.id),
            func.count(MeditationSession.id).filter(MeditationSession.completed.is_(True)),
            func.coalesce(func.sum(MeditationSession.duration_seconds), 0),
        ).where(MeditationSession.user_id == user_id)
    )
    total_sessions, completed_sessions, total_seconds = totals.one()

    recent = await session.execute(
        select(
            MoodEntry.created_at,
            MoodEntry.checked_in_mood,
            MoodEntry.destination_mood,
        )
        .where(MoodEntry.user_id == user_id)
        .order_by(MoodEntry.created_at.desc())
        .limit(RECENT_CHECK_INS_LIMIT)
    )

    return ProfileStats(
        total_sessions=int(total_sessions or 0),
        completed_sessions=int(completed_sessions or 0),
        total_seconds=int(total_seconds or 0),
        recent_check_ins=[
            CheckInSummary(
                created_at=row.created_at,
                checked_in_mood=row.checked_in_mood,
                destination_mood=row.destination_mood,
            )
            for row in recent.all()
        ],
    )


__all__ = [
    "CheckInSummary",
    "ProfileStats",
    "create_entry",
    "get_entry",
    "record_session",
    "session_stats",
    "set_destination",
    "update_check_in",
]
