"""SQLAlchemy model for mood check-ins."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from sentient.models.base import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MoodEntry(Base):
    __tablename__ = "mood_entries"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    user_id = Column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
    )
    checked_in_mood = Column(
        String(64),
        nullable=False,
    )
    destination_mood = Column(
        String(64),
        nullable=True,
    )
    note = Column(
        Text,
        nullable=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
