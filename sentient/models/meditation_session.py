"""SQLAlchemy model for completed meditation sessions."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from sentient.models.base import Base
from sentient.models.mood_entry import utc_now


class MeditationSession(Base):
    __tablename__ = "meditation_sessions"

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
    mood_entry_id = Column(
        ForeignKey("mood_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    completed = Column(
        Boolean,
        nullable=False,
        default=True,
    )
    duration_seconds = Column(
        Integer,
        nullable=False,
        default=0,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    # relationships
    mood_entry = relationship("MoodEntry", backref="meditation_sessions")
