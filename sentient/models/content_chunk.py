"""SQLAlchemy model for retrieval content used to inspire scripts."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID

from sentient.models.base import Base


class ContentChunk(Base):
    __tablename__ = "content_chunks"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    text = Column(
        Text,
        nullable=False,
    )
    checked_in_mood = Column(
        String(64),
        nullable=True,
        index=True,
    )
    destination_mood = Column(
        String(64),
        nullable=True,
        index=True,
    )
    # Float array produced by the embedding model; NULL until backfilled.
    embedding = Column(
        JSONB(none_as_null=True),
        nullable=True,
    )
