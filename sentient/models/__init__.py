"""SQLAlchemy models for the MVC architecture."""

from .base import Base
from .content_chunk import ContentChunk  # noqa: F401
from .meditation_session import MeditationSession  # noqa: F401
from .mood_entry import MoodEntry  # noqa: F401

__all__ = [
    "Base",
    "ContentChunk",
    "MeditationSession",
    "MoodEntry",
]
