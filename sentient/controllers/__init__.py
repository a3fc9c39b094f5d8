"""FastAPI routers acting as controllers in the MVC architecture."""

from . import entries, meditation, moods, profile, sessions

__all__ = ["entries", "meditation", "moods", "profile", "sessions"]
