"""Utility helpers for the Sentient backend."""

from .security import (
    AuthenticationError,
    TokenPayload,
    create_access_token,
    decode_access_token,
)

__all__ = [
    "AuthenticationError",
    "TokenPayload",
    "create_access_token",
    "decode_access_token",
]
