"""Async PostgreSQL engine, sessions and table bootstrap."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from sentient.config.settings import settings

# Registers mood_entries, meditation_sessions and content_chunks on the metadata
from sentient.models import Base

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Statements run after create_all; each one must be safe to repeat.
_SUPPORTING_INDEXES = (
    # Profile stats read the newest check-ins per user.
    "CREATE INDEX IF NOT EXISTS ix_mood_entries_user_recent "
    "ON mood_entries (user_id, created_at DESC)",
    # The embedding backfill only scans rows still waiting for a vector.
    "CREATE INDEX IF NOT EXISTS ix_content_chunks_unembedded "
    "ON content_chunks (id) WHERE embedding IS NULL",
    "CREATE INDEX IF NOT EXISTS ix_content_chunks_journey "
    "ON content_chunks (checked_in_mood, destination_mood)",
)


def resolve_schema(raw: Optional[str]) -> Optional[str]:
    """Return the configured schema when it is a plain identifier, else None."""

    schema = (raw or "").strip()
    if not schema:
        return None
    if not _IDENTIFIER.fullmatch(schema):
        logger.warning("Ignoring invalid schema name %r; using the default search_path.", raw)
        return None
    return schema


SCHEMA = resolve_schema(settings.database.schema_name)

if SCHEMA:
    Base.metadata.schema = SCHEMA
    for table in Base.metadata.tables.values():
        table.schema = table.schema or SCHEMA


def _build_engine() -> AsyncEngine:
    options: dict[str, Any] = {"echo": settings.debug, "pool_pre_ping": True}
    if settings.database.serverless or settings.debug:
        # No pooling for serverless databases or in debug.
        options["poolclass"] = NullPool
    return create_async_engine(settings.database.url, **options)


engine: AsyncEngine = _build_engine()

SessionFactory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def _use_schema(target: AsyncSession | AsyncConnection) -> None:
    if SCHEMA:
        await target.execute(text(f'SET search_path TO "{SCHEMA}", public'))


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield a session bound to the configured schema; used by scripts and tasks."""

    async with SessionFactory() as session:
        await _use_schema(session)
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""

    async with session_scope() as session:
        yield session


async def init_models() -> None:
    """Create the tables and supporting indexes when missing."""

    async with engine.begin() as conn:
        if SCHEMA:
            await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA}"'))
        await _use_schema(conn)
        await conn.run_sync(Base.metadata.create_all)
        for statement in _SUPPORTING_INDEXES:
            await conn.execute(text(statement))

    logger.info(
        "Database ready schema=%s tables=%s",
        SCHEMA or "default",
        ", ".join(sorted(Base.metadata.tables)),
    )


async def dispose_engine() -> None:
    await engine.dispose()
