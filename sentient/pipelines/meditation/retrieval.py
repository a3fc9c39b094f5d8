"""Optional retrieval stage: inspiration lines for the generation prompt.

Chunks tagged with the same mood pair are ranked by cosine similarity
against an embedding of the journey query. Every failure degrades to an
empty list; generation never depends on this stage.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from sqlalchemy import or_, select

from sentient.config.settings import settings
from sentient.models.content_chunk import ContentChunk
from sentient.services.llm_client import get_llm_client

logger = logging.getLogger("sentient.services.meditation_pipeline")


def journey_query(start: str, destination: str, note: str | None) -> str:
    query = f"A guided meditation moving from feeling {start} to feeling {destination}."
    if note and note.strip():
        query += f" Context: {note.strip()}"
    return query


def rank_chunks(
    query_vector: Sequence[float],
    chunks: Sequence[tuple[str, Sequence[float]]],
    *,
    limit: int,
    min_similarity: float,
) -> list[str]:
    """Return chunk texts ordered by cosine similarity to ``query_vector``."""

    if not chunks:
        return []
    query = np.asarray(query_vector, dtype=np.float32)
    query_norm = np.linalg.norm(query)
    if query_norm == 0:
        return []

    texts: list[str] = []
    rows: list[np.ndarray] = []
    for text, vector in chunks:
        candidate = np.asarray(vector, dtype=np.float32)
        if candidate.shape != query.shape:
            continue
        texts.append(text)
        rows.append(candidate)
    if not rows:
        return []

    matrix = np.vstack(rows)
    norms = np.linalg.norm(matrix, axis=1)
    norms[norms == 0] = np.inf
    scores = matrix @ query / (norms * query_norm)
    order = np.argsort(-scores, kind="stable")
    return [texts[i] for i in order if scores[i] >= min_similarity][:limit]


async def _load_chunks(start: str, destination: str) -> list[tuple[str, list[float]]]:
    from sentient.database import session_scope

    async with session_scope() as session:
        result = await session.execute(
            select(ContentChunk.text, ContentChunk.embedding).where(
                ContentChunk.embedding.is_not(None),
                or_(ContentChunk.checked_in_mood.is_(None), ContentChunk.checked_in_mood == start),
                or_(
                    ContentChunk.destination_mood.is_(None),
                    ContentChunk.destination_mood == destination,
                ),
            )
        )
        return [(row.text, row.embedding) for row in result.all() if isinstance(row.embedding, list)]


async def retrieve_inspiration(start: str, destination: str, note: str | None = None) -> list[str]:
    """Best-effort lookup of supporting lines for the prompt."""

    if not settings.retrieval.enabled:
        return []

    try:
        query_vector = await get_llm_client().embed(journey_query(start, destination, note))
        chunks = await _load_chunks(start.lower(), destination.lower())
    except Exception as exc:
        logger.warning("Retrieval skipped for %s -> %s: %s", start, destination, exc)
        return []

    lines = rank_chunks(
        query_vector,
        chunks,
        limit=settings.retrieval.match_count,
        min_similarity=settings.retrieval.min_similarity,
    )
    logger.info("Retrieved %s inspiration lines for %s -> %s", len(lines), start, destination)
    return lines


__all__ = ["journey_query", "rank_chunks", "retrieve_inspiration"]
