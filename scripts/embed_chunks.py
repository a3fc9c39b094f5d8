"""Backfill Titan embeddings for content chunks that do not have one yet.

Usage: python scripts/embed_chunks.py
"""

import asyncio
import logging
import os
import sys

sys.path.append(os.getcwd())

from sqlalchemy import select  # noqa: E402

from sentient.database import dispose_engine, session_scope  # noqa: E402
from sentient.models.content_chunk import ContentChunk  # noqa: E402
from sentient.services.llm_client import LlmInvocationError, get_llm_client  # noqa: E402

BATCH_SIZE = 50
PAUSE_SECONDS = 3

logger = logging.getLogger("embed_chunks")


async def embed_batch(skip_ids: set) -> int:
    """Embed up to ``BATCH_SIZE`` rows; returns how many rows were attempted."""

    client = get_llm_client()
    async with session_scope() as session:
        query = select(ContentChunk).where(ContentChunk.embedding.is_(None))
        if skip_ids:
            query = query.where(ContentChunk.id.not_in(skip_ids))
        rows = (await session.execute(query.limit(BATCH_SIZE))).scalars().all()
        if not rows:
            return 0

        logger.info("Found %s rows to embed", len(rows))
        for row in rows:
            try:
                row.embedding = await client.embed(row.text)
            except LlmInvocationError as exc:
                logger.error("Embedding failed for row %s: %s", row.id, exc)
                skip_ids.add(row.id)
                continue
            logger.info("Embedded row %s", row.id)
        await session.commit()
        return len(rows)


async def main() -> None:
    skip_ids: set = set()
    try:
        while await embed_batch(skip_ids):
            logger.info("Waiting %ss before next batch...", PAUSE_SECONDS)
            await asyncio.sleep(PAUSE_SECONDS)
    finally:
        await dispose_engine()

    if skip_ids:
        logger.warning("Done; %s rows could not be embedded", len(skip_ids))
    else:
        logger.info("Done embedding all rows")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    asyncio.run(main())
