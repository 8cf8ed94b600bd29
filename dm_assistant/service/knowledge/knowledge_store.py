"""
Tenant knowledge chunks.

Retrieval is full-context stuffing: every chunk a coach owns is returned in
creation order and concatenated. There is no ranking or similarity search, so
this only suits small corpora.
"""
import logging

from sqlalchemy import select, update

import dm_assistant.config.config as configs
from dm_assistant.client.db.psql import session_scope
from dm_assistant.db.models.course_file import CourseFile
from dm_assistant.db.models.knowledge_chunk import KnowledgeChunk

logger = logging.getLogger(__name__)

CHUNK_SEPARATOR = "\n\n"


def load_chunks(coach_id: str) -> list[str]:
    with session_scope() as db:
        rows = db.execute(
            select(KnowledgeChunk.content_chunk)
            .where(KnowledgeChunk.coach_id == coach_id)
            .order_by(KnowledgeChunk.created_at, KnowledgeChunk.chunk_index)
        ).scalars().all()
    return list(rows)


def load_corpus(coach_id: str) -> str:
    chunks = load_chunks(coach_id)
    corpus = CHUNK_SEPARATOR.join(chunks)
    logger.info("loaded %s knowledge chunks coach_id=%s chars=%s", len(chunks), coach_id, len(corpus))
    return corpus


def insert_chunks(
    coach_id: str,
    chunks: list[str],
    file_id: str | None = None,
    batch_size: int = configs.INSERT_BATCH_SIZE,
) -> int:
    """
    Insert in batches, one transaction per batch. A failing batch raises;
    batches already written stay in place.
    """
    inserted = 0
    for start in range(0, len(chunks), batch_size):
        batch = chunks[start:start + batch_size]
        with session_scope() as db:
            db.add_all(
                KnowledgeChunk(
                    coach_id=coach_id,
                    file_id=file_id,
                    chunk_index=start + offset,
                    content_chunk=chunk,
                    embedding_vector=None,
                )
                for offset, chunk in enumerate(batch)
            )
        inserted += len(batch)
        logger.info("inserted batch %s total=%s coach_id=%s", start // batch_size + 1, inserted, coach_id)
    return inserted


def mark_file_processed(file_id: str) -> None:
    with session_scope() as db:
        db.execute(update(CourseFile).where(CourseFile.id == file_id).values(processed=True))
