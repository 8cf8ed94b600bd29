import asyncio
import logging
from dataclasses import dataclass

from dm_assistant.client.storage.files import fetch_file
from dm_assistant.model.ingest.ingest_request import IngestRequest
from dm_assistant.model.ingest.ingest_response import IngestResponse
from dm_assistant.service.ingest.chunker import chunk_text
from dm_assistant.service.ingest.extractors import extract_text
from dm_assistant.service.knowledge.knowledge_store import insert_chunks, mark_file_processed

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    pass


@dataclass(frozen=True)
class IngestResult:
    chunks_created: int
    total_chars: int


async def ingest(file_url: str, filename: str, coach_id: str, file_id: str | None = None) -> IngestResult:
    """
    Fetch, extract, chunk and store one uploaded file. Re-running it for the
    same file stores the chunks again.
    """
    logger.info("processing file=%s coach_id=%s", filename, coach_id)
    data = await fetch_file(file_url)
    text = await extract_text(data, filename)

    chunks = chunk_text(text)
    logger.info("created %s chunks from %s chars file=%s", len(chunks), len(text), filename)
    if not chunks:
        raise IngestionError(f"No meaningful content could be extracted from {filename}")

    inserted = await asyncio.to_thread(insert_chunks, coach_id, chunks, file_id)
    logger.info("stored %s knowledge chunks coach_id=%s", inserted, coach_id)

    if file_id:
        try:
            await asyncio.to_thread(mark_file_processed, file_id)
        except Exception:
            logger.exception("failed to mark file processed file_id=%s", file_id)

    return IngestResult(chunks_created=inserted, total_chars=len(text))


async def ingest_service(req: IngestRequest) -> IngestResponse:
    if not req.file_url or not req.coach_id or not req.filename:
        raise IngestionError("Missing required fields: file_url, coach_id, filename")

    result = await ingest(req.file_url, req.filename, req.coach_id, req.file_id)
    return IngestResponse(
        chunks_created=result.chunks_created,
        total_chars=result.total_chars,
        message=f"Successfully processed {req.filename}",
    )
