"""
Text extraction strategies for uploaded training files.

Each file extension maps to an ordered chain of strategies. A strategy returns
text, or None when it cannot produce enough readable content; the first one
that returns text wins. When every strategy declines or fails, extraction
fails loudly rather than storing placeholder content.
"""
import asyncio
import io
import logging
import mimetypes
import re
import zipfile
from collections.abc import Awaitable, Callable
from pathlib import PurePosixPath

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

import dm_assistant.config.config as configs
from dm_assistant.client.llm.chatgpt import transcribe_document

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".txt", ".md", ".markdown", ".csv")

NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")

Strategy = Callable[[bytes, str], Awaitable[str | None]]


class ExtractionError(Exception):
    pass


def readable_ratio(data: bytes) -> float:
    if not data:
        return 0.0
    printable = sum(1 for b in data if 32 <= b <= 126 or b in (9, 10, 13))
    return printable / len(data)


def filter_printable(data: bytes) -> str:
    text = NON_PRINTABLE_RE.sub(" ", data.decode("latin-1"))
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n+", "\n\n", text)
    return text.strip()


async def extract_plain_text(data: bytes, filename: str) -> str | None:
    text = data.decode("utf-8", errors="replace").strip()
    return text or None


async def extract_docx(data: bytes, filename: str) -> str | None:
    """Paragraph text of a .docx document, tables included."""
    try:
        document = Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError):
        return None

    paragraphs = [p.text.strip() for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            paragraphs.append(" | ".join(cell.text.strip() for cell in row.cells))
    text = "\n\n".join(p for p in paragraphs if p.strip(" |"))
    return text if len(text) >= configs.MIN_EXTRACTED_CHARS else None


async def extract_printable_bytes(data: bytes, filename: str) -> str | None:
    ratio = readable_ratio(data)
    text = filter_printable(data)
    if ratio < configs.MIN_READABLE_RATIO or len(text) < configs.MIN_EXTRACTED_CHARS:
        logger.info(
            "printable filter declined filename=%s ratio=%.2f chars=%s", filename, ratio, len(text)
        )
        return None
    return text


async def extract_with_ai(data: bytes, filename: str) -> str | None:
    mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    text = await asyncio.to_thread(transcribe_document, data, filename, mime_type)
    text = (text or "").strip()
    return text if len(text) >= configs.MIN_CHUNK_CHARS else None


def strategies_for(filename: str) -> list[Strategy]:
    suffix = PurePosixPath(filename.lower()).suffix
    if suffix in TEXT_EXTENSIONS:
        return [extract_plain_text]
    if suffix == ".pdf":
        # Scanning PDF internals for text objects is unreliable across producers.
        return [extract_with_ai]
    if suffix == ".docx":
        return [extract_docx, extract_printable_bytes, extract_with_ai]
    return [extract_printable_bytes, extract_with_ai]


async def extract_text(data: bytes, filename: str) -> str:
    for strategy in strategies_for(filename):
        try:
            text = await strategy(data, filename)
        except Exception:
            logger.warning("extraction strategy %s failed filename=%s", strategy.__name__, filename, exc_info=True)
            continue
        if text:
            logger.info("extracted %s chars filename=%s strategy=%s", len(text), filename, strategy.__name__)
            return text
    raise ExtractionError(f"Could not extract readable text from {filename}")
