from langchain_text_splitters import RecursiveCharacterTextSplitter

import dm_assistant.config.config as configs

# Paragraphs first, then lines, then sentences, then words.
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def build_splitter(chunk_size: int, overlap: int) -> RecursiveCharacterTextSplitter:
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=overlap,
        length_function=len,
        separators=SEPARATORS,
        keep_separator="end",
    )


def chunk_text(
    text: str,
    chunk_size: int = configs.CHUNK_SIZE,
    overlap: int = configs.CHUNK_OVERLAP,
    min_chars: int = configs.MIN_CHUNK_CHARS,
) -> list[str]:
    """
    Split text into chunks of at most ``chunk_size`` characters, each new
    chunk repeating up to ``overlap`` characters from the end of the previous
    one. Chunks of ``min_chars`` characters or fewer are dropped.
    """
    normalized = (text or "").replace("\r\n", "\n").replace("\r", "\n").strip()
    if not normalized:
        return []

    chunks = build_splitter(chunk_size, overlap).split_text(normalized)
    return [c for c in chunks if len(c) > min_chars]
