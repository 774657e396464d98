# summarizer/memory/chunker.py

import logging
from typing import List

from summarizer.config import (
    CHUNK_SIZE,
    CHUNK_OVERLAP,
)

logger = logging.getLogger(__name__)

# Preferred break points, strongest first
_SEPARATORS = ("\n\n", "\n", " ")


def _find_break(text: str, start: int, end: int) -> int:
    """
    Return the position to cut the window text[start:end] at.

    Prefers a paragraph break, then a line break, then a space, as long as
    the cut keeps at least half the window. Falls back to a hard cut.
    """

    if end >= len(text):
        return len(text)

    min_end = start + (end - start) // 2

    for separator in _SEPARATORS:

        position = text.rfind(separator, min_end, end)

        if position != -1:
            return position + len(separator)

    return end


def chunk_text(
    text: str,
    size: int = CHUNK_SIZE,
    overlap: int = CHUNK_OVERLAP,
) -> List[str]:
    """
    Split text into chunks of at most ``size`` characters.

    Consecutive chunks share roughly ``overlap`` characters so a sentence cut
    at a boundary is still retrievable from either side. Chunks are returned
    in document order, stripped, and never empty.
    """

    if size <= 0:
        raise ValueError(f"Invalid chunk size: {size}")

    if overlap < 0:
        raise ValueError(f"Invalid chunk overlap: {overlap}")

    if overlap >= size:
        raise ValueError(
            f"Overlap must be smaller than chunk size "
            f"(overlap={overlap}, size={size})"
        )

    if not text or not text.strip():
        logger.warning("Chunking skipped: empty text")
        return []

    text = text.strip()

    chunks = []

    start = 0

    while start < len(text):

        end = _find_break(text, start, start + size)

        chunk = text[start:end].strip()

        if chunk:
            chunks.append(chunk)

        if end >= len(text):
            break

        # step back by the overlap, but always move forward
        start = max(end - overlap, start + 1)

    logger.info(
        "Chunking completed",
        extra={
            "total_characters": len(text),
            "chunk_size": size,
            "overlap": overlap,
            "chunks_created": len(chunks),
        },
    )

    return chunks
