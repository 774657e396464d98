# summarizer/workflow/ingestion.py
import logging
from typing import List, Optional

from summarizer.config import CHUNK_OVERLAP, CHUNK_SIZE
from summarizer.errors import EmptyDocumentError
from summarizer.memory.chunker import chunk_text
from summarizer.memory.loader import load_pdf_text, validate_pdf_upload

logger = logging.getLogger(__name__)


def ingest_document(
    content: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    chunk_size: int = CHUNK_SIZE,
    chunk_overlap: int = CHUNK_OVERLAP,
) -> List[str]:
    """
    Turn an uploaded PDF into ordered, overlapping text chunks.

    Depends on nothing but its input; the session store is not involved.

    Raises:
        NoFileError: empty payload
        UnsupportedFormatError: not a readable PDF
        FileTooLargeError: payload over the size limit
        EmptyDocumentError: no extractable text
    """
    validate_pdf_upload(content, content_type)

    text = load_pdf_text(content)

    chunks = chunk_text(text, size=chunk_size, overlap=chunk_overlap)

    if not chunks:
        raise EmptyDocumentError()

    logger.info(
        "Document ingested",
        extra={
            "upload_filename": filename,
            "size_bytes": len(content),
            "characters": len(text),
            "chunks": len(chunks),
        },
    )

    return chunks
