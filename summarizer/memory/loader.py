# summarizer/memory/loader.py

"""
PDF validation and text extraction.

Works on the raw upload bytes so ingestion stays a pure function of the
document; the stored copy on disk is only the session's source file.
"""

import io
import logging
import re

from pypdf import PdfReader

from summarizer.config import (
    ALLOWED_CONTENT_TYPES,
    MAX_FILE_SIZE_MB,
    PDF_MAGIC,
)
from summarizer.errors import (
    FileTooLargeError,
    NoFileError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)


def validate_pdf_upload(content: bytes, content_type: str = None):

    if not content:
        raise NoFileError()

    if content_type and content_type not in ALLOWED_CONTENT_TYPES:
        raise UnsupportedFormatError()

    if not content.lstrip().startswith(PDF_MAGIC):
        raise UnsupportedFormatError()

    size_mb = len(content) / (1024 * 1024)

    if size_mb > MAX_FILE_SIZE_MB:
        raise FileTooLargeError(
            f"File too large: {size_mb:.2f}MB (limit {MAX_FILE_SIZE_MB}MB)"
        )


def _clean_text(text: str) -> str:

    # re-join words hyphenated across lines
    text = re.sub(r"-\n(\w)", r"\1", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)

    return text.strip()


def load_pdf_text(content: bytes) -> str:

    try:
        reader = PdfReader(io.BytesIO(content))
        pages = list(reader.pages)
    except Exception as e:
        logger.warning("PDF could not be parsed", extra={"error": str(e)})
        raise UnsupportedFormatError("The file could not be read as a PDF") from e

    parts = []

    for page_number, page in enumerate(pages, 1):

        try:
            text = page.extract_text()
        except Exception as e:
            logger.warning(
                "Page text extraction failed",
                extra={"page": page_number, "error": str(e)},
            )
            continue

        if text and text.strip():
            parts.append(text)

    logger.info(
        "PDF text extracted",
        extra={"pages": len(pages), "pages_with_text": len(parts)},
    )

    return _clean_text("\n\n".join(parts))
