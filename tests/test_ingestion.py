# tests/test_ingestion.py
import pytest

from summarizer.errors import (
    EmptyDocumentError,
    FileTooLargeError,
    NoFileError,
    UnsupportedFormatError,
)
from summarizer.memory.chunker import chunk_text
from summarizer.memory.loader import load_pdf_text, validate_pdf_upload
from summarizer.workflow.ingestion import ingest_document


class TestChunker:
    """Character based chunking with overlap."""

    def test_short_text_is_single_chunk(self):
        assert chunk_text("Hello world") == ["Hello world"]

    def test_empty_text_returns_no_chunks(self):
        assert chunk_text("") == []
        assert chunk_text("   \n\n  ") == []

    def test_chunks_respect_size_limit(self):
        text = " ".join(f"word{i}" for i in range(2000))

        chunks = chunk_text(text, size=500, overlap=50)

        assert len(chunks) > 1
        assert all(0 < len(chunk) <= 500 for chunk in chunks)

    def test_consecutive_chunks_overlap(self):
        text = " ".join(f"token{i:04d}" for i in range(600))

        chunks = chunk_text(text, size=400, overlap=100)

        for previous, current in zip(chunks, chunks[1:]):
            # the start of each chunk repeats the tail of the previous one
            assert current[:20] in previous

    def test_chunks_cover_whole_text_in_order(self):
        words = [f"w{i}" for i in range(1500)]

        chunks = chunk_text(" ".join(words), size=300, overlap=30)

        assert chunks[0].startswith("w0 ")
        assert chunks[-1].endswith("w1499")

    def test_prefers_paragraph_breaks(self):
        first = "a" * 150
        second = "b" * 150
        text = f"{first}\n\n{second}"

        chunks = chunk_text(text, size=200, overlap=10)

        assert chunks[0] == first

    def test_unbroken_text_is_hard_cut(self):
        chunks = chunk_text("x" * 1000, size=300, overlap=50)

        assert all(len(chunk) <= 300 for chunk in chunks)
        assert len(chunks) == 4

    def test_default_size_is_2000_characters(self):
        text = ("lorem ipsum dolor sit amet " * 400).strip()

        chunks = chunk_text(text)

        assert all(len(chunk) <= 2000 for chunk in chunks)
        assert max(len(chunk) for chunk in chunks) > 1800

    @pytest.mark.parametrize("size,overlap", [(0, 0), (100, -1), (100, 100)])
    def test_invalid_parameters_rejected(self, size, overlap):
        with pytest.raises(ValueError):
            chunk_text("some text", size=size, overlap=overlap)


class TestUploadValidation:

    def test_valid_pdf_passes(self, sample_pdf_content):
        validate_pdf_upload(sample_pdf_content, "application/pdf")

    def test_empty_payload_rejected(self):
        with pytest.raises(NoFileError):
            validate_pdf_upload(b"", "application/pdf")

    def test_wrong_content_type_rejected(self, sample_pdf_content):
        with pytest.raises(UnsupportedFormatError):
            validate_pdf_upload(sample_pdf_content, "text/plain")

    def test_non_pdf_bytes_rejected(self, non_pdf_content):
        """Content type alone is not trusted."""
        with pytest.raises(UnsupportedFormatError):
            validate_pdf_upload(non_pdf_content, "application/pdf")

    def test_oversized_file_rejected(self, large_pdf_content):
        with pytest.raises(FileTooLargeError) as excinfo:
            validate_pdf_upload(large_pdf_content, "application/pdf")

        assert "too large" in str(excinfo.value).lower()


class TestPdfLoading:

    def test_extracts_text(self, sample_pdf_content):
        assert "Hello world" in load_pdf_text(sample_pdf_content)

    def test_extracts_all_pages_in_order(self, pdf_factory):
        text = load_pdf_text(pdf_factory("First page", "Second page"))

        assert text.index("First page") < text.index("Second page")

    def test_blank_pdf_has_no_text(self, blank_pdf_content):
        assert load_pdf_text(blank_pdf_content) == ""

    def test_corrupted_pdf_is_unsupported(self):
        with pytest.raises(UnsupportedFormatError):
            load_pdf_text(b"%PDF-1.4\nthis is not really a pdf")


class TestIngestDocument:

    def test_returns_chunks(self, sample_pdf_content):
        chunks = ingest_document(sample_pdf_content, "hello.pdf", "application/pdf")

        assert chunks == ["Hello world"]

    def test_long_document_is_split(self, pdf_factory):
        pages = [" ".join(f"page{p}word{i}" for i in range(300)) for p in range(3)]

        chunks = ingest_document(pdf_factory(*pages), "long.pdf", "application/pdf")

        assert len(chunks) > 1
        assert all(len(chunk) <= 2000 for chunk in chunks)

    def test_blank_document_is_empty(self, blank_pdf_content):
        with pytest.raises(EmptyDocumentError):
            ingest_document(blank_pdf_content, "blank.pdf", "application/pdf")

    def test_non_pdf_is_unsupported(self, non_pdf_content):
        with pytest.raises(UnsupportedFormatError):
            ingest_document(non_pdf_content, "notes.txt", "text/plain")

    def test_too_large(self, large_pdf_content):
        with pytest.raises(FileTooLargeError):
            ingest_document(large_pdf_content, "huge.pdf", "application/pdf")
