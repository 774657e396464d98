# tests/conftest.py
import os
import re
import sys
import tempfile
import zlib

import numpy as np
import pytest

# Settings are read at import time
os.environ.setdefault("OPENAI_API_KEY", "sk-test-key")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "summarizer-test-logs"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "summarizer-test-uploads"))

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient

from summarizer import main
from summarizer.api import routes
from summarizer.memory.sessions import SessionStore
from summarizer.memory.store import VectorStore
from summarizer.observability.metrics import metrics_tracker
from summarizer.workflow.document_qa import DocumentQAService


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeEmbedder:
    """
    Deterministic bag-of-words embedder.

    Texts sharing words get similar vectors, so retrieval ranking behaves
    like the real thing without any network calls.
    """

    DIMENSION = 64

    def __init__(self):
        self.calls = []
        self.fail = False

    def embed(self, texts):
        self.calls.append(list(texts))

        if self.fail:
            raise RuntimeError("embedding provider unavailable")

        vectors = np.zeros((len(texts), self.DIMENSION), dtype="float32")

        for row, text in enumerate(texts):
            for word in re.findall(r"\w+", text.lower()):
                vectors[row, zlib.crc32(word.encode()) % self.DIMENSION] += 1.0

        norms = np.linalg.norm(vectors, axis=1, keepdims=True)

        return vectors / np.clip(norms, 1e-10, None)


class FakeLLMClient:
    """
    Echoes every non-system message it receives, so tests can see exactly
    what context reached the model.
    """

    def __init__(self):
        self.calls = []
        self.fail = False
        self.reply = None

    def complete(self, messages):
        self.calls.append(messages)

        if self.fail:
            raise RuntimeError("completion provider timed out")

        if self.reply is not None:
            return self.reply

        return "ECHO: " + "\n".join(
            message["content"] for message in messages if message["role"] != "system"
        )


def make_pdf(*pages: str) -> bytes:
    """
    Build a small but valid PDF with one Helvetica text line per page.

    An empty string produces a page without any text.
    """
    page_ids = [4 + 2 * i for i in range(len(pages))]

    objects = [None] * (3 + 2 * len(pages))

    kids = b" ".join(b"%d 0 R" % page_id for page_id in page_ids)

    objects[0] = b"<< /Type /Catalog /Pages 2 0 R >>"
    objects[1] = b"<< /Type /Pages /Kids [" + kids + b"] /Count %d >>" % len(pages)
    objects[2] = b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>"

    for page_id, text in zip(page_ids, pages):
        content_id = page_id + 1

        objects[page_id - 1] = (
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            b"/Contents %d 0 R /Resources << /Font << /F1 3 0 R >> >> >>" % content_id
        )

        if text:
            escaped = (
                text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
            ).encode("latin-1")
            stream = b"BT /F1 12 Tf 72 720 Td (" + escaped + b") Tj ET"
        else:
            stream = b""

        objects[content_id - 1] = (
            b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        )

    pdf = b"%PDF-1.4\n"
    offsets = []

    for number, body in enumerate(objects, 1):
        offsets.append(len(pdf))
        pdf += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_position = len(pdf)

    pdf += b"xref\n0 %d\n" % (len(objects) + 1)
    pdf += b"0000000000 65535 f \n"
    for offset in offsets:
        pdf += b"%010d 00000 n \n" % offset

    pdf += (
        b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n"
        % (len(objects) + 1, xref_position)
    )

    return pdf


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def sample_pdf_content():
    """One page reading 'Hello world'."""
    return make_pdf("Hello world")


@pytest.fixture
def blank_pdf_content():
    """A valid PDF without any extractable text."""
    return make_pdf("")


@pytest.fixture
def large_pdf_content():
    """A PDF header followed by more than 10MB of padding."""
    return b"%PDF-1.4\n" + b"x" * (11 * 1024 * 1024) + b"\n%%EOF"


@pytest.fixture
def non_pdf_content():
    return b"This is a plain text file, not a PDF."


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def qa_service(fake_embedder, fake_llm):
    return DocumentQAService(embedder=fake_embedder, llm_client=fake_llm)


@pytest.fixture
def make_vector_store(fake_embedder):
    """Build a VectorStore over the given chunks with the fake embedder."""

    def _make(*chunks):
        return VectorStore.from_embeddings(fake_embedder.embed(list(chunks)), list(chunks))

    return _make


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def session_store(fake_clock):
    return SessionStore(ttl_seconds=3600, clock=fake_clock)


@pytest.fixture(autouse=True)
def reset_app_state(monkeypatch, session_store, qa_service, upload_dir):
    """
    Point the app at fakes and a per-test upload directory.

    This ensures tests don't interfere with each other.
    """
    monkeypatch.setattr(routes, "session_store", session_store)
    monkeypatch.setattr(routes, "qa_service", qa_service)
    monkeypatch.setattr(routes, "UPLOAD_DIR", upload_dir)

    main.limiter.reset()
    metrics_tracker.reset()

    yield

    main.limiter.reset()


@pytest.fixture
def client():
    """
    FastAPI test client.

    Server errors come back as 500 responses instead of being re-raised.
    """
    return TestClient(main.app, raise_server_exceptions=False)


@pytest.fixture
def upload_sample_document(client, sample_pdf_content):
    """
    Upload a sample document and return its fileId.
    """
    def _upload(content=None, filename="test_document.pdf"):
        response = client.post(
            "/api/summarize",
            files={"file": (filename, content or sample_pdf_content, "application/pdf")}
        )
        assert response.status_code == 200, f"Upload failed: {response.json()}"
        return response.json()["fileId"]

    return _upload
