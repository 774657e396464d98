from fastapi import APIRouter, UploadFile, File, Request
from fastapi.concurrency import run_in_threadpool
from slowapi import Limiter
from slowapi.util import get_remote_address
import uuid
import logging
import time

from pathlib import Path
from typing import Optional, Tuple

from summarizer import config
from summarizer.errors import NoFileError
from summarizer.llm.client import LLMClient
from summarizer.memory.embedder import Embedder
from summarizer.memory.loader import validate_pdf_upload
from summarizer.memory.sessions import SessionStore, delete_source_file
from summarizer.models import (
    ChatRequest,
    ChatResponse,
    HealthResponse,
    SummarizeResponse,
)
from summarizer.observability.metrics import metrics_tracker
from summarizer.observability.posthog_client import posthog_client
from summarizer.workflow.document_qa import DocumentQAService
from summarizer.workflow.ingestion import ingest_document


# ============================================================
# LOGGER
# ============================================================

logger = logging.getLogger(__name__)

router = APIRouter()

# One request window per client address, shared by every route
limiter = Limiter(key_func=get_remote_address)

rate_limit = limiter.shared_limit(config.RATE_LIMIT, scope="api")


# ============================================================
# GLOBAL SINGLETONS
# ============================================================

session_store = SessionStore(ttl_seconds=config.SESSION_TTL_SECONDS)

qa_service = DocumentQAService(
    embedder=Embedder(),
    llm_client=LLMClient(),
)

UPLOAD_DIR = Path(config.UPLOAD_DIR)

MAX_UPLOAD_BYTES = config.MAX_FILE_SIZE_MB * 1024 * 1024


# ============================================================
# HELPERS
# ============================================================

def generate_file_id() -> str:
    return f"file-{uuid.uuid4().hex}"


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def process_upload(file_id: str, content: bytes, filename: Optional[str],
                   content_type: Optional[str]) -> Tuple[SummarizeResponse, int]:
    """
    Store, ingest, index and summarize an upload, then publish its session.

    The session only becomes visible once everything succeeded; on failure
    the stored file is removed and no session exists.
    """

    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

    file_path = UPLOAD_DIR / f"{file_id}.pdf"

    with file_path.open("wb") as buffer:
        buffer.write(content)

    try:

        chunks = ingest_document(content, filename=filename, content_type=content_type)

        vector_store = qa_service.build_index(chunks)

        summary = qa_service.summarize(vector_store)

    except Exception:

        delete_source_file(file_path)

        raise

    session_store.put(file_id, vector_store, file_path)

    metrics_tracker.record_session_created()

    return SummarizeResponse(summary=summary, fileId=file_id), len(chunks)


# ============================================================
# HEALTH
# ============================================================

@router.get("/health", response_model=HealthResponse)
@rate_limit
def health_check(request: Request):

    return HealthResponse(
        status="healthy",
        active_sessions=len(session_store),
        ttl_seconds=session_store.ttl_seconds,
    )


# ============================================================
# SUMMARIZE (UPLOAD)
# ============================================================

@router.post("/api/summarize", response_model=SummarizeResponse)
@rate_limit
async def summarize_document(
    request: Request,
    file: UploadFile = File(None),
):

    if file is None:
        raise NoFileError()

    # one byte past the cap is enough to reject an oversized upload
    content = await file.read(MAX_UPLOAD_BYTES + 1)

    # reject early, before anything touches the disk
    validate_pdf_upload(content, file.content_type)

    file_id = generate_file_id()

    start_time = time.time()

    response, chunks = await run_in_threadpool(
        process_upload, file_id, content, file.filename, file.content_type
    )

    latency = time.time() - start_time

    logger.info(
        "Document summarized",
        extra={
            "request_id": _request_id(request),
            "file_id": file_id,
            "chunks": chunks,
            "latency_seconds": round(latency, 3),
        },
    )

    posthog_client.track_document_summarized(
        distinct_id=_request_id(request),
        file_id=file_id,
        chunks=chunks,
        size_bytes=len(content),
        latency=latency,
    )

    return response


# ============================================================
# CHAT
# ============================================================

@router.post("/api/chat", response_model=ChatResponse)
@rate_limit
def chat_with_document(payload: ChatRequest, request: Request):

    start_time = time.time()

    session = session_store.touch(payload.file_id)

    answer = qa_service.answer(
        question=payload.message,
        vector_store=session.vector_store,
        chat_history=payload.chat_history,
    )

    latency = time.time() - start_time

    posthog_client.track_chat(
        distinct_id=_request_id(request),
        file_id=payload.file_id,
        message=payload.message,
        history_turns=len(payload.chat_history),
        sources=len(answer.sources),
        latency=latency,
    )

    return ChatResponse(
        response=answer.text,
        timestamp=int(time.time() * 1000),
        sources=answer.sources,
    )


# ============================================================
# METRICS ENDPOINT
# ============================================================

@router.get("/metrics")
@rate_limit
def get_metrics(request: Request):

    metrics = metrics_tracker.get_metrics()

    metrics["active_sessions"] = len(session_store)

    return metrics
