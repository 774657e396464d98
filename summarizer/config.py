"""
Configuration for the Document Summarizer service.

This file centralizes all tunable parameters for the summarize/chat pipeline.
Deployment values are read from the environment; everything else is a
plain constant.
"""

import os


# ========== ENVIRONMENT ==========

PORT = int(os.getenv("PORT", "8000"))

# Comma separated list, "*" allows any origin
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

# "development" exposes raw error messages, "production" hides them
APP_ENV = os.getenv("APP_ENV", "development").lower()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")


# ========== DOCUMENT PROCESSING ==========

# Character based chunking
CHUNK_SIZE = 2000
CHUNK_OVERLAP = 200

# File upload limits
MAX_FILE_SIZE_MB = 10
ALLOWED_CONTENT_TYPES = ["application/pdf"]
PDF_MAGIC = b"%PDF-"

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "storage/uploads")


# ========== EMBEDDING CONFIGURATION ==========

EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")


# ========== RETRIEVAL CONFIGURATION ==========

TOP_K = 3

# Prior question/answer pairs forwarded to the model (2 turns = 4 messages)
MAX_HISTORY_TURNS = 2

# Rephrase follow-up questions into standalone ones before retrieval
CONDENSE_FOLLOW_UP_QUESTIONS = True


# ========== LLM CONFIGURATION ==========

LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")

LLM_TEMPERATURE = 0.7
LLM_MAX_TOKENS = 800

# Bounded retry with backoff, applied inside the OpenAI SDK
LLM_MAX_RETRIES = 2
LLM_TIMEOUT_SECONDS = 60.0


# ========== SESSION LIFECYCLE ==========

# Idle sessions older than this are evicted together with their upload
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))

SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "3600"))


# ========== RATE LIMITING ==========

RATE_LIMIT = os.getenv("RATE_LIMIT", "100 per 15 minutes")


# ========== DESIGN TRADE-OFFS (DOCUMENTED) ==========

"""
TRADE-OFF DECISIONS:

1. CHUNK_SIZE = 2000 characters, CHUNK_OVERLAP = 200:
   - Summaries draw on only TOP_K chunks, so chunks are large
   - Overlap keeps sentences cut at a boundary retrievable from either side

2. TOP_K = 3:
   - Keeps prompts small enough for fast, cheap completions

3. In-memory FAISS index per session (no persistent DB):
   - Trade-off: Fast retrieval, zero infrastructure
   - Limitation: Sessions are lost on restart, single instance only

4. TTL-only eviction:
   - Recency extends a session's life but never reorders eviction
   - No capacity bound; the working set is bounded by the TTL
"""


def validate_settings():
    """
    Called at startup. A missing API key is fatal.
    """

    if not os.getenv("OPENAI_API_KEY"):
        raise RuntimeError(
            "OPENAI_API_KEY environment variable not set. "
            "Please set it before running the application."
        )

    if CHUNK_OVERLAP >= CHUNK_SIZE:
        raise RuntimeError("CHUNK_OVERLAP must be smaller than CHUNK_SIZE")

    if APP_ENV not in ("development", "production"):
        raise RuntimeError(f"Unsupported APP_ENV: {APP_ENV}")
