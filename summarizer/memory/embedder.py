# summarizer/memory/embedder.py

"""
OpenAI embedding wrapper with batching.

Guarantees:
• Always returns a float32 numpy array of shape (len(texts), dimension)
• Rows are L2 normalized, so inner product equals cosine similarity
• Provider failures surface as UpstreamError
"""

import logging
import numpy as np
from typing import List, Optional

from openai import OpenAI

from summarizer.config import (
    EMBEDDING_MODEL,
    LLM_MAX_RETRIES,
    LLM_TIMEOUT_SECONDS,
)
from summarizer.errors import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_EMBED_BATCH_SIZE = 100

_MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class Embedder:

    def __init__(self, model: str = EMBEDDING_MODEL, api_key: Optional[str] = None):

        if model not in _MODEL_DIMENSIONS:
            raise ValueError(f"Unsupported embedding model: {model}")

        self._model = model
        self._dimension = _MODEL_DIMENSIONS[model]
        self._api_key = api_key

        # Built on first use so importing the app does not require a key
        self._client: Optional[OpenAI] = None

    def _ensure_client(self) -> OpenAI:

        if self._client is None:

            try:

                self._client = OpenAI(
                    api_key=self._api_key,
                    max_retries=LLM_MAX_RETRIES,
                    timeout=LLM_TIMEOUT_SECONDS,
                )

            except Exception as e:

                logger.critical(
                    "Embedding client initialization failed",
                    extra={"error": str(e)}
                )

                raise UpstreamError(
                    detail=f"Failed to initialize embedding client: {e}"
                ) from e

            logger.info(
                "Embedding client initialized",
                extra={
                    "model": self._model,
                    "dimension": self._dimension,
                }
            )

        return self._client

    def embed(
        self,
        texts: List[str],
        batch_size: int = DEFAULT_EMBED_BATCH_SIZE
    ) -> np.ndarray:

        if not texts:

            return np.empty(
                (0, self._dimension),
                dtype="float32"
            )

        client = self._ensure_client()

        total = len(texts)

        try:

            all_embeddings = []

            for start in range(0, total, batch_size):

                batch = texts[start:start + batch_size]

                response = client.embeddings.create(
                    model=self._model,
                    input=batch,
                )

                all_embeddings.append(
                    np.array(
                        [item.embedding for item in response.data],
                        dtype="float32"
                    )
                )

            embeddings = np.vstack(all_embeddings)

        except Exception as e:

            logger.error(
                "Embedding generation failed",
                extra={"error": str(e), "chunks": total}
            )

            raise UpstreamError(
                detail=f"Embedding generation failed: {e}"
            ) from e

        norms = np.linalg.norm(embeddings, axis=1, keepdims=True)

        embeddings = embeddings / np.clip(norms, 1e-10, None)

        logger.info(
            "Embedding completed",
            extra={
                "chunks": total,
                "dimension": self._dimension,
            }
        )

        return embeddings
