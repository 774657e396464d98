import faiss
import numpy as np
import logging

from typing import List, Dict

from summarizer.config import TOP_K


logger = logging.getLogger(__name__)


class VectorStore:
    """
    In-memory FAISS index over the chunks of a single document.

    Built once at ingestion and read-only afterwards; re-ingesting a
    document builds a new store instead of mutating this one.
    """

    def __init__(self, dim: int):

        if dim <= 0:
            raise ValueError("Embedding dimension must be positive")

        self._dim = dim
        self._chunks: List[str] = []
        self._index = faiss.IndexFlatIP(dim)


    @classmethod
    def from_embeddings(cls, embeddings, chunks: List[str]) -> "VectorStore":
        """
        Build a store from one embedding row per chunk, in chunk order.
        """

        embeddings = np.asarray(embeddings, dtype="float32")

        if embeddings.ndim != 2:
            raise ValueError("Expected a 2D array of embeddings")

        store = cls(dim=embeddings.shape[1])

        store.add(embeddings, chunks)

        logger.info(
            "VectorStore built",
            extra={
                "dimension": store._dim,
                "chunks": len(store),
            },
        )

        return store


    def __len__(self) -> int:
        return len(self._chunks)


    @property
    def chunks(self) -> List[str]:
        return list(self._chunks)


    def _ensure_numpy(self, embeddings) -> np.ndarray:

        embeddings = np.asarray(embeddings, dtype="float32")

        if embeddings.ndim == 1:

            embeddings = embeddings.reshape(1, -1)

        return embeddings


    def _normalize(self, vectors: np.ndarray) -> np.ndarray:

        norms = np.linalg.norm(
            vectors,
            axis=1,
            keepdims=True,
        )

        return vectors / np.clip(norms, 1e-10, None)


    def add(self, embeddings, chunks: List[str]):

        embeddings = self._ensure_numpy(embeddings)

        if embeddings.shape[0] != len(chunks):
            raise ValueError(
                f"Got {embeddings.shape[0]} embeddings for {len(chunks)} chunks"
            )

        if embeddings.shape[0] == 0:
            return

        if embeddings.shape[1] != self._dim:
            raise ValueError(
                f"Embedding dimension {embeddings.shape[1]} does not match "
                f"index dimension {self._dim}"
            )

        embeddings = np.ascontiguousarray(self._normalize(embeddings))

        self._index.add(embeddings)

        self._chunks.extend(chunks)


    def query(self, embedding, top_k: int = TOP_K) -> List[Dict]:

        if not self._chunks or top_k <= 0:
            return []

        embedding = self._ensure_numpy(embedding)
        embedding = np.ascontiguousarray(self._normalize(embedding))

        scores, indices = self._index.search(
            embedding[:1],
            min(top_k, len(self._chunks)),
        )

        results = []

        for score, idx in zip(scores[0], indices[0]):

            # faiss pads missing results with -1
            if idx < 0:
                continue

            results.append({
                "text": self._chunks[idx],
                "chunk_idx": int(idx),
                "similarity_score": float(score),
            })

        return results
