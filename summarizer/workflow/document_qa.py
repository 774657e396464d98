# summarizer/workflow/document_qa.py
import logging
from typing import Dict, List, NamedTuple, Sequence

import numpy as np

from summarizer.config import (
    CONDENSE_FOLLOW_UP_QUESTIONS,
    MAX_HISTORY_TURNS,
    TOP_K,
)
from summarizer.errors import UpstreamError
from summarizer.memory.store import VectorStore
from summarizer.prompts.prompt_builder import (
    build_chat_messages,
    build_condense_messages,
)
from summarizer.prompts.system_prompts import SUMMARY_QUESTION

logger = logging.getLogger(__name__)


class Answer(NamedTuple):
    text: str
    sources: List[Dict]


class DocumentQAService:
    """
    Retrieval-augmented summary and question answering over one session's
    vector store.

    ``embedder`` must provide ``embed(texts) -> np.ndarray`` and
    ``llm_client`` must provide ``complete(messages) -> str``. A failure in
    either surfaces as UpstreamError; there are no partial answers. Errors
    in the local index are not provider failures and propagate unchanged.
    """

    def __init__(
        self,
        embedder,
        llm_client,
        top_k: int = TOP_K,
        max_history_turns: int = MAX_HISTORY_TURNS,
        condense_questions: bool = CONDENSE_FOLLOW_UP_QUESTIONS,
    ):
        self.embedder = embedder
        self.llm_client = llm_client
        self.top_k = top_k
        self.max_history_turns = max_history_turns
        self.condense_questions = condense_questions

    def _embed(self, texts: List[str]) -> np.ndarray:

        try:
            return self.embedder.embed(texts)
        except UpstreamError:
            raise
        except Exception as e:
            logger.error(
                "Embedding provider call failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            raise UpstreamError(detail=f"{type(e).__name__}: {e}") from e

    def _complete(self, messages: List[Dict[str, str]]) -> str:

        try:
            answer = self.llm_client.complete(messages)
        except UpstreamError:
            raise
        except Exception as e:
            logger.error(
                "Completion provider call failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            raise UpstreamError(detail=f"{type(e).__name__}: {e}") from e

        if not answer or not answer.strip():
            raise UpstreamError(detail="The language model returned an empty answer")

        return answer.strip()

    def build_index(self, chunks: List[str]) -> VectorStore:

        return VectorStore.from_embeddings(self._embed(chunks), chunks)

    def retrieve(self, query: str, vector_store: VectorStore) -> List[Dict]:
        """
        Top-k chunks most similar to ``query``, best match first.
        """

        return vector_store.query(self._embed([query]), top_k=self.top_k)

    def recent_history(self, chat_history: Sequence) -> List:

        if self.max_history_turns <= 0:
            return []

        return list(chat_history)[-self.max_history_turns:]

    def summarize(self, vector_store: VectorStore) -> str:

        sources = self.retrieve(SUMMARY_QUESTION, vector_store)

        summary = self._complete(build_chat_messages(SUMMARY_QUESTION, sources))

        logger.info(
            "Summary generated",
            extra={"sources_used": len(sources), "summary_length": len(summary)},
        )

        return summary

    def answer(
        self,
        question: str,
        vector_store: VectorStore,
        chat_history: Sequence = (),
    ) -> Answer:

        history = self.recent_history(chat_history)

        search_query = question

        if history and self.condense_questions:
            search_query = self._complete(build_condense_messages(question, history))

        sources = self.retrieve(search_query, vector_store)

        answer = self._complete(build_chat_messages(question, sources, history))

        logger.info(
            "Question answered",
            extra={
                "history_turns": len(history),
                "condensed": search_query != question,
                "sources_used": len(sources),
                "top_score": sources[0]["similarity_score"] if sources else None,
            },
        )

        return Answer(text=answer, sources=sources)
