# summarizer/llm/client.py
import logging
import time
from typing import Dict, List, Optional

from openai import OpenAI

from summarizer.config import (
    LLM_MAX_RETRIES,
    LLM_MAX_TOKENS,
    LLM_MODEL,
    LLM_TEMPERATURE,
    LLM_TIMEOUT_SECONDS,
)
from summarizer.errors import UpstreamError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Client for the OpenAI chat completions API.

    Retries with backoff happen inside the SDK (``max_retries``); once they
    are exhausted the failure surfaces as UpstreamError.
    """

    def __init__(
        self,
        model: str = LLM_MODEL,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS,
        api_key: Optional[str] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._api_key = api_key
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
                raise UpstreamError(detail=f"Failed to initialize OpenAI client: {e}") from e

        return self._client

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Run a chat completion and return the stripped answer text.

        Raises:
            UpstreamError: the API call failed or returned no text
        """
        client = self._ensure_client()

        start_time = time.time()

        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.error(
                "LLM completion failed",
                extra={"model": self.model, "error": str(e)},
            )
            raise UpstreamError(detail=f"OpenAI API call failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None

        if not content or not content.strip():
            raise UpstreamError(detail="The language model returned an empty answer")

        logger.info(
            "LLM completion succeeded",
            extra={
                "model": self.model,
                "latency_seconds": round(time.time() - start_time, 3),
            },
        )

        return content.strip()
