"""
PostHog product analytics.

Tracking is optional: without POSTHOG_API_KEY every call is a no-op.
A tracking failure is logged and never reaches the request.
"""

import os
import logging
from typing import Optional, Dict, Any, List

from posthog import Posthog


logger = logging.getLogger(__name__)


class PostHogClient:

    def __init__(self, api_key: Optional[str] = None, host: Optional[str] = None):

        self._enabled = False
        self._client: Optional[Posthog] = None

        api_key = api_key or os.getenv("POSTHOG_API_KEY")
        host = host or os.getenv("POSTHOG_HOST", "https://app.posthog.com")

        if not api_key:
            logger.info(
                "PostHog disabled: POSTHOG_API_KEY not set"
            )
            return

        try:

            self._client = Posthog(
                project_api_key=api_key,
                host=host,
                timeout=5,
                flush_interval=1,
            )

            self._enabled = True

            logger.info(
                "PostHog client initialized",
                extra={"host": host}
            )

        except Exception as e:

            logger.error(
                "PostHog initialization failed",
                extra={"error": str(e)}
            )

            self._enabled = False


    @property
    def enabled(self) -> bool:
        return self._enabled


    def _track(
        self,
        distinct_id: str,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
    ):

        if not self._enabled or not self._client:
            return

        try:

            self._client.capture(
                distinct_id=distinct_id,
                event=event,
                properties=properties or {},
            )

        except Exception as e:

            logger.warning(
                "PostHog tracking failed",
                extra={
                    "event": event,
                    "error": str(e),
                }
            )


    def track_document_summarized(
        self,
        distinct_id: str,
        file_id: str,
        chunks: int,
        size_bytes: int,
        latency: float,
    ):

        self._track(
            distinct_id,
            "document_summarized",
            {
                "file_id": file_id,
                "chunks": chunks,
                "size_bytes": size_bytes,
                "latency_seconds": latency,
            },
        )


    def track_chat(
        self,
        distinct_id: str,
        file_id: str,
        message: str,
        history_turns: int,
        sources: int,
        latency: float,
    ):

        self._track(
            distinct_id,
            "chat_answered",
            {
                "file_id": file_id,
                "message_length": len(message),
                "history_turns": history_turns,
                "sources": sources,
                "latency_seconds": latency,
            },
        )


    def track_sessions_evicted(self, file_ids: List[str]):

        self._track(
            "session-sweeper",
            "sessions_evicted",
            {
                "count": len(file_ids),
                "file_ids": file_ids,
            },
        )


    def track_error(
        self,
        distinct_id: str,
        error_type: str,
        error_message: str,
        endpoint: str,
    ):

        self._track(
            distinct_id,
            "system_error",
            {
                "error_type": error_type,
                "error_message": error_message,
                "endpoint": endpoint,
            },
        )


    def shutdown(self):

        if self._client:
            self._client.shutdown()


posthog_client = PostHogClient()
