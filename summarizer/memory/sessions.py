# summarizer/memory/sessions.py

"""
Upload-scoped session cache with TTL eviction.

Each uploaded document gets one Session: its vector index, the path of the
stored upload and the time it was last used. A periodic sweep evicts
sessions idle for longer than the TTL and deletes their files.

Guarantees:
• At most one session per key; put() replaces, never merges
• last_access never moves backwards while a session is live
• A session leaves the map only together with its file being deleted
• All map mutations are serialized by one lock
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from summarizer.config import SESSION_TTL_SECONDS
from summarizer.errors import SessionNotFoundError
from summarizer.memory.store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class Session:
    key: str
    vector_store: VectorStore
    source_file: Path
    created_at: float
    last_access: float


def delete_source_file(path: Path) -> bool:
    """
    Remove an uploaded file. Returns False and logs when it cannot be removed.
    """

    try:

        path.unlink()

        return True

    except OSError as e:

        logger.error(
            "Error cleaning up file",
            extra={"source_file": str(path), "error": str(e)},
        )

        return False


class SessionStore:

    def __init__(
        self,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):

        if ttl_seconds <= 0:
            raise ValueError("Session TTL must be positive")

        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()


    @property
    def ttl_seconds(self) -> float:
        return self._ttl


    def __len__(self) -> int:

        with self._lock:
            return len(self._sessions)


    def __contains__(self, key: str) -> bool:

        with self._lock:
            return key in self._sessions


    def keys(self) -> List[str]:

        with self._lock:
            return list(self._sessions)


    def put(self, key: str, vector_store: VectorStore, source_file) -> None:

        source_file = Path(source_file)

        with self._lock:

            now = self._clock()

            previous = self._sessions.pop(key, None)

            # replacement is delete + insert; the superseded upload goes too
            if previous is not None and previous.source_file != source_file:
                delete_source_file(previous.source_file)

            self._sessions[key] = Session(
                key=key,
                vector_store=vector_store,
                source_file=source_file,
                created_at=now,
                last_access=now,
            )

        logger.info(
            "Session stored",
            extra={
                "file_id": key,
                "replaced": previous is not None,
                "chunks": len(vector_store),
            },
        )


    def _is_expired(self, session: Session, now: float) -> bool:
        return now - session.last_access > self._ttl


    def touch(self, key: str) -> Session:
        """
        Refresh and return a live session.

        A session already past its TTL is evicted here instead of waiting for
        the next sweep, so expiry never depends on the sweep interval.

        Raises:
            SessionNotFoundError: evicted or never created
        """

        with self._lock:

            session = self._sessions.get(key)

            if session is None:
                raise SessionNotFoundError()

            now = self._clock()

            if self._is_expired(session, now):

                del self._sessions[key]

                delete_source_file(session.source_file)

                logger.info("Expired session evicted on access", extra={"file_id": key})

                raise SessionNotFoundError()

            session.last_access = max(session.last_access, now)

            return session


    def sweep(self, now: Optional[float] = None) -> List[str]:
        """
        Evict every session idle for longer than the TTL.

        File deletion is best-effort per entry: a failure is logged and the
        sweep moves on. Returns the evicted keys.
        """

        evicted = []

        with self._lock:

            if now is None:
                now = self._clock()

            expired = [
                key
                for key, session in self._sessions.items()
                if self._is_expired(session, now)
            ]

            for key in expired:

                session = self._sessions.pop(key)

                delete_source_file(session.source_file)

                evicted.append(key)

            remaining = len(self._sessions)

        if evicted:

            logger.info(
                "Expired sessions evicted",
                extra={"evicted": len(evicted), "remaining": remaining},
            )

        return evicted


    def clear(self) -> List[str]:
        """
        Drop every session and delete its file.
        """

        with self._lock:

            sessions = list(self._sessions.values())

            self._sessions.clear()

            for session in sessions:
                delete_source_file(session.source_file)

        return [session.key for session in sessions]


def purge_upload_dir(upload_dir, keep: Iterable[Path] = ()) -> int:
    """
    Delete files in the upload directory that no live session references.

    Used at startup, where every file left behind by a previous process is
    an orphan.
    """

    upload_dir = Path(upload_dir)

    keep = {Path(path).resolve() for path in keep}

    removed = 0

    if not upload_dir.exists():
        return removed

    for path in upload_dir.iterdir():

        if not path.is_file() or path.resolve() in keep:
            continue

        if delete_source_file(path):
            removed += 1

    if removed:
        logger.info(
            "Orphaned uploads removed",
            extra={"upload_dir": str(upload_dir), "removed": removed},
        )

    return removed


async def run_sweeper(
    store: SessionStore,
    interval_seconds: float,
    on_evicted: Optional[Callable[[List[str]], None]] = None,
):
    """
    Sweep ``store`` every ``interval_seconds`` until cancelled.
    """

    logger.info(
        "Session sweeper started",
        extra={"interval_seconds": interval_seconds, "ttl_seconds": store.ttl_seconds},
    )

    while True:

        await asyncio.sleep(interval_seconds)

        try:

            # blocking: takes the store lock and deletes files
            evicted = await asyncio.to_thread(store.sweep)

            if evicted and on_evicted:
                on_evicted(evicted)

        except Exception as e:

            logger.error(
                "Session sweep failed",
                extra={"error": str(e)},
                exc_info=True,
            )
