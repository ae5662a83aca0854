"""Registry of open SSE sessions, keyed by session id."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ine_mcp.metrics import MetricsRecorder, default_metrics

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Session:
    """One connected SSE client and the queue of replies waiting to be streamed."""

    session_id: str
    endpoint: str
    queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = field(default_factory=asyncio.Queue)
    created_at: float = field(default_factory=time.time)
    closed: bool = False

    def send(self, payload: Dict[str, Any]) -> None:
        self.queue.put_nowait(payload)

    def close(self) -> None:
        # A None item tells the stream to finish.
        if not self.closed:
            self.closed = True
            self.queue.put_nowait(None)


class SessionRegistry:
    """
    Open sessions for one process.

    Only touched from the event loop, on connect, disconnect and message post,
    so no locking is needed. Sessions do not survive a restart and are not
    shared between worker processes.
    """

    def __init__(self, metrics: Optional[MetricsRecorder] = None) -> None:
        self._sessions: Dict[str, Session] = {}
        self._metrics = metrics or default_metrics

    def open(self, message_path: str) -> Session:
        session_id = uuid.uuid4().hex
        session = Session(session_id=session_id, endpoint=f"{message_path}?sessionId={session_id}")
        self._sessions[session_id] = session
        self._metrics.incr_sse_session()
        logger.info("sse session opened session_id=%s", session_id, extra={"session_id": session_id})
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("sse session closed session_id=%s", session_id, extra={"session_id": session_id})

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    def close_all(self) -> None:
        for session in list(self._sessions.values()):
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
