"""
Server-Sent Events transport.

A client opens ``GET <prefix>/sse`` and receives an ``endpoint`` event naming
the URL to post JSON-RPC messages to. Replies to those posts are delivered as
``message`` events on the open stream.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ine_mcp.rpc import SESSION_NOT_FOUND, handle_raw, jsonrpc_error_payload
from ine_mcp.sessions import Session, SessionRegistry

logger = logging.getLogger(__name__)

KEEPALIVE_COMMENT = ": keepalive\n\n"
SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"}


def format_sse(data: str, event: Optional[str] = None) -> str:
    lines = []
    if event:
        lines.append(f"event: {event}")
    for line in data.splitlines() or [""]:
        lines.append(f"data: {line}")
    return "\n".join(lines) + "\n\n"


def format_message_event(payload: Dict[str, Any]) -> str:
    return format_sse(json.dumps(payload, ensure_ascii=False), event="message")


async def stream_session(
    registry: SessionRegistry,
    session: Session,
    is_disconnected: Callable[[], Awaitable[bool]],
    keepalive: float,
) -> AsyncIterator[str]:
    """
    Yield the event stream for one session until it ends.

    The session is removed from the registry however the stream stops:
    client disconnect, server shutdown, or an error while sending.
    """
    try:
        yield format_sse(session.endpoint, event="endpoint")
        while True:
            if await is_disconnected():
                break
            try:
                payload = await asyncio.wait_for(session.queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield KEEPALIVE_COMMENT
                continue
            if payload is None:
                break
            yield format_message_event(payload)
    finally:
        registry.remove(session.session_id)


def build_sse_router(prefix: str = "") -> APIRouter:
    """
    Return a router exposing ``<prefix>/sse`` and ``<prefix>/message``.

    The handlers read the session registry, dispatcher and config from
    ``request.app.state``, so the same router works in the combined app and in
    the standalone SSE app.
    """
    router = APIRouter(tags=["sse"])
    message_path = f"{prefix}/message"

    @router.get(f"{prefix}/sse")
    async def sse_stream(request: Request) -> StreamingResponse:
        """Open an event stream; the first event names the message endpoint."""
        registry: SessionRegistry = request.app.state.sessions
        session = registry.open(message_path)
        keepalive = request.app.state.config.sse_keepalive
        return StreamingResponse(
            stream_session(registry, session, request.is_disconnected, keepalive),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    @router.post(message_path)
    async def sse_message(request: Request) -> JSONResponse:
        """Handle one JSON-RPC message; the reply is delivered on the session's stream."""
        request_id = getattr(request.state, "request_id", None)
        session_id = request.query_params.get("sessionId")
        if not session_id:
            return JSONResponse(status_code=400, content={"error": "Missing sessionId query parameter"})

        registry: SessionRegistry = request.app.state.sessions
        session = registry.get(session_id)
        if session is None:
            logger.warning(
                "sse message for unknown session session_id=%s",
                session_id,
                extra={"session_id": session_id, "request_id": request_id},
            )
            return JSONResponse(
                status_code=404,
                content=jsonrpc_error_payload(None, SESSION_NOT_FOUND, "Session not found"),
            )

        body = await request.body()
        reply = await handle_raw(body, request.app.state.dispatcher, request_id=request_id)
        if reply is not None:
            session.send(reply)
        return JSONResponse(status_code=202, content={"status": "accepted"})

    return router
