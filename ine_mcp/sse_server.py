"""Standalone SSE binding: ``GET /sse`` and ``POST /message`` at the root."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ine_mcp.config import IneConfig
from ine_mcp.ine_api import IneApiClient
from ine_mcp.server import build_base_app, health_payload
from ine_mcp.sse import build_sse_router


def create_sse_app(config: Optional[IneConfig] = None, *, client: Optional[IneApiClient] = None) -> FastAPI:
    app = build_base_app(
        title="INE MCP Server (SSE)",
        description="Server-Sent Events transport for the INE MCP tools.",
        config=config,
        client=client,
    )

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        return JSONResponse(content=health_payload(request.app, transport="sse"))

    app.include_router(build_sse_router())
    return app


app = create_sse_app()

# Run with: uvicorn ine_mcp.sse_server:app --port 3001
