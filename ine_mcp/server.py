"""FastAPI application wiring the INE tool catalog to HTTP, SSE and REST routes."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response

from ine_mcp import __version__
from ine_mcp.config import IneConfig, default_config
from ine_mcp.ine_api import IneApiClient
from ine_mcp.landing import render_landing
from ine_mcp.logging_config import configure_logging
from ine_mcp.mcp import MCP_SERVER_NAME, TOOL_REGISTRY, ToolDefinition, ToolDispatcher
from ine_mcp.metrics import default_metrics
from ine_mcp.rpc import handle_raw
from ine_mcp.sessions import SessionRegistry
from ine_mcp.sse import build_sse_router

logger = logging.getLogger(__name__)

APP_VERSION = __version__
MCP_PREFIX = "/mcp/v1"
TOOL_NAME_PREFIX = "ine_"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    yield
    # Shutdown
    app.state.sessions.close_all()
    await app.state.client.aclose()


async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.time()
    default_metrics.incr_request()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    default_metrics.record_duration(request_id, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


def build_base_app(
    *,
    title: str,
    description: str,
    config: Optional[IneConfig] = None,
    client: Optional[IneApiClient] = None,
    docs_url: Optional[str] = None,
) -> FastAPI:
    """
    Create a FastAPI app holding the shared state every binding needs.

    ``app.state`` carries the config, the upstream client, the dispatcher built
    around it, and the SSE session registry.
    """
    config = config or default_config
    client = client or IneApiClient(config)

    app = FastAPI(
        title=title,
        description=description,
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url=docs_url,
        redoc_url=None,
    )
    app.state.config = config
    app.state.client = client
    app.state.dispatcher = ToolDispatcher(client)
    app.state.sessions = SessionRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.middleware("http")(add_request_context)
    return app


def health_payload(app: FastAPI, **extra: Any) -> Dict[str, Any]:
    return {
        "status": "ok",
        "service": MCP_SERVER_NAME,
        "version": APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "sessions": len(app.state.sessions),
        **extra,
    }


def tool_route_path(tool: ToolDefinition) -> str:
    """``ine_valores_hijos`` becomes ``/api/valores-hijos/{idVariable}/{idValor}``."""
    slug = tool.name
    if slug.startswith(TOOL_NAME_PREFIX):
        slug = slug[len(TOOL_NAME_PREFIX):]
    path = "/api/" + slug.replace("_", "-")
    for param in tool.path_params:
        path += "/{" + param + "}"
    return path


def _make_tool_route(tool_name: str):
    async def tool_route(request: Request) -> JSONResponse:
        request_id = getattr(request.state, "request_id", None)
        args: Dict[str, Any] = dict(request.query_params)
        args.update(request.path_params)
        result = await request.app.state.dispatcher.invoke(tool_name, args, request_id=request_id)
        return JSONResponse(content=result.to_dict())

    return tool_route


def register_tool_routes(app: FastAPI) -> None:
    for tool in TOOL_REGISTRY.values():
        app.add_api_route(
            tool_route_path(tool),
            _make_tool_route(tool.name),
            methods=["GET"],
            name=tool.name,
            summary=tool.description.strip().splitlines()[0],
            tags=["tools"],
        )


def create_app(config: Optional[IneConfig] = None, *, client: Optional[IneApiClient] = None) -> FastAPI:
    app = build_base_app(
        title="INE MCP Server",
        description="MCP tool surface over the INE (Spanish National Statistics Institute) open data API.",
        config=config,
        client=client,
        docs_url="/api-docs",
    )

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Lightweight health endpoint for monitoring."""
        return JSONResponse(content=health_payload(request.app))

    @app.get("/metrics")
    async def metrics() -> JSONResponse:
        """Return in-process metrics snapshot."""
        return JSONResponse(content=default_metrics.snapshot())

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def landing(request: Request) -> HTMLResponse:
        tools = request.app.state.dispatcher.list_tools()
        return HTMLResponse(content=render_landing("INE MCP Server", APP_VERSION, tools))

    @app.post(MCP_PREFIX)
    async def mcp_gateway(request: Request) -> Response:
        """
        JSON-RPC 2.0 endpoint for MCP clients.

        Every reply, errors included, is sent with HTTP 200; notifications get
        an empty 204.
        """
        request_id = getattr(request.state, "request_id", None)
        body = await request.body()
        reply = await handle_raw(body, request.app.state.dispatcher, request_id=request_id)
        if reply is None:
            return Response(status_code=204)
        return JSONResponse(content=reply)

    app.include_router(build_sse_router(MCP_PREFIX))
    register_tool_routes(app)
    return app


configure_logging(default_config)
app = create_app()

# Run with: uvicorn ine_mcp.server:app --port 3000
