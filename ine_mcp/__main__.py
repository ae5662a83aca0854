"""
Command line entry point.

Usage:
    python -m ine_mcp                 Combined HTTP app (JSON-RPC, SSE, REST) on PORT or 3000
    python -m ine_mcp --sse           Standalone SSE app on PORT or 3001
    python -m ine_mcp --stdio         Newline-delimited JSON-RPC over stdin/stdout
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

import uvicorn

from ine_mcp import __version__
from ine_mcp.config import default_config
from ine_mcp.logging_config import configure_logging, resolve_level

logger = logging.getLogger("ine_mcp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ine-mcp-server",
        description="MCP server for the INE (Spanish National Statistics Institute) open data API.",
    )
    transport = parser.add_mutually_exclusive_group()
    transport.add_argument("--stdio", action="store_true", help="Serve JSON-RPC over stdin/stdout")
    transport.add_argument("--sse", action="store_true", help="Run the standalone SSE server")
    parser.add_argument("--host", default=None, help=f"Bind address (default {default_config.host})")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default PORT, 3000 or 3001 for --sse)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(default_config)

    if args.stdio:
        from ine_mcp.stdio import serve_stdio

        asyncio.run(serve_stdio(default_config))
        return

    host = args.host or default_config.host
    if args.sse:
        from ine_mcp.sse_server import app

        port = args.port or default_config.sse_port
        logger.info("Starting INE MCP SSE server on %s:%s", host, port)
    else:
        from ine_mcp.server import app

        port = args.port or default_config.port
        logger.info("Starting INE MCP server on %s:%s", host, port)

    log_level = logging.getLevelName(resolve_level(default_config.log_level)).lower()
    uvicorn.run(app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()
