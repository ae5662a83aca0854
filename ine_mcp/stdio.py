"""
Newline-delimited JSON-RPC over stdin/stdout.

Each input line is one message. Every message is handled in its own task, so
slow upstream calls do not hold up later messages and replies may come back
in any order. Nothing but protocol frames is ever written to stdout.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Callable, Optional, Set

from ine_mcp.config import IneConfig, default_config
from ine_mcp.ine_api import IneApiClient
from ine_mcp.mcp import ToolDispatcher
from ine_mcp.rpc import PARSE_ERROR, handle_raw, jsonrpc_error_payload

logger = logging.getLogger(__name__)

STDIN_LINE_LIMIT = 2**20

LineWriter = Callable[[str], None]


def write_stdout(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()


def encode_frame(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False) + "\n"


async def _handle_line(line: bytes, dispatcher: ToolDispatcher, write: LineWriter) -> None:
    reply = await handle_raw(line, dispatcher)
    if reply is not None:
        write(encode_frame(reply))


async def _skip_line(reader: asyncio.StreamReader) -> None:
    """Drop input up to and including the next newline, or to EOF."""
    while True:
        try:
            await reader.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as exc:
            await reader.readexactly(exc.consumed)
        except asyncio.IncompleteReadError:
            return


async def run_stdio(reader: asyncio.StreamReader, write: LineWriter, dispatcher: ToolDispatcher) -> None:
    """Serve messages from ``reader`` until EOF, then wait for in-flight calls."""
    pending: Set[asyncio.Task] = set()
    while True:
        try:
            line = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            line = exc.partial
        except asyncio.LimitOverrunError:
            await _skip_line(reader)
            logger.warning("stdio message exceeded the line limit")
            write(encode_frame(jsonrpc_error_payload(None, PARSE_ERROR, "Parse error")))
            continue
        if not line:
            break
        if not line.strip():
            continue
        task = asyncio.create_task(_handle_line(line, dispatcher, write))
        pending.add(task)
        task.add_done_callback(pending.discard)

    if pending:
        await asyncio.gather(*pending)
    logger.info("stdio transport reached end of input")


async def serve_stdio(config: Optional[IneConfig] = None) -> None:
    config = config or default_config
    client = IneApiClient(config)
    dispatcher = ToolDispatcher(client)

    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=STDIN_LINE_LIMIT)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    logger.info("stdio transport ready")
    try:
        await run_stdio(reader, write_stdout, dispatcher)
    finally:
        await client.aclose()
