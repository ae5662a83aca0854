"""
JSON-RPC 2.0 message handling shared by the HTTP, SSE and stdio transports.

``handle_message`` takes one decoded message and returns the reply payload, or
``None`` when the message is a notification that must not be answered.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Union

from ine_mcp.ine_api import UpstreamResult
from ine_mcp.mcp import MCP_SERVER_NAME, MCP_SERVER_VERSION, SERVER_INSTRUCTIONS, ToolDispatcher, UnknownToolError

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
DEFAULT_PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SESSION_NOT_FOUND = -32001


def jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": rpc_id, "result": result}


def jsonrpc_error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": rpc_id, "error": {"code": code, "message": message}}


def wrap_tool_result(result: UpstreamResult) -> Dict[str, Any]:
    """
    Shape an upstream outcome into an MCP content array.

    The whole result is rendered as indented JSON text; failures keep the same
    rendering and add the ``isError`` flag.
    """
    text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    wrapped: Dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if not result.success:
        wrapped["isError"] = True
    return wrapped


def initialize_result(params: Dict[str, Any]) -> Dict[str, Any]:
    protocol_version = params.get("protocolVersion")
    if not isinstance(protocol_version, str) or not protocol_version:
        protocol_version = DEFAULT_PROTOCOL_VERSION
    return {
        "protocolVersion": protocol_version,
        "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
        "capabilities": {"tools": {"listChanged": False}},
        "instructions": SERVER_INSTRUCTIONS,
    }


def is_notification(message: Any) -> bool:
    if not isinstance(message, dict):
        return False
    method = message.get("method")
    return isinstance(method, str) and (method.startswith("notifications/") or method == "initialized")


async def handle_message(
    message: Any,
    dispatcher: ToolDispatcher,
    *,
    request_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Handle one decoded JSON-RPC message.

    Returns the reply payload, or ``None`` for notifications. Never raises:
    unexpected failures are logged and answered with an internal error.
    """
    start_time = time.time()
    rpc_id = message.get("id") if isinstance(message, dict) else None
    method_label = message.get("method") if isinstance(message, dict) else None
    try:
        reply = await _dispatch(message, dispatcher, request_id=request_id)
    except Exception:
        logger.exception(
            "mcp outcome=internal_error method=%s request_id=%s",
            method_label,
            request_id,
            extra={"request_id": request_id},
        )
        reply = jsonrpc_error_payload(rpc_id, INTERNAL_ERROR, "Internal error")

    duration_ms = (time.time() - start_time) * 1000
    error_code = reply.get("error", {}).get("code") if reply else None
    logger.debug(
        "mcp outcome=%s method=%s id=%s duration_ms=%.2f error_code=%s",
        "error" if error_code else "success",
        method_label,
        rpc_id,
        duration_ms,
        error_code,
        extra={"request_id": request_id, "error": error_code},
    )
    return reply


async def handle_raw(
    raw: Union[str, bytes],
    dispatcher: ToolDispatcher,
    *,
    request_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Decode ``raw`` and handle it; undecodable input gets a parse error."""
    try:
        message = json.loads(raw)
    except ValueError:
        logger.warning("mcp outcome=parse_error request_id=%s", request_id, extra={"request_id": request_id})
        return jsonrpc_error_payload(None, PARSE_ERROR, "Parse error")
    return await handle_message(message, dispatcher, request_id=request_id)


async def _dispatch(
    message: Any,
    dispatcher: ToolDispatcher,
    *,
    request_id: Optional[str],
) -> Optional[Dict[str, Any]]:
    if not isinstance(message, dict):
        return jsonrpc_error_payload(None, INVALID_REQUEST, "Invalid Request")

    rpc_id = message.get("id")
    method = message.get("method")
    if message.get("jsonrpc") != JSONRPC_VERSION or not isinstance(method, str) or not method:
        return jsonrpc_error_payload(rpc_id, INVALID_REQUEST, "Invalid Request")

    raw_params = message.get("params")
    if raw_params is None:
        params: Dict[str, Any] = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params")

    if is_notification(message):
        logger.debug(
            "mcp notification=%s request_id=%s",
            method,
            request_id,
            extra={"request_id": request_id},
        )
        return None

    if method == "initialize":
        return jsonrpc_success_payload(rpc_id, initialize_result(params))

    if method == "ping":
        return jsonrpc_success_payload(rpc_id, {})

    if method in ("tools/list", "list_tools"):
        return jsonrpc_success_payload(rpc_id, {"tools": dispatcher.list_tools()})

    if method in ("tools/call", "call_tool"):
        tool_name = params.get("name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params: missing tool name")
        if not isinstance(arguments, dict):
            return jsonrpc_error_payload(rpc_id, INVALID_PARAMS, "Invalid params: arguments must be an object")
        try:
            result = await dispatcher.invoke(tool_name, arguments, request_id=request_id)
        except UnknownToolError as exc:
            return jsonrpc_error_payload(rpc_id, METHOD_NOT_FOUND, str(exc))
        return jsonrpc_success_payload(rpc_id, wrap_tool_result(result))

    return jsonrpc_error_payload(rpc_id, METHOD_NOT_FOUND, f"Method not found: {method}")
