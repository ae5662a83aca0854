"""HTML landing page listing the endpoints and the tool catalog."""

from __future__ import annotations

from html import escape
from typing import Any, Dict, Iterable, Sequence, Tuple

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: sans-serif; max-width: 960px; margin: 2em auto; line-height: 1.4; }}
code {{ background: #f2f2f2; padding: 0 4px; }}
li {{ margin-bottom: 0.4em; }}
</style>
</head>
<body>
<h1>{title}</h1>
<p>MCP gateway over the open data API of Spain's National Statistics Institute (INE). Version {version}.</p>
<h2>Endpoints</h2>
<ul>
{endpoints}
</ul>
<h2>Tools ({tool_count})</h2>
<ul>
{tools}
</ul>
</body>
</html>
"""

ENDPOINTS: Sequence[Tuple[str, str]] = (
    ("POST /mcp/v1", "JSON-RPC 2.0 endpoint (initialize, tools/list, tools/call)"),
    ("GET /mcp/v1/sse", "Server-Sent Events stream; the first event names the message endpoint"),
    ("POST /mcp/v1/message?sessionId=...", "Message endpoint for an open SSE session"),
    ("GET /api/...", "Read-only REST routes, one per tool"),
    ("GET /api-docs", "Interactive OpenAPI documentation"),
    ("GET /health", "Health check"),
    ("GET /metrics", "In-process metrics"),
)


def _first_line(text: str) -> str:
    return text.strip().splitlines()[0] if text.strip() else ""


def render_landing(title: str, version: str, tools: Iterable[Dict[str, Any]]) -> str:
    tool_list = list(tools)
    endpoints = "\n".join(
        f"<li><code>{escape(route)}</code> {escape(description)}</li>" for route, description in ENDPOINTS
    )
    tool_items = "\n".join(
        f"<li><code>{escape(tool['name'])}</code> {escape(_first_line(tool['description']))}</li>"
        for tool in tool_list
    )
    return PAGE_TEMPLATE.format(
        title=escape(title),
        version=escape(version),
        endpoints=endpoints,
        tool_count=len(tool_list),
        tools=tool_items,
    )
