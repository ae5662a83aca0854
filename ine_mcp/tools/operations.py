"""Statistical operation tools."""

from __future__ import annotations

from typing import Any, Mapping

from ine_mcp.ine_api import IneApiClient, UpstreamResult


async def ine_operaciones_disponibles(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    """List every statistical operation; the usual starting point for discovery."""
    return await client.fetch_operaciones_disponibles(options=args, language=language)


async def ine_operacion(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_operacion(args.get("idOperacion"), options=args, language=language)
