"""Reference list tools: periodicities and classifications.

None of these upstream operations accept options, so only the language and
identifying arguments are forwarded.
"""

from __future__ import annotations

from typing import Any, Mapping

from ine_mcp.ine_api import IneApiClient, UpstreamResult


async def ine_periodicidades(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_periodicidades(language=language)


async def ine_clasificaciones(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_clasificaciones(language=language)


async def ine_clasificaciones_operacion(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    return await client.fetch_clasificaciones_operacion(args.get("idOperacion"), language=language)
