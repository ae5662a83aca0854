"""Table structure tools."""

from __future__ import annotations

from typing import Any, Mapping

from ine_mcp.ine_api import IneApiClient, UpstreamResult


async def ine_tablas_operacion(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_tablas_operacion(args.get("idOperacion"), options=args, language=language)


async def ine_grupos_tabla(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    """Selection groups of a table. The upstream operation takes no options."""
    return await client.fetch_grupos_tabla(args.get("idTabla"), language=language)


async def ine_valores_grupos_tabla(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    return await client.fetch_valores_grupos_tabla(
        args.get("idTabla"), args.get("idGrupo"), options=args, language=language
    )
