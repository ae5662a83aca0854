"""Publication and release calendar tools."""

from __future__ import annotations

from typing import Any, Mapping

from ine_mcp.ine_api import IneApiClient, UpstreamResult


async def ine_publicaciones(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_publicaciones(options=args, language=language)


async def ine_publicaciones_operacion(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    return await client.fetch_publicaciones_operacion(args.get("idOperacion"), options=args, language=language)


async def ine_publicacion_fecha_publicacion(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    """Past and scheduled release dates of one publication."""
    return await client.fetch_publicacion_fecha_publicacion(
        args.get("idPublicacion"), options=args, language=language
    )
