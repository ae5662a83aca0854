"""Time series tools."""

from __future__ import annotations

from typing import Any, Mapping

from ine_mcp.ine_api import IneApiClient, UpstreamResult


async def ine_serie(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    """Series metadata (name, periodicity, unit), not its data points."""
    return await client.fetch_serie(args.get("idSerie"), options=args, language=language)


async def ine_series_operacion(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_series_operacion(args.get("idOperacion"), options=args, language=language)


async def ine_valores_serie(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_valores_serie(args.get("idSerie"), options=args, language=language)


async def ine_series_tabla(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_series_tabla(args.get("idTabla"), options=args, language=language)


async def ine_serie_metadata_operacion(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    return await client.fetch_serie_metadata_operacion(args.get("idOperacion"), options=args, language=language)
