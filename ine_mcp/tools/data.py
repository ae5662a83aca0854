"""Data retrieval tools: table, series and metadata-filtered data."""

from __future__ import annotations

from typing import Any, Mapping

from ine_mcp.ine_api import IneApiClient, UpstreamResult


async def ine_datos_tabla(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    """Fetch the data of one table; ``idTabla`` goes in the path, the rest in the query."""
    return await client.fetch_datos_tabla(args.get("idTabla"), options=args, language=language)


async def ine_datos_serie(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    """Fetch the data points of one series."""
    return await client.fetch_datos_serie(args.get("idSerie"), options=args, language=language)


async def ine_datos_metadata_operacion(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    """Fetch series data selected through g1..g5 metadata filters within an operation."""
    return await client.fetch_datos_metadata_operacion(args.get("idOperacion"), options=args, language=language)
