"""Variable and value tools."""

from __future__ import annotations

from typing import Any, Mapping

from ine_mcp.ine_api import IneApiClient, UpstreamResult


async def ine_variables(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_variables(options=args, language=language)


async def ine_variables_operacion(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    return await client.fetch_variables_operacion(args.get("idOperacion"), options=args, language=language)


async def ine_valores_variable(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    return await client.fetch_valores_variable(args.get("idVariable"), options=args, language=language)


async def ine_valores_variable_operacion(
    args: Mapping[str, Any], *, client: IneApiClient, language: str
) -> UpstreamResult:
    """Values of a variable restricted to one operation (two path segments)."""
    return await client.fetch_valores_variable_operacion(
        args.get("idVariable"), args.get("idOperacion"), options=args, language=language
    )


async def ine_valores_hijos(args: Mapping[str, Any], *, client: IneApiClient, language: str) -> UpstreamResult:
    """Children of a value in a hierarchical variable (e.g. provinces of a region)."""
    return await client.fetch_valores_hijos(
        args.get("idVariable"), args.get("idValor"), options=args, language=language
    )
