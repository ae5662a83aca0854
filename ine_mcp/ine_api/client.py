"""
Thin HTTP client for the INE JSON API (wstempus).

Every public method issues exactly one GET and returns an ``UpstreamResult``.
HTTP and transport failures are mapped to internal exceptions and then
flattened into failure results, so callers never need exception handling for
upstream problems.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

import httpx

from ine_mcp.config import DEFAULT_LANGUAGE, IneConfig, default_config

logger = logging.getLogger(__name__)

LANGUAGE_KEY = "idioma"
DISCOVERY_HINT = (
    "Use ine_operaciones_disponibles to list valid operation codes, "
    "ine_tablas_operacion to find table ids, or ine_series_operacion to find series codes."
)


@dataclass(slots=True)
class UpstreamResult:
    """Outcome of one upstream call: raw JSON on success, a message on failure."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> "UpstreamResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, message: str) -> "UpstreamResult":
        return cls(success=False, data=None, error=message)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "data": None, "error": self.error}


class IneApiError(Exception):
    """Base exception for INE API errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class NotFoundError(IneApiError):
    """Raised when the upstream answers 404 for the requested resource."""


class BadRequestError(IneApiError):
    """Raised when the upstream rejects the parameters (HTTP 400)."""


class UpstreamServerError(IneApiError):
    """Raised when the upstream fails with a 5xx status."""


class UpstreamTimeoutError(IneApiError):
    """Raised when no response arrives within the configured timeout."""


class UpstreamUnreachableError(IneApiError):
    """Raised when the upstream cannot be reached at all."""


def stringify_value(value: Any) -> str:
    """Render a query value the way a JSON client would (true/false, 3 not 3.0)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_request(
    language: str,
    operation: str,
    segments: Sequence[Any] = (),
    options: Optional[Mapping[str, Any]] = None,
    consumed: Iterable[str] = (),
) -> Tuple[str, Dict[str, str]]:
    """
    Build the path and query parameters for one upstream operation.

    Args:
        language: Language selector placed first in the path (ES or EN).
        operation: Upstream operation name, e.g. ``DATOS_TABLA``.
        segments: Identifying values appended to the path in order. A missing
            (``None`` or empty) value leaves an empty segment so later values
            keep their position; trailing missing values are dropped. Either
            way the upstream sees an incomplete path and rejects the call.
        options: Caller arguments; the remaining keys become query parameters.
        consumed: Keys already encoded in the path. They are never repeated in
            the query string, and neither is the language key.

    Returns:
        ``(path, params)`` where ``params`` preserves the option order.
    """
    path = f"/{quote(str(language), safe='')}/{operation}"
    present = [segment not in (None, "") for segment in segments]
    while present and not present[-1]:
        present.pop()
    for segment, keep in zip(segments, present):
        path += "/" + (quote(stringify_value(segment), safe="") if keep else "")

    excluded = {LANGUAGE_KEY, *consumed}
    params: Dict[str, str] = {}
    for key, value in (options or {}).items():
        if value is None or key in excluded:
            continue
        params[key] = stringify_value(value)
    return path, params


class IneApiClient:
    """Async client for the INE wstempus API surface."""

    def __init__(
        self,
        config: IneConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers=self._build_headers(),
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "User-Agent": self.config.user_agent}

    def describe_url(self, path: str, params: Optional[Mapping[str, str]] = None) -> str:
        url = self.config.base_url.rstrip("/") + path
        if params:
            url += "?" + urlencode(params)
        return url

    def _map_status(self, status_code: int, url: str) -> IneApiError:
        if status_code == 404:
            return NotFoundError(
                f"Resource not found (HTTP 404) at {url}. Check the identifiers. {DISCOVERY_HINT}",
                status_code=status_code,
                url=url,
            )
        if status_code == 400:
            return BadRequestError(
                f"Bad request (HTTP 400) at {url}. Check the parameter names and values "
                "(e.g. det 0-2, tip A/M/AM, dates as YYYYMMDD:YYYYMMDD).",
                status_code=status_code,
                url=url,
            )
        if status_code >= 500:
            return UpstreamServerError(
                f"INE API server error (HTTP {status_code}) at {url}. The service may be "
                "temporarily unavailable; try again later.",
                status_code=status_code,
                url=url,
            )
        return IneApiError(
            f"INE API request failed (HTTP {status_code}) at {url}.",
            status_code=status_code,
            url=url,
        )

    def _process_response(self, response: httpx.Response, url: str) -> Any:
        if response.status_code >= 400:
            raise self._map_status(response.status_code, url)
        try:
            return response.json()
        except ValueError as exc:
            raise IneApiError(
                f"INE API returned a response that is not valid JSON at {url}.",
                status_code=response.status_code,
                url=url,
            ) from exc

    async def _request(self, path: str, params: Optional[Dict[str, str]] = None) -> UpstreamResult:
        url = self.describe_url(path, params)
        try:
            client = await self._get_client()
            try:
                response = await client.get(path, params=params or None, headers=self._build_headers())
            except httpx.TimeoutException as exc:
                raise UpstreamTimeoutError(
                    f"Timeout: the INE API did not respond within {self.config.timeout:g} seconds ({url}).",
                    url=url,
                ) from exc
            except httpx.RequestError as exc:
                raise UpstreamUnreachableError(
                    f"Network error contacting the INE API ({url}): {str(exc) or type(exc).__name__}",
                    url=url,
                ) from exc
            data = self._process_response(response, url)
        except IneApiError as exc:
            logger.warning("INE request failed url=%s status=%s", url, exc.status_code)
            return UpstreamResult.failure(str(exc))
        except Exception:
            logger.exception("Unexpected error calling INE API url=%s", url)
            return UpstreamResult.failure(f"Unexpected error while calling the INE API ({url}).")
        return UpstreamResult.ok(data)

    async def _call(
        self,
        operation: str,
        language: str,
        *,
        ids: Sequence[Tuple[str, Any]] = (),
        options: Optional[Mapping[str, Any]] = None,
    ) -> UpstreamResult:
        path, params = build_request(
            language,
            operation,
            segments=[value for _, value in ids],
            options=options,
            consumed=[key for key, _ in ids],
        )
        return await self._request(path, params)

    async def fetch_datos_tabla(
        self, id_tabla: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """DATOS_TABLA: data for one statistical table."""
        return await self._call("DATOS_TABLA", language, ids=[("idTabla", id_tabla)], options=options)

    async def fetch_datos_serie(
        self, id_serie: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """DATOS_SERIE: data points of one time series."""
        return await self._call("DATOS_SERIE", language, ids=[("idSerie", id_serie)], options=options)

    async def fetch_datos_metadata_operacion(
        self, id_operacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """DATOS_METADATAOPERACION: series data selected by metadata filters (g1..g5)."""
        return await self._call(
            "DATOS_METADATAOPERACION", language, ids=[("idOperacion", id_operacion)], options=options
        )

    async def fetch_operaciones_disponibles(
        self, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """OPERACIONES_DISPONIBLES: every statistical operation."""
        return await self._call("OPERACIONES_DISPONIBLES", language, options=options)

    async def fetch_operacion(
        self, id_operacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """OPERACION: one operation by code or numeric id."""
        return await self._call("OPERACION", language, ids=[("idOperacion", id_operacion)], options=options)

    async def fetch_variables(
        self, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """VARIABLES: every statistical variable."""
        return await self._call("VARIABLES", language, options=options)

    async def fetch_variables_operacion(
        self, id_operacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """VARIABLES_OPERACION: variables used by one operation."""
        return await self._call(
            "VARIABLES_OPERACION", language, ids=[("idOperacion", id_operacion)], options=options
        )

    async def fetch_valores_variable(
        self, id_variable: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """VALORES_VARIABLE: values of one variable."""
        return await self._call("VALORES_VARIABLE", language, ids=[("idVariable", id_variable)], options=options)

    async def fetch_valores_variable_operacion(
        self,
        id_variable: Any,
        id_operacion: Any,
        *,
        options: Optional[Mapping[str, Any]] = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> UpstreamResult:
        """VALORES_VARIABLEOPERACION: values of a variable within one operation."""
        return await self._call(
            "VALORES_VARIABLEOPERACION",
            language,
            ids=[("idVariable", id_variable), ("idOperacion", id_operacion)],
            options=options,
        )

    async def fetch_tablas_operacion(
        self, id_operacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """TABLAS_OPERACION: tables published for one operation."""
        return await self._call("TABLAS_OPERACION", language, ids=[("idOperacion", id_operacion)], options=options)

    async def fetch_grupos_tabla(self, id_tabla: Any, *, language: str = DEFAULT_LANGUAGE) -> UpstreamResult:
        """GRUPOS_TABLA: selection groups of one table. Takes no options."""
        return await self._call("GRUPOS_TABLA", language, ids=[("idTabla", id_tabla)])

    async def fetch_valores_grupos_tabla(
        self,
        id_tabla: Any,
        id_grupo: Any,
        *,
        options: Optional[Mapping[str, Any]] = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> UpstreamResult:
        """VALORES_GRUPOSTABLA: values of one group within a table."""
        return await self._call(
            "VALORES_GRUPOSTABLA",
            language,
            ids=[("idTabla", id_tabla), ("idGrupo", id_grupo)],
            options=options,
        )

    async def fetch_serie(
        self, id_serie: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """SERIE: metadata of one series."""
        return await self._call("SERIE", language, ids=[("idSerie", id_serie)], options=options)

    async def fetch_series_operacion(
        self, id_operacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """SERIES_OPERACION: series of one operation (paged)."""
        return await self._call("SERIES_OPERACION", language, ids=[("idOperacion", id_operacion)], options=options)

    async def fetch_valores_serie(
        self, id_serie: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """VALORES_SERIE: variables and values defining one series."""
        return await self._call("VALORES_SERIE", language, ids=[("idSerie", id_serie)], options=options)

    async def fetch_series_tabla(
        self, id_tabla: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """SERIES_TABLA: series contained in one table."""
        return await self._call("SERIES_TABLA", language, ids=[("idTabla", id_tabla)], options=options)

    async def fetch_serie_metadata_operacion(
        self, id_operacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """SERIE_METADATAOPERACION: series selected by metadata filters (g1..g5)."""
        return await self._call(
            "SERIE_METADATAOPERACION", language, ids=[("idOperacion", id_operacion)], options=options
        )

    async def fetch_periodicidades(self, *, language: str = DEFAULT_LANGUAGE) -> UpstreamResult:
        """PERIODICIDADES: available periodicities. Takes no options."""
        return await self._call("PERIODICIDADES", language)

    async def fetch_publicaciones(
        self, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """PUBLICACIONES: every statistical publication."""
        return await self._call("PUBLICACIONES", language, options=options)

    async def fetch_publicaciones_operacion(
        self, id_operacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """PUBLICACIONES_OPERACION: publications of one operation."""
        return await self._call(
            "PUBLICACIONES_OPERACION", language, ids=[("idOperacion", id_operacion)], options=options
        )

    async def fetch_publicacion_fecha_publicacion(
        self, id_publicacion: Any, *, options: Optional[Mapping[str, Any]] = None, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """PUBLICACIONFECHA_PUBLICACION: release calendar of one publication."""
        return await self._call(
            "PUBLICACIONFECHA_PUBLICACION", language, ids=[("idPublicacion", id_publicacion)], options=options
        )

    async def fetch_clasificaciones(self, *, language: str = DEFAULT_LANGUAGE) -> UpstreamResult:
        """CLASIFICACIONES: statistical classifications. Takes no options."""
        return await self._call("CLASIFICACIONES", language)

    async def fetch_clasificaciones_operacion(
        self, id_operacion: Any, *, language: str = DEFAULT_LANGUAGE
    ) -> UpstreamResult:
        """CLASIFICACIONES_OPERACION: classifications used by one operation. Takes no options."""
        return await self._call("CLASIFICACIONES_OPERACION", language, ids=[("idOperacion", id_operacion)])

    async def fetch_valores_hijos(
        self,
        id_variable: Any,
        id_valor: Any,
        *,
        options: Optional[Mapping[str, Any]] = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> UpstreamResult:
        """VALORES_HIJOS: children of a value in a hierarchical variable."""
        return await self._call(
            "VALORES_HIJOS",
            language,
            ids=[("idVariable", id_variable), ("idValor", id_valor)],
            options=options,
        )
