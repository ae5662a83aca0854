"""
Tool catalog and dispatcher for the MCP surface.

The registry maps each tool name to its JSON Schema descriptor and to the
async handler that performs the single upstream call. Every transport lists
and invokes tools through the same ``ToolDispatcher``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ine_mcp import __version__
from ine_mcp.config import DEFAULT_LANGUAGE, LANGUAGES
from ine_mcp.ine_api import IneApiClient, UpstreamResult
from ine_mcp.ine_api.client import LANGUAGE_KEY
from ine_mcp.metrics import MetricsRecorder, default_metrics
from ine_mcp.tools import (
    ine_clasificaciones,
    ine_clasificaciones_operacion,
    ine_datos_metadata_operacion,
    ine_datos_serie,
    ine_datos_tabla,
    ine_grupos_tabla,
    ine_operacion,
    ine_operaciones_disponibles,
    ine_periodicidades,
    ine_publicacion_fecha_publicacion,
    ine_publicaciones,
    ine_publicaciones_operacion,
    ine_serie,
    ine_serie_metadata_operacion,
    ine_series_operacion,
    ine_series_tabla,
    ine_tablas_operacion,
    ine_valores_grupos_tabla,
    ine_valores_hijos,
    ine_valores_serie,
    ine_valores_variable,
    ine_valores_variable_operacion,
    ine_variables,
    ine_variables_operacion,
)

logger = logging.getLogger(__name__)

MCP_SERVER_NAME = "ine-mcp-server"
MCP_SERVER_VERSION = __version__

SERVER_INSTRUCTIONS = """This server gives access to the open data of Spain's National Statistics Institute (INE).

RECOMMENDED WORKFLOW:
1. Call 'ine_operaciones_disponibles' to see every statistical operation
2. Call 'ine_tablas_operacion' with an operation code (e.g. "IPC", "EPA") to list its tables
3. Call 'ine_datos_tabla' with a table id to fetch the actual data

MOST USED OPERATIONS:
- IPC: Consumer Price Index (inflation) - monthly
- EPA: Labour Force Survey (employment/unemployment) - quarterly
- PIB: Gross Domestic Product - quarterly
- CIFRAS_POB: Population figures - half-yearly
- ECV: Living Conditions Survey - yearly
- DEFUNCIONES/NACIMIENTOS: Vital statistics - monthly

COMMON TABLES:
- Table 50902: CPI by ECOICOP groups
- Table 4247: Population by province
- Table 4076: EPA unemployment rates

IMPORTANT PARAMETERS:
- nult: number of latest periods (e.g. nult=12 for the last year of monthly data)
- det: detail level (0=basic, 2=full)
- tip: response format (A=friendly, with readable names)
- tv: variable filter (format VARIABLE_ID:VALUE_ID)
- date: date range (format YYYYMMDD:YYYYMMDD)"""

ToolHandler = Callable[..., Awaitable[UpstreamResult]]


def _string(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def _number(description: str) -> Dict[str, Any]:
    return {"type": "number", "description": description}


def _language_schema() -> Dict[str, Any]:
    return {
        "type": "string",
        "enum": list(LANGUAGES),
        "default": DEFAULT_LANGUAGE,
        "description": "Result language: ES=Spanish, EN=English",
    }


def _det_schema(description: str = "Detail level: 0=basic, 1=medium, 2=full metadata") -> Dict[str, Any]:
    return {"type": "number", "enum": [0, 1, 2], "description": description}


def _tip_schema(values: Sequence[str] = ("A", "M", "AM")) -> Dict[str, Any]:
    if list(values) == ["A"]:
        description = "A=friendly format with readable names"
    else:
        description = "Format: A=friendly (readable names), M=metadata only, AM=both"
    return {"type": "string", "enum": list(values), "description": description}


def _geo_schema(description: str) -> Dict[str, Any]:
    return {"type": "number", "enum": [0, 1], "description": description}


def _metadata_filters() -> Dict[str, Any]:
    return {f"g{index}": _string(f"Filter group {index} (format VARIABLE_ID:VALUE_ID)") for index in range(1, 6)}


def _object_schema(properties: Dict[str, Any], required: Sequence[str] = ()) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {**properties, LANGUAGE_KEY: _language_schema()},
    }
    if required:
        schema["required"] = list(required)
    return schema


OPERATION_ID = "Operation code (e.g. \"IPC\", \"EPA\", \"PIB\") or numeric id. See ine_operaciones_disponibles."
TABLE_ID = "Numeric table id (e.g. \"50902\" for CPI by groups). See ine_tablas_operacion."
SERIES_ID = "Series code (e.g. \"IPC251856\" for the general CPI). See ine_series_operacion."


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: ToolHandler
    path_params: Tuple[str, ...] = ()

    def descriptor(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


_DEFINITIONS: List[ToolDefinition] = [
    ToolDefinition(
        name="ine_datos_tabla",
        description=(
            "Fetch the statistical data of one INE table.\n\n"
            "Common tables: 50902 (CPI by ECOICOP groups), 4247 (population by province and sex), "
            "4076 (EPA unemployment rates), 30678 (GDP at market prices).\n\n"
            "Use nult to limit to the latest N periods, tv to filter by VARIABLE_ID:VALUE_ID "
            "and date for a YYYYMMDD:YYYYMMDD range. Find table ids with ine_tablas_operacion."
        ),
        input_schema=_object_schema(
            {
                "idTabla": _string(TABLE_ID),
                "nult": _number("Number of latest periods (e.g. 12 for a year of monthly data)"),
                "det": _det_schema(),
                "tip": _tip_schema(),
                "tv": _string("Variable filter (format VARIABLE_ID:VALUE_ID), e.g. \"3:6\""),
                "date": _string("Date range (format YYYYMMDD:YYYYMMDD), e.g. \"20230101:20231231\""),
            },
            required=("idTabla",),
        ),
        handler=ine_datos_tabla,
        path_params=("idTabla",),
    ),
    ToolDefinition(
        name="ine_datos_serie",
        description=(
            "Fetch the historical data points of one time series.\n\n"
            "Examples: IPC251856 (general CPI), EPA17 (national unemployment rate), "
            "DPOP163 (total population). Find series codes with ine_series_operacion or ine_series_tabla."
        ),
        input_schema=_object_schema(
            {
                "idSerie": _string(SERIES_ID),
                "nult": _number("Number of latest periods"),
                "det": _det_schema(),
                "tip": _tip_schema(),
                "date": _string("Date range (format YYYYMMDD:YYYYMMDD)"),
            },
            required=("idSerie",),
        ),
        handler=ine_datos_serie,
        path_params=("idSerie",),
    ),
    ToolDefinition(
        name="ine_datos_metadata_operacion",
        description=(
            "Fetch series data of an operation selected through metadata filters (up to 5 groups).\n\n"
            "Example: CPI for food in Madrid is idOperacion=\"IPC\", g1=\"762:244074\", g2=\"70:9264\".\n"
            "Periodicity p: 1=monthly, 3=quarterly, 6=half-yearly, 12=yearly. Variable and value ids "
            "come from ine_variables_operacion and ine_valores_variable_operacion."
        ),
        input_schema=_object_schema(
            {
                "idOperacion": _string(OPERATION_ID),
                "p": _number("Periodicity: 1=monthly, 3=quarterly, 6=half-yearly, 12=yearly"),
                "nult": _number("Number of latest periods"),
                "det": _det_schema(),
                "tip": _tip_schema(),
                **_metadata_filters(),
            },
            required=("idOperacion",),
        ),
        handler=ine_datos_metadata_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_operaciones_disponibles",
        description=(
            "MAIN discovery tool: list every statistical operation published by INE. Use it first.\n\n"
            "Relevant operations: IPC (CPI), EPA (labour force), PIB/CNE (national accounts), "
            "CIFRAS_POB (population), ECV (living conditions), DEFUNCIONES/NACIMIENTOS, "
            "COMERCIO_EXT, TURISMO, HIPOTECAS, SOCIEDADES.\n"
            "The \"Codigo\" field of each entry is the code the other tools expect."
        ),
        input_schema=_object_schema(
            {
                "det": _det_schema("Detail level: 0=basic (Id, code, name), 1=medium, 2=full"),
                "geo": _geo_schema("0=national statistics, 1=statistics with geographic breakdown"),
                "page": _number("Page number (500 items per page, default 1)"),
            }
        ),
        handler=ine_operaciones_disponibles,
    ),
    ToolDefinition(
        name="ine_operacion",
        description=(
            "Fetch the metadata of one statistical operation: name, periodicity, start date, "
            "IOE code and publication details. Accepts codes such as \"IPC\" or numeric ids."
        ),
        input_schema=_object_schema(
            {"idOperacion": _string(OPERATION_ID), "det": _det_schema()},
            required=("idOperacion",),
        ),
        handler=ine_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_variables",
        description=(
            "List every statistical variable (the dimensions that characterise the data).\n\n"
            "Common variables: 3 (territory), 70 (provinces), 762 (ECOICOP groups), 547 (sex), "
            "18 (age), 349 (economic activity). They are used in tv filters as VARIABLE_ID:VALUE_ID."
        ),
        input_schema=_object_schema({"page": _number("Result page (500 per page)")}),
        handler=ine_variables,
    ),
    ToolDefinition(
        name="ine_variables_operacion",
        description="List the variables used by one statistical operation.",
        input_schema=_object_schema(
            {"idOperacion": _string(OPERATION_ID), "page": _number("Result page")},
            required=("idOperacion",),
        ),
        handler=ine_variables_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_valores_variable",
        description=(
            "List every value of one variable, e.g. provinces for variable 70 or sexes for 547. "
            "The \"Id\" of each value is used in VARIABLE_ID:VALUE_ID filters."
        ),
        input_schema=_object_schema(
            {
                "idVariable": _string("Numeric variable id (e.g. \"70\" for provinces). See ine_variables."),
                "det": _det_schema(),
                "clasif": _number("Classification id, to restrict values to one classification"),
            },
            required=("idVariable",),
        ),
        handler=ine_valores_variable,
        path_params=("idVariable",),
    ),
    ToolDefinition(
        name="ine_valores_variable_operacion",
        description=(
            "List the values of a variable within one operation only. More precise than "
            "ine_valores_variable; e.g. idOperacion=\"IPC\", idVariable=\"762\" gives the CPI product groups."
        ),
        input_schema=_object_schema(
            {
                "idVariable": _string("Variable id. See ine_variables_operacion."),
                "idOperacion": _string(OPERATION_ID),
                "det": _det_schema(),
            },
            required=("idVariable", "idOperacion"),
        ),
        handler=ine_valores_variable_operacion,
        path_params=("idVariable", "idOperacion"),
    ),
    ToolDefinition(
        name="ine_tablas_operacion",
        description=(
            "List the data tables published for one operation. The \"Id\" of each table "
            "is what ine_datos_tabla expects."
        ),
        input_schema=_object_schema(
            {
                "idOperacion": _string(OPERATION_ID),
                "det": _det_schema(),
                "geo": _geo_schema("0=national tables, 1=tables with geographic breakdown"),
                "tip": _tip_schema(("A",)),
            },
            required=("idOperacion",),
        ),
        handler=ine_tablas_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_grupos_tabla",
        description=(
            "List the selection groups (dimensions) that structure a table. "
            "Use a group id with ine_valores_grupos_tabla to see its values."
        ),
        input_schema=_object_schema({"idTabla": _string(TABLE_ID)}, required=("idTabla",)),
        handler=ine_grupos_tabla,
        path_params=("idTabla",),
    ),
    ToolDefinition(
        name="ine_valores_grupos_tabla",
        description="List the values available for one selection group of a table.",
        input_schema=_object_schema(
            {
                "idTabla": _string(TABLE_ID),
                "idGrupo": _string("Group id, from ine_grupos_tabla"),
                "det": _det_schema(),
            },
            required=("idTabla", "idGrupo"),
        ),
        handler=ine_valores_grupos_tabla,
        path_params=("idTabla", "idGrupo"),
    ),
    ToolDefinition(
        name="ine_serie",
        description=(
            "Fetch the metadata of one series (name, periodicity, unit, scale, operation). "
            "Use ine_datos_serie for its data points."
        ),
        input_schema=_object_schema(
            {"idSerie": _string(SERIES_ID), "det": _det_schema(), "tip": _tip_schema()},
            required=("idSerie",),
        ),
        handler=ine_serie,
        path_params=("idSerie",),
    ),
    ToolDefinition(
        name="ine_series_operacion",
        description=(
            "List the time series of one operation. Some operations have thousands of series; "
            "use page to paginate. The \"COD\" field is the code for ine_datos_serie."
        ),
        input_schema=_object_schema(
            {
                "idOperacion": _string(OPERATION_ID),
                "det": _det_schema(),
                "tip": _tip_schema(),
                "page": _number("Result page"),
            },
            required=("idOperacion",),
        ),
        handler=ine_series_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_valores_serie",
        description="List the variables and values that define one series.",
        input_schema=_object_schema(
            {"idSerie": _string(SERIES_ID), "det": _det_schema()},
            required=("idSerie",),
        ),
        handler=ine_valores_serie,
        path_params=("idSerie",),
    ),
    ToolDefinition(
        name="ine_series_tabla",
        description="List the series contained in one table, optionally filtered with tv.",
        input_schema=_object_schema(
            {
                "idTabla": _string(TABLE_ID),
                "det": _det_schema(),
                "tip": _tip_schema(),
                "tv": _string("Variable filter (format VARIABLE_ID:VALUE_ID)"),
            },
            required=("idTabla",),
        ),
        handler=ine_series_tabla,
        path_params=("idTabla",),
    ),
    ToolDefinition(
        name="ine_serie_metadata_operacion",
        description=(
            "Find the series of an operation that match metadata filters (g1..g5). Like "
            "ine_datos_metadata_operacion but returns series instead of data, e.g. "
            "idOperacion=\"IPC\", g1=\"762:244082\", g2=\"70:8\"."
        ),
        input_schema=_object_schema(
            {
                "idOperacion": _string(OPERATION_ID),
                "p": _number("Periodicity: 1=monthly, 3=quarterly, 12=yearly"),
                "det": _det_schema(),
                "tip": _tip_schema(),
                **_metadata_filters(),
            },
            required=("idOperacion",),
        ),
        handler=ine_serie_metadata_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_periodicidades",
        description="List the periodicities used by INE (1=monthly, 3=quarterly, 6=half-yearly, 12=yearly).",
        input_schema=_object_schema({}),
        handler=ine_periodicidades,
    ),
    ToolDefinition(
        name="ine_publicaciones",
        description=(
            "List every statistical publication. Use ine_publicacion_fecha_publicacion "
            "for the release dates of one publication."
        ),
        input_schema=_object_schema({"det": _det_schema(), "tip": _tip_schema(("A",))}),
        handler=ine_publicaciones,
    ),
    ToolDefinition(
        name="ine_publicaciones_operacion",
        description="List the publications associated with one statistical operation.",
        input_schema=_object_schema(
            {"idOperacion": _string(OPERATION_ID), "det": _det_schema(), "tip": _tip_schema(("A",))},
            required=("idOperacion",),
        ),
        handler=ine_publicaciones_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_publicacion_fecha_publicacion",
        description="Fetch the release calendar of one publication: past and scheduled dates.",
        input_schema=_object_schema(
            {
                "idPublicacion": _string(
                    "Publication id, from ine_publicaciones or ine_publicaciones_operacion"
                ),
                "det": _det_schema(),
                "tip": _tip_schema(("A",)),
            },
            required=("idPublicacion",),
        ),
        handler=ine_publicacion_fecha_publicacion,
        path_params=("idPublicacion",),
    ),
    ToolDefinition(
        name="ine_clasificaciones",
        description=(
            "List the statistical classifications used by INE (CNAE, ECOICOP, CNO, NUTS, CIE...)."
        ),
        input_schema=_object_schema({}),
        handler=ine_clasificaciones,
    ),
    ToolDefinition(
        name="ine_clasificaciones_operacion",
        description="List the classifications used by one statistical operation.",
        input_schema=_object_schema({"idOperacion": _string(OPERATION_ID)}, required=("idOperacion",)),
        handler=ine_clasificaciones_operacion,
        path_params=("idOperacion",),
    ),
    ToolDefinition(
        name="ine_valores_hijos",
        description=(
            "List the children of a value in a hierarchical variable, e.g. the provinces "
            "of a region (territory: Spain > regions > provinces > municipalities)."
        ),
        input_schema=_object_schema(
            {
                "idVariable": _string("Id of the hierarchical variable"),
                "idValor": _string("Id of the parent value"),
                "det": _det_schema(),
            },
            required=("idVariable", "idValor"),
        ),
        handler=ine_valores_hijos,
        path_params=("idVariable", "idValor"),
    ),
]

TOOL_REGISTRY: Dict[str, ToolDefinition] = {tool.name: tool for tool in _DEFINITIONS}


def list_tools() -> List[Dict[str, Any]]:
    """Return the tool descriptors in catalog order."""
    return [tool.descriptor() for tool in TOOL_REGISTRY.values()]


class UnknownToolError(LookupError):
    """Raised when a call names a tool that is not in the catalog."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class ToolDispatcher:
    """Routes tool calls to their handler around one shared upstream client."""

    def __init__(
        self,
        client: IneApiClient,
        *,
        registry: Optional[Mapping[str, ToolDefinition]] = None,
        metrics: Optional[MetricsRecorder] = None,
    ) -> None:
        self.client = client
        self.registry = registry if registry is not None else TOOL_REGISTRY
        self.metrics = metrics or default_metrics

    def list_tools(self) -> List[Dict[str, Any]]:
        return [tool.descriptor() for tool in self.registry.values()]

    async def invoke(
        self,
        tool_name: str,
        args: Optional[Mapping[str, Any]] = None,
        *,
        request_id: Optional[str] = None,
    ) -> UpstreamResult:
        """
        Run one tool against the upstream API.

        Raises:
            UnknownToolError: if ``tool_name`` is not registered. Upstream
                failures are not raised; they come back as failure results.
        """
        tool = self.registry.get(tool_name)
        if tool is None:
            raise UnknownToolError(tool_name)

        arguments = dict(args or {})
        language = arguments.get(LANGUAGE_KEY) or DEFAULT_LANGUAGE
        result = await tool.handler(arguments, client=self.client, language=str(language))
        self._log_result(tool_name, result, request_id)
        return result

    def _log_result(self, tool_name: str, result: UpstreamResult, request_id: Optional[str]) -> None:
        if result.success:
            logger.info(
                "tool=%s outcome=success request_id=%s",
                tool_name,
                request_id,
                extra={"tool": tool_name, "request_id": request_id},
            )
        else:
            logger.warning(
                "tool=%s outcome=error error=%s request_id=%s",
                tool_name,
                result.error,
                request_id,
                extra={"tool": tool_name, "request_id": request_id, "error": result.error},
            )
        self.metrics.record_tool(tool_name, success=result.success)
