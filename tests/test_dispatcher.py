import pytest

from conftest import FakeUpstream, build_client
from ine_mcp.mcp import TOOL_REGISTRY, ToolDispatcher, UnknownToolError
from ine_mcp.metrics import default_metrics

TOOL_CALLS = [
    ("ine_datos_tabla", {"idTabla": "50902", "nult": 3}, "/ES/DATOS_TABLA/50902", {"nult": "3"}),
    ("ine_datos_serie", {"idSerie": "IPC251856", "nult": 12}, "/ES/DATOS_SERIE/IPC251856", {"nult": "12"}),
    (
        "ine_datos_metadata_operacion",
        {"idOperacion": "IPC", "p": 1, "g1": "762:244074"},
        "/ES/DATOS_METADATAOPERACION/IPC",
        {"p": "1", "g1": "762:244074"},
    ),
    ("ine_operaciones_disponibles", {"geo": 0}, "/ES/OPERACIONES_DISPONIBLES", {"geo": "0"}),
    ("ine_operacion", {"idOperacion": "EPA", "det": 2}, "/ES/OPERACION/EPA", {"det": "2"}),
    ("ine_variables", {"page": 2}, "/ES/VARIABLES", {"page": "2"}),
    ("ine_variables_operacion", {"idOperacion": "IPC"}, "/ES/VARIABLES_OPERACION/IPC", {}),
    ("ine_valores_variable", {"idVariable": "70", "clasif": 3}, "/ES/VALORES_VARIABLE/70", {"clasif": "3"}),
    (
        "ine_valores_variable_operacion",
        {"idVariable": "762", "idOperacion": "IPC"},
        "/ES/VALORES_VARIABLEOPERACION/762/IPC",
        {},
    ),
    ("ine_tablas_operacion", {"idOperacion": "IPC", "tip": "A"}, "/ES/TABLAS_OPERACION/IPC", {"tip": "A"}),
    ("ine_grupos_tabla", {"idTabla": "50902"}, "/ES/GRUPOS_TABLA/50902", {}),
    (
        "ine_valores_grupos_tabla",
        {"idTabla": "50902", "idGrupo": "110889"},
        "/ES/VALORES_GRUPOSTABLA/50902/110889",
        {},
    ),
    ("ine_serie", {"idSerie": "IPC251856", "tip": "AM"}, "/ES/SERIE/IPC251856", {"tip": "AM"}),
    ("ine_series_operacion", {"idOperacion": "IPC", "page": 1}, "/ES/SERIES_OPERACION/IPC", {"page": "1"}),
    ("ine_valores_serie", {"idSerie": "IPC251856"}, "/ES/VALORES_SERIE/IPC251856", {}),
    ("ine_series_tabla", {"idTabla": "50902", "tv": "3:6"}, "/ES/SERIES_TABLA/50902", {"tv": "3:6"}),
    (
        "ine_serie_metadata_operacion",
        {"idOperacion": "IPC", "g2": "70:8"},
        "/ES/SERIE_METADATAOPERACION/IPC",
        {"g2": "70:8"},
    ),
    ("ine_periodicidades", {}, "/ES/PERIODICIDADES", {}),
    ("ine_publicaciones", {"det": 1}, "/ES/PUBLICACIONES", {"det": "1"}),
    ("ine_publicaciones_operacion", {"idOperacion": "IPC"}, "/ES/PUBLICACIONES_OPERACION/IPC", {}),
    (
        "ine_publicacion_fecha_publicacion",
        {"idPublicacion": "8"},
        "/ES/PUBLICACIONFECHA_PUBLICACION/8",
        {},
    ),
    ("ine_clasificaciones", {}, "/ES/CLASIFICACIONES", {}),
    ("ine_clasificaciones_operacion", {"idOperacion": "IPC"}, "/ES/CLASIFICACIONES_OPERACION/IPC", {}),
    ("ine_valores_hijos", {"idVariable": "70", "idValor": "9264"}, "/ES/VALORES_HIJOS/70/9264", {}),
]


def test_every_catalog_tool_has_a_call_case():
    assert sorted(name for name, *_ in TOOL_CALLS) == sorted(TOOL_REGISTRY)


@pytest.mark.asyncio
@pytest.mark.parametrize("tool_name, args, expected_path, expected_query", TOOL_CALLS)
async def test_tool_maps_to_one_upstream_call(tool_name, args, expected_path, expected_query):
    upstream = FakeUpstream(200, {"ok": True})
    dispatcher = ToolDispatcher(build_client(upstream))
    result = await dispatcher.invoke(tool_name, args)
    assert result.success is True
    assert result.data == {"ok": True}
    assert len(upstream.requests) == 1
    assert upstream.last_path == expected_path
    assert upstream.last_query == expected_query


@pytest.mark.asyncio
async def test_unknown_tool_raises(dispatcher, upstream):
    with pytest.raises(UnknownToolError) as excinfo:
        await dispatcher.invoke("ine_no_existe", {})
    assert str(excinfo.value) == "Unknown tool: ine_no_existe"
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_lookup_is_case_sensitive(dispatcher):
    with pytest.raises(UnknownToolError):
        await dispatcher.invoke("INE_PERIODICIDADES", {})


@pytest.mark.asyncio
async def test_language_defaults_to_spanish(dispatcher, upstream):
    await dispatcher.invoke("ine_operacion", {"idOperacion": "IPC"})
    assert upstream.last_path == "/ES/OPERACION/IPC"


@pytest.mark.asyncio
async def test_language_passed_through(dispatcher, upstream):
    await dispatcher.invoke("ine_operacion", {"idOperacion": "IPC", "idioma": "EN"})
    assert upstream.last_path == "/EN/OPERACION/IPC"
    assert "idioma" not in upstream.last_query


@pytest.mark.asyncio
async def test_missing_identifier_is_not_validated(dispatcher, upstream):
    result = await dispatcher.invoke("ine_datos_tabla", {"nult": 1})
    assert result.success is True
    assert upstream.last_path == "/ES/DATOS_TABLA"


@pytest.mark.asyncio
async def test_option_free_tools_drop_extra_arguments(dispatcher, upstream):
    await dispatcher.invoke("ine_clasificaciones_operacion", {"idOperacion": "IPC", "det": 2})
    assert upstream.last_path == "/ES/CLASIFICACIONES_OPERACION/IPC"
    assert upstream.last_query == {}


@pytest.mark.asyncio
async def test_outcomes_recorded_in_metrics():
    ok_dispatcher = ToolDispatcher(build_client(FakeUpstream(200, [])))
    failing_dispatcher = ToolDispatcher(build_client(FakeUpstream(404, {})))
    await ok_dispatcher.invoke("ine_periodicidades", {})
    result = await failing_dispatcher.invoke("ine_operacion", {"idOperacion": "X"})
    assert result.success is False
    snapshot = default_metrics.snapshot()
    assert snapshot["tool_success"] == {"ine_periodicidades": 1}
    assert snapshot["tool_error"] == {"ine_operacion": 1}


def test_dispatcher_lists_catalog(dispatcher):
    assert [tool["name"] for tool in dispatcher.list_tools()] == list(TOOL_REGISTRY)
