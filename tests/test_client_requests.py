import pytest

from conftest import FakeUpstream, build_client
from ine_mcp.ine_api import IneApiClient, build_request
from ine_mcp.ine_api.client import stringify_value
from ine_mcp.mcp import ToolDispatcher


class MockResponse:
    def __init__(self, status_code: int, json_body):
        self.status_code = status_code
        self._json = json_body

    def json(self):
        return self._json


class MockAsyncClient:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def get(self, path, params=None, headers=None):
        self.calls.append({"path": path, "params": params, "headers": headers})
        if not self.responses:
            raise RuntimeError("No mock responses")
        return self.responses.pop(0)

    async def aclose(self):
        return None


def test_build_request_without_segments_or_options():
    assert build_request("ES", "PERIODICIDADES") == ("/ES/PERIODICIDADES", {})


def test_build_request_excludes_identifying_keys_and_language():
    path, params = build_request(
        "ES",
        "DATOS_TABLA",
        segments=["50902"],
        options={"idTabla": "50902", "idioma": "ES", "nult": 3, "tip": "A"},
        consumed=["idTabla"],
    )
    assert path == "/ES/DATOS_TABLA/50902"
    assert params == {"nult": "3", "tip": "A"}


def test_build_request_two_segments_in_order():
    path, params = build_request(
        "EN",
        "VALORES_VARIABLEOPERACION",
        segments=["762", "IPC"],
        options={"idVariable": "762", "idOperacion": "IPC", "det": 2},
        consumed=["idVariable", "idOperacion"],
    )
    assert path == "/EN/VALORES_VARIABLEOPERACION/762/IPC"
    assert params == {"det": "2"}


def test_build_request_skips_missing_segments_and_none_options():
    path, params = build_request("ES", "OPERACION", segments=[None], options={"det": None})
    assert path == "/ES/OPERACION"
    assert params == {}


def test_build_request_keeps_positions_when_a_leading_segment_is_missing():
    path, _ = build_request("ES", "VALORES_HIJOS", segments=[None, "9264"])
    assert path == "/ES/VALORES_HIJOS//9264"


def test_build_request_drops_trailing_missing_segments():
    path, _ = build_request("ES", "VALORES_HIJOS", segments=["70", ""])
    assert path == "/ES/VALORES_HIJOS/70"


def test_build_request_quotes_segments():
    path, _ = build_request("ES", "SERIE", segments=["a/b c"])
    assert path == "/ES/SERIE/a%2Fb%20c"


def test_stringify_value_matches_json_rendering():
    assert stringify_value(True) == "true"
    assert stringify_value(False) == "false"
    assert stringify_value(3.0) == "3"
    assert stringify_value(2.5) == "2.5"
    assert stringify_value("20230101:20231231") == "20230101:20231231"


@pytest.mark.asyncio
async def test_periodicidades_sends_no_query():
    mock = MockAsyncClient([MockResponse(200, [{"Id": 1}])])
    client = IneApiClient(async_client=mock)
    result = await client.fetch_periodicidades()
    assert result.success is True
    assert result.data == [{"Id": 1}]
    assert mock.calls[0]["path"] == "/ES/PERIODICIDADES"
    assert mock.calls[0]["params"] is None


@pytest.mark.asyncio
async def test_headers_sent_on_every_request():
    mock = MockAsyncClient([MockResponse(200, {})])
    client = IneApiClient(async_client=mock)
    await client.fetch_operacion("IPC")
    headers = mock.calls[0]["headers"]
    assert headers["Accept"] == "application/json"
    assert headers["User-Agent"].startswith("ine-mcp-server/")


@pytest.mark.asyncio
async def test_datos_tabla_over_mock_transport():
    upstream = FakeUpstream(200, {"Nombre": "IPC"})
    client = build_client(upstream)
    result = await client.fetch_datos_tabla("50902", options={"idTabla": "50902", "nult": 3})
    assert result.success is True
    assert upstream.last_path == "/ES/DATOS_TABLA/50902"
    assert upstream.last_query == {"nult": "3"}


@pytest.mark.asyncio
async def test_valores_hijos_uses_two_segments():
    upstream = FakeUpstream(200, [])
    client = build_client(upstream)
    await client.fetch_valores_hijos(
        "70", "9264", options={"idVariable": "70", "idValor": "9264", "det": 1}, language="EN"
    )
    assert upstream.last_path == "/EN/VALORES_HIJOS/70/9264"
    assert upstream.last_query == {"det": "1"}


@pytest.mark.asyncio
async def test_grupos_tabla_takes_no_options():
    upstream = FakeUpstream(200, [])
    client = build_client(upstream)
    await client.fetch_grupos_tabla("50902")
    assert upstream.last_path == "/ES/GRUPOS_TABLA/50902"
    assert upstream.last_query == {}


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open():
    mock = MockAsyncClient([])
    client = IneApiClient(async_client=mock)
    await client.aclose()
    assert client._client is mock


@pytest.mark.asyncio
async def test_lazily_created_client_is_closed():
    client = IneApiClient()
    created = await client._get_client()
    assert str(created.base_url).startswith("https://servicios.ine.es/wstempus/js")
    await client.aclose()
    assert created.is_closed
    assert client._client is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "tool, arguments, expected_path",
    [
        ("ine_valores_hijos", {"idValor": "9264"}, "/ES/VALORES_HIJOS//9264"),
        ("ine_valores_variable_operacion", {"idOperacion": "IPC"}, "/ES/VALORES_VARIABLEOPERACION//IPC"),
        ("ine_valores_grupos_tabla", {"idGrupo": "110889"}, "/ES/VALORES_GRUPOSTABLA//110889"),
    ],
)
async def test_missing_first_key_keeps_second_in_place(tool, arguments, expected_path):
    upstream = FakeUpstream(200, [])
    dispatcher = ToolDispatcher(build_client(upstream))
    await dispatcher.invoke(tool, arguments)
    assert upstream.last_path == expected_path
