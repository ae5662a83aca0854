import os

import pytest
import pytest_asyncio

from ine_mcp.ine_api import IneApiClient
from ine_mcp.mcp import ToolDispatcher

LIVE = os.getenv("LIVE_INE") in {"1", "true", "yes"}
SAMPLE_OPERATION = os.getenv("INE_SAMPLE_OPERATION", "IPC")
SAMPLE_TABLE = os.getenv("INE_SAMPLE_TABLE", "50902")


pytestmark = pytest.mark.skipif(not LIVE, reason="Live INE integration tests are disabled")


@pytest_asyncio.fixture
async def live_dispatcher():
    client = IneApiClient()
    yield ToolDispatcher(client)
    await client.aclose()


@pytest.mark.asyncio
async def test_live_periodicidades(live_dispatcher):
    result = await live_dispatcher.invoke("ine_periodicidades", {})
    assert result.success is True
    assert isinstance(result.data, list)


@pytest.mark.asyncio
async def test_live_operacion(live_dispatcher):
    result = await live_dispatcher.invoke("ine_operacion", {"idOperacion": SAMPLE_OPERATION})
    assert result.success is True


@pytest.mark.asyncio
async def test_live_datos_tabla_latest_period(live_dispatcher):
    result = await live_dispatcher.invoke("ine_datos_tabla", {"idTabla": SAMPLE_TABLE, "nult": 1})
    assert result.success is True
