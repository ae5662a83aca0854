import os
import sys

import httpx
import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from ine_mcp.config import IneConfig  # noqa: E402
from ine_mcp.ine_api import IneApiClient  # noqa: E402
from ine_mcp.mcp import ToolDispatcher  # noqa: E402
from ine_mcp.metrics import default_metrics  # noqa: E402

TEST_BASE_URL = "https://servicios.ine.es/wstempus/js"


class FakeUpstream:
    """httpx.MockTransport handler that records requests and replays one canned answer."""

    def __init__(self, status_code: int = 200, body=None, *, raw: bytes | None = None):
        self.status_code = status_code
        self.body = [] if body is None else body
        self.raw = raw
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raw is not None:
            return httpx.Response(self.status_code, content=self.raw)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_path(self) -> str:
        """Request path relative to the API root, e.g. ``/ES/PERIODICIDADES``."""
        path = self.requests[-1].url.path
        return path[len("/wstempus/js"):]

    @property
    def last_query(self) -> dict:
        return dict(self.requests[-1].url.params)


def build_client(handler, **config_overrides) -> IneApiClient:
    config = IneConfig(base_url=TEST_BASE_URL, **config_overrides)
    async_client = httpx.AsyncClient(base_url=TEST_BASE_URL, transport=httpx.MockTransport(handler))
    return IneApiClient(config, async_client=async_client)


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture
def upstream():
    return FakeUpstream(200, [{"Id": 1, "Nombre": "Mensual"}])


@pytest.fixture
def ine_client(upstream):
    return build_client(upstream)


@pytest.fixture
def dispatcher(ine_client):
    return ToolDispatcher(ine_client)
