from ine_mcp.config import (
    DEFAULT_LANGUAGE,
    DEFAULT_PORT,
    DEFAULT_SSE_PORT,
    LANGUAGES,
    IneConfig,
    _load_float,
    _load_port,
    _load_timeout,
)


def test_load_timeout_invalid_env(monkeypatch):
    monkeypatch.setenv("INE_HTTP_TIMEOUT", "not-a-number")
    assert _load_timeout() == 30.0  # falls back to default on parse error


def test_load_timeout_valid_env(monkeypatch):
    monkeypatch.setenv("INE_HTTP_TIMEOUT", "5.5")
    assert _load_timeout() == 5.5


def test_load_timeout_unset(monkeypatch):
    monkeypatch.delenv("INE_HTTP_TIMEOUT", raising=False)
    assert _load_timeout() == 30.0


def test_load_float_keepalive(monkeypatch):
    monkeypatch.setenv("INE_MCP_SSE_KEEPALIVE", "2")
    assert _load_float("INE_MCP_SSE_KEEPALIVE", 15.0) == 2.0


def test_load_port(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert _load_port(DEFAULT_PORT) == 8080
    monkeypatch.setenv("PORT", "eighty")
    assert _load_port(DEFAULT_SSE_PORT) == DEFAULT_SSE_PORT
    monkeypatch.delenv("PORT")
    assert _load_port(DEFAULT_PORT) == 3000


def test_language_constants():
    assert LANGUAGES == ("ES", "EN")
    assert DEFAULT_LANGUAGE == "ES"


def test_config_overrides():
    cfg = IneConfig(base_url="http://mirror.local/js", timeout=3.0, sse_keepalive=1.0)
    assert cfg.base_url == "http://mirror.local/js"
    assert cfg.timeout == 3.0
    assert cfg.sse_keepalive == 1.0
    assert cfg.user_agent.startswith("ine-mcp-server/")
