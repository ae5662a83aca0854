import pytest

from ine_mcp import __main__ as cli
from ine_mcp import stdio


def test_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert args.stdio is False
    assert args.sse is False
    assert args.host is None
    assert args.port is None


def test_stdio_and_sse_are_exclusive():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["--stdio", "--sse"])


def test_main_runs_http_app(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    cli.main(["--port", "8123", "--host", "127.0.0.1"])
    from ine_mcp.server import app

    assert calls[0][0] is app
    assert calls[0][1]["port"] == 8123
    assert calls[0][1]["host"] == "127.0.0.1"


def test_main_runs_standalone_sse_app(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    cli.main(["--sse"])
    from ine_mcp.sse_server import app

    assert calls[0][0] is app
    assert calls[0][1]["port"] == cli.default_config.sse_port


def test_main_runs_stdio(monkeypatch):
    seen = []

    async def fake_serve(config=None):
        seen.append(config)

    monkeypatch.setattr(stdio, "serve_stdio", fake_serve)
    cli.main(["--stdio"])
    assert seen == [cli.default_config]
