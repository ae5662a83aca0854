"""
Configuration helpers for the INE MCP server.

This module centralizes base URL selection, listen ports, default timeouts,
and logging settings. Everything is read from the environment once, at import.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from ine_mcp import __version__

# Upstream connection settings
DEFAULT_BASE_URL = os.getenv("INE_BASE_URL", "https://servicios.ine.es/wstempus/js")
USER_AGENT = f"ine-mcp-server/{__version__}"

LANGUAGES = ("ES", "EN")
DEFAULT_LANGUAGE = "ES"

# Listen ports for the combined HTTP binding and the standalone SSE binding
DEFAULT_PORT = 3000
DEFAULT_SSE_PORT = 3001
DEFAULT_HOST = os.getenv("INE_MCP_HOST", "0.0.0.0")


def _load_float(env_var: str, default: float) -> float:
    raw_value = os.getenv(env_var)
    if raw_value:
        try:
            return float(raw_value)
        except ValueError:
            return default
    return default


def _load_timeout() -> float:
    return _load_float("INE_HTTP_TIMEOUT", 30.0)


def _load_port(default: int) -> int:
    """Return PORT from the environment, or ``default`` when unset or invalid."""
    raw_port = os.getenv("PORT")
    if raw_port:
        try:
            return int(raw_port)
        except ValueError:
            return default
    return default


DEFAULT_TIMEOUT = _load_timeout()
SSE_KEEPALIVE_SECONDS = _load_float("INE_MCP_SSE_KEEPALIVE", 15.0)
LOG_LEVEL = os.getenv("INE_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("INE_MCP_LOG_FORMAT", "json")  # json or plain


@dataclass(slots=True)
class IneConfig:
    """Runtime configuration for INE API access and the server bindings."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = USER_AGENT
    default_language: str = DEFAULT_LANGUAGE
    host: str = DEFAULT_HOST
    port: int = _load_port(DEFAULT_PORT)
    sse_port: int = _load_port(DEFAULT_SSE_PORT)
    sse_keepalive: float = SSE_KEEPALIVE_SECONDS
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT


default_config = IneConfig()
