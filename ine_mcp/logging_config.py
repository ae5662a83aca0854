"""Process-wide logging setup. Log records always go to stderr."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

from ine_mcp.config import IneConfig, default_config

EXTRA_FIELDS = ("tool", "request_id", "session_id", "error")
PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def resolve_level(level_name: str) -> int:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def build_handler(log_format: str) -> logging.Handler:
    # stdout carries protocol frames in stdio mode.
    handler = logging.StreamHandler(sys.stderr)
    if log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def configure_logging(config: Optional[IneConfig] = None) -> None:
    config = config or default_config
    logging.basicConfig(
        level=resolve_level(config.log_level),
        handlers=[build_handler(config.log_format)],
        force=True,
    )
