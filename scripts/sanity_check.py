"""Minimal live sanity checks against the public INE API."""

from __future__ import annotations

import asyncio
import json
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from ine_mcp.ine_api import IneApiClient  # noqa: E402
from ine_mcp.mcp import ToolDispatcher  # noqa: E402

# Override via env to probe other resources.
SAMPLE_OPERATION = os.getenv("INE_SAMPLE_OPERATION", "IPC")
SAMPLE_TABLE = os.getenv("INE_SAMPLE_TABLE", "50902")
PREVIEW_CHARS = 300


def _preview(result) -> str:
    if not result.success:
        return f"ERROR {result.error}"
    return json.dumps(result.data, ensure_ascii=False)[:PREVIEW_CHARS]


async def main() -> None:
    client = IneApiClient()
    dispatcher = ToolDispatcher(client)
    try:
        print("Periodicities:", _preview(await dispatcher.invoke("ine_periodicidades")))
        print("Operation:", _preview(await dispatcher.invoke("ine_operacion", {"idOperacion": SAMPLE_OPERATION})))
        print(
            "Tables of operation:",
            _preview(await dispatcher.invoke("ine_tablas_operacion", {"idOperacion": SAMPLE_OPERATION})),
        )
        print(
            "Table data (nult=1):",
            _preview(await dispatcher.invoke("ine_datos_tabla", {"idTabla": SAMPLE_TABLE, "nult": 1})),
        )
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
