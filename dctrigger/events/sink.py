"""Output sinks: where accepted records go"""

import json
import logging
from typing import Any, Protocol

import httpx
from rich.markup import escape

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    async def push(self, rows: list[dict[str, Any]]) -> None: ...

    async def close(self) -> None: ...


class WebhookSink:
    """POSTs each batch as a JSON array to the host's ingestion webhook"""

    def __init__(
        self,
        url: str,
        secret: str | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._headers = {"Content-Type": "application/json"}
        if secret:
            self._headers["X-Trigger-Secret"] = secret
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def push(self, rows: list[dict[str, Any]]) -> None:
        response = await self._http.post(
            self.url, content=json.dumps(rows, default=str), headers=self._headers
        )
        if response.status_code >= 400:
            logger.error(f"Sink rejected {len(rows)} row(s): {response.status_code}")
            logger.error(f"Response: {response.text[:500]}")
            response.raise_for_status()
        logger.debug(f"Delivered {len(rows)} row(s) to sink")

    async def close(self) -> None:
        await self._http.aclose()


class LogSink:
    """Logs each batch; used when no webhook is configured"""

    def __init__(self) -> None:
        self.pushed = 0

    async def push(self, rows: list[dict[str, Any]]) -> None:
        self.pushed += len(rows)
        for row in rows:
            logger.info(f"[cyan]{row.get('event')}[/cyan] {escape(json.dumps(row, default=str))}")

    async def close(self) -> None:
        return None


def build_sink(url: str | None, secret: str | None = None) -> OutputSink:
    if url:
        return WebhookSink(url, secret=secret)
    logger.warning("SINK_URL not set, records will only be logged")
    return LogSink()
