"""Output sinks"""

import json

import httpx
import pytest

from dctrigger.events.sink import LogSink, WebhookSink, build_sink

ROWS = [{"event": "message_create", "message_id": "1", "content": "[b]hi[/b]"}]


@pytest.mark.asyncio
async def test_webhook_posts_json_array_with_secret():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    sink = WebhookSink("https://host.example/ingest", secret="s3cret", http=http)
    await sink.push(ROWS)
    await sink.close()

    (request,) = seen
    assert request.method == "POST"
    assert request.headers["X-Trigger-Secret"] == "s3cret"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == ROWS


@pytest.mark.asyncio
async def test_webhook_without_secret_sends_no_header():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    await WebhookSink("https://host.example/ingest", http=http).push(ROWS)

    assert "X-Trigger-Secret" not in seen[0].headers


@pytest.mark.asyncio
async def test_webhook_error_status_raises():
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="down"))
    )
    sink = WebhookSink("https://host.example/ingest", http=http)

    with pytest.raises(httpx.HTTPStatusError):
        await sink.push(ROWS)


@pytest.mark.asyncio
async def test_log_sink_counts_rows():
    sink = LogSink()
    await sink.push(ROWS)
    await sink.push(ROWS + ROWS)
    assert sink.pushed == 3


def test_build_sink():
    assert isinstance(build_sink(""), LogSink)
    assert isinstance(build_sink(None), LogSink)
    assert isinstance(build_sink("https://host.example/ingest", "x"), WebhookSink)
