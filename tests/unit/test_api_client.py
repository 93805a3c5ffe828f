"""
Unit tests for api/client.py - TranslatorApiClient polling
"""
import json

import httpx
import pytest
from unittest.mock import AsyncMock

from api.client import (
    ApiClientError,
    TranslationJobError,
    TranslationNotFoundError,
    TranslationTimeoutError,
    TranslatorApiClient,
    should_poll,
)


def status(state, completed=0, total=3, text=None, error=None):
    return {
        "id": "translation-1",
        "status": state,
        "progress": {"completed": completed, "total": total},
        "completedChunks": [],
        "translatedText": text,
        "error": error,
    }


def make_client(handler):
    sleep = AsyncMock()
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TranslatorApiClient("http://translator.test", client=http, sleep=sleep), sleep


class TestShouldPoll:

    def test_every_tick_until_slowdown(self):
        assert all(should_poll(tick, 20) for tick in range(1, 21))

    def test_every_third_tick_after_slowdown(self):
        assert [tick for tick in range(21, 31) if should_poll(tick, 20)] == [23, 26, 29]


class TestEndpoints:

    @pytest.mark.asyncio
    async def test_translate_sends_client_id(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"translatedText": "<p>Hi</p>"})

        client, _ = make_client(handler)
        result = await client.translate("<p>Hola</p>", client_id="123-abcde")

        assert result == {"translatedText": "<p>Hi</p>"}
        assert seen["url"] == "http://translator.test/api/translate"
        assert seen["body"] == {"text": "<p>Hola</p>", "clientId": "123-abcde"}

    @pytest.mark.asyncio
    async def test_import_article(self):
        def handler(request):
            assert request.url.params["url"] == "https://example.com/a"
            return httpx.Response(200, json={"content": "<p>Article</p>"})

        client, _ = make_client(handler)
        assert await client.import_article("https://example.com/a") == "<p>Article</p>"

    @pytest.mark.asyncio
    async def test_error_detail_is_surfaced(self):
        client, _ = make_client(lambda request: httpx.Response(502, json={"detail": "Failed to import article: HTTP 403"}))
        with pytest.raises(ApiClientError) as exc_info:
            await client.import_article("https://example.com/a")
        assert exc_info.value.status_code == 502
        assert "HTTP 403" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client, _ = make_client(handler)
        with pytest.raises(ApiClientError) as exc_info:
            await client.health()
        assert exc_info.value.status_code is None


class TestWaitForTranslation:

    @pytest.mark.asyncio
    async def test_polls_until_completed(self):
        responses = iter([
            status("processing", 1),
            status("processing", 2),
            status("completed", 3, text="<p>Done</p>"),
        ])
        client, sleep = make_client(lambda request: httpx.Response(200, json=next(responses)))
        progress = []

        result = await client.wait_for_translation("translation-1", on_progress=progress.append)

        assert result["translatedText"] == "<p>Done</p>"
        assert [p["progress"]["completed"] for p in progress] == [1, 2, 3]
        assert sleep.await_count == 2
        sleep.assert_awaited_with(5.0)

    @pytest.mark.asyncio
    async def test_not_found(self):
        client, _ = make_client(lambda request: httpx.Response(
            404, json={"status": "not_found", "message": "Translation not found"}
        ))
        with pytest.raises(TranslationNotFoundError):
            await client.wait_for_translation("translation-gone")

    @pytest.mark.asyncio
    async def test_job_error(self):
        client, _ = make_client(lambda request: httpx.Response(200, json=status("error", error="boom")))
        with pytest.raises(TranslationJobError, match="boom"):
            await client.wait_for_translation("translation-1")

    @pytest.mark.asyncio
    async def test_bounded_polling(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=status("processing"))

        client, sleep = make_client(handler)
        with pytest.raises(TranslationTimeoutError):
            await client.wait_for_translation("translation-1", max_polls=25, slowdown_after=20)

        # 20 regular polls, then only tick 23 of ticks 21-25
        assert len(requests) == 21
        assert sleep.await_count == 24
