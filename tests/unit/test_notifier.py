"""
Unit tests for core/notifier.py - WebSocket ConnectionManager
"""
import json
import re

import pytest
from core.ids import generate_client_id, generate_translation_id
from core.job_store import JobStore, build_snapshot
from core.notifier import ConnectionManager


def make_snapshot(filled=1, total=3, result=None):
    store = JobStore()
    job = store.create("translation-1", total)
    for i in range(filled):
        job.fill_chunk(i, f"<p>{i}</p>")
    if result is not None:
        job.mark_completed(result, now=1.0)
    return build_snapshot(job)


class TestIds:

    def test_client_id_format(self):
        assert re.fullmatch(r"\d{13}-[0-9a-z]{5}", generate_client_id())

    def test_translation_id_format(self):
        assert re.fullmatch(r"translation-\d{13}-[0-9a-z]{8}", generate_translation_id())


class TestConnections:
    """Connect, disconnect and inbound messages."""

    @pytest.mark.asyncio
    async def test_connect_sends_ack(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)

        assert ws.accepted
        assert notifier.is_connected(client_id)
        assert ws.sent == [{
            "type": "connected",
            "clientId": client_id,
            "message": "Connection established",
        }]

    @pytest.mark.asyncio
    async def test_injected_ids_never_collide(self, make_websocket):
        ids = iter(["same", "same", "other"])
        manager = ConnectionManager(id_factory=lambda: next(ids))
        first = await manager.connect(make_websocket())
        second = await manager.connect(make_websocket())
        assert (first, second) == ("same", "other")

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self, notifier, make_websocket):
        client_id = await notifier.connect(make_websocket())
        assert notifier.disconnect(client_id) is True
        assert notifier.disconnect(client_id) is False
        assert len(notifier) == 0

    @pytest.mark.asyncio
    async def test_ping_is_answered(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)

        await notifier.handle_message(client_id, json.dumps({"type": "ping"}))

        pong = ws.of_type("pong")
        assert len(pong) == 1
        assert isinstance(pong[0]["timestamp"], int)

    @pytest.mark.asyncio
    async def test_non_json_is_ignored(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)
        await notifier.handle_message(client_id, "not json")
        assert len(ws.sent) == 1
        assert notifier.is_connected(client_id)


class TestHeartbeat:
    """Liveness rounds."""

    @pytest.mark.asyncio
    async def test_first_round_pings(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)

        await notifier.check_heartbeats()

        assert len(ws.of_type("ping")) == 1
        assert notifier.clients[client_id].is_alive is False

    @pytest.mark.asyncio
    async def test_silent_client_is_terminated(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)

        await notifier.check_heartbeats()
        await notifier.check_heartbeats()

        assert not notifier.is_connected(client_id)
        assert ws.closed

    @pytest.mark.asyncio
    async def test_any_message_keeps_client_alive(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)

        await notifier.check_heartbeats()
        await notifier.handle_message(client_id, '{"type": "pong"}')
        await notifier.check_heartbeats()

        assert notifier.is_connected(client_id)
        assert len(ws.of_type("ping")) == 2


class TestEvents:
    """Typed event delivery."""

    @pytest.mark.asyncio
    async def test_send_to_unknown_or_missing_client(self, notifier):
        assert await notifier.send_to_client(None, "translation_start", {}) is False
        assert await notifier.send_to_client("nobody", "translation_start", {}) is False

    @pytest.mark.asyncio
    async def test_failed_send_deregisters(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)
        ws.fail = True

        assert await notifier.send_to_client(client_id, "translation_start", {}) is False
        assert not notifier.is_connected(client_id)

    @pytest.mark.asyncio
    async def test_translation_update_payload(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)

        await notifier.send_translation_update(client_id, make_snapshot(filled=2), chunk_index=1)

        assert ws.of_type("translation_update") == [{
            "type": "translation_update",
            "data": {
                "translationId": "translation-1",
                "chunkIndex": 1,
                "totalChunks": 3,
                "text": "<p>1</p>",
                "progress": {"completed": 2, "total": 3},
            },
        }]

    @pytest.mark.asyncio
    async def test_start_complete_and_error_payloads(self, notifier, make_websocket):
        ws = make_websocket()
        client_id = await notifier.connect(ws)

        await notifier.send_translation_start(client_id, make_snapshot(filled=0))
        await notifier.send_translation_complete(client_id, make_snapshot(filled=3, result="<p>0</p><p>1</p><p>2</p>"))
        await notifier.send_error(client_id, "boom", translation_id="translation-1")

        start = ws.of_type("translation_start")[0]["data"]
        complete = ws.of_type("translation_complete")[0]["data"]
        error = ws.of_type("error")[0]["data"]

        assert start == {"translationId": "translation-1", "totalChunks": 3}
        assert complete["translatedText"] == "<p>0</p><p>1</p><p>2</p>"
        assert complete["translationId"] == "translation-1"
        assert error == {"message": "boom", "code": "TRANSLATION_FAILED", "translationId": "translation-1"}
