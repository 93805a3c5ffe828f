"""
Integration tests for API endpoints (api/main.py)
"""
import time
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from ai_providers.base import ProviderConnectionError
from api.main import app, get_notifier, get_orchestrator
from core.scraper import ArticleExtractionError, ArticleFetchError


def wait_until_completed(client, translation_id, timeout=5.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        data = client.get(f"/api/translation-status/{translation_id}").json()
        if data["status"] != "processing":
            return data
        time.sleep(0.01)
    raise AssertionError(f"Translation {translation_id} did not finish")


@pytest.fixture
def client(orchestrator, notifier):
    """Test client wired to an orchestrator backed by the fake provider."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestHealth:

    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    def test_health(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["activeJobs"] == 0
        assert data["connectedClients"] == 0


class TestImport:

    def test_missing_url(self, client):
        response = client.get("/api/import")
        assert response.status_code == 400

    def test_invalid_url(self, client):
        response = client.get("/api/import", params={"url": "notaurl"})
        assert response.status_code == 400

    def test_success(self, client):
        with patch("api.main.fetch_article", AsyncMock(return_value="<p>Bonjour</p>")):
            response = client.get("/api/import", params={"url": "https://example.com/a"})
        assert response.status_code == 200
        assert response.json() == {"content": "<p>Bonjour</p>"}

    def test_fetch_failure(self, client):
        with patch("api.main.fetch_article", AsyncMock(side_effect=ArticleFetchError("HTTP 403", 403))):
            response = client.get("/api/import", params={"url": "https://example.com/a"})
        assert response.status_code == 502
        assert "Failed to import article" in response.json()["detail"]

    def test_no_content(self, client):
        with patch("api.main.fetch_article", AsyncMock(side_effect=ArticleExtractionError("empty"))):
            response = client.get("/api/import", params={"url": "https://example.com/a"})
        assert response.status_code == 404


class TestTranslate:

    @pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": "   "}])
    def test_empty_text(self, client, payload):
        response = client.post("/api/translate", json=payload)
        assert response.status_code == 400

    def test_fast_path(self, client, fake_provider):
        fake_provider.responder = lambda text: "<p>p Hello</p>"
        response = client.post("/api/translate", json={"text": "<p>Hola</p>"})
        assert response.status_code == 200
        assert response.json() == {"translatedText": "<p>Hello</p>"}

    def test_fast_path_failure(self, client, fake_provider):
        fake_provider.responder = lambda text: ProviderConnectionError("connection refused")
        response = client.post("/api/translate", json={"text": "<p>Hola</p>"})
        assert response.status_code == 502

    def test_job_path_and_polling(self, client, job_store, paragraph_document):
        html = paragraph_document(250)

        response = client.post("/api/translate", json={"text": html})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "processing"
        assert data["totalChunks"] == 3
        assert data["pollUrl"] == f"/api/translation-status/{data['translationId']}"

        final = wait_until_completed(client, data["translationId"])
        assert final["status"] == "completed"
        assert final["progress"] == {"completed": 3, "total": 3}
        assert [c["index"] for c in final["completedChunks"]] == [0, 1, 2]
        assert final["translatedText"] == html

    def test_unknown_translation(self, client):
        response = client.get("/api/translation-status/translation-unknown")
        assert response.status_code == 404
        assert response.json() == {"status": "not_found", "message": "Translation not found"}

    def test_deleted_translation_is_not_found(self, client, job_store, fake_scheduler, paragraph_document):
        data = client.post("/api/translate", json={"text": paragraph_document(20)}).json()
        wait_until_completed(client, data["translationId"])

        fake_scheduler.run_delayed()

        response = client.get(f"/api/translation-status/{data['translationId']}")
        assert response.status_code == 404


class TestWebSocket:

    def test_connect_and_ping(self, client):
        with client.websocket_connect("/ws") as ws:
            ack = ws.receive_json()
            assert ack["type"] == "connected"
            assert ack["clientId"]

            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "pong"

    def test_progress_is_pushed(self, client, paragraph_document):
        with client.websocket_connect("/ws") as ws:
            client_id = ws.receive_json()["clientId"]

            response = client.post(
                "/api/translate",
                json={"text": paragraph_document(250), "clientId": client_id},
            )
            translation_id = response.json()["translationId"]

            events = [ws.receive_json() for _ in range(5)]

        assert [e["type"] for e in events] == [
            "translation_start",
            "translation_update",
            "translation_update",
            "translation_update",
            "translation_complete",
        ]
        assert all(e["data"]["translationId"] == translation_id for e in events)
        assert [e["data"]["chunkIndex"] for e in events[1:4]] == [0, 1, 2]
