"""
Tests for the HTTP surface: webhook, health and save endpoints.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import PPLX_HOST, TEST_BOT_TOKEN, TEST_CHAT_ID, text_update
from relaybot.main import create_app
from relaybot.services.completion import UPSTREAM_ERROR_REPLY
from relaybot.telegram_bot.handlers import START_TEXT

WEBHOOK = f"/webhook/{TEST_BOT_TOKEN}"


@pytest.fixture
def app(settings, upstream):
    return create_app(settings, http_client=upstream.client())


@pytest.fixture
def client(app):
    return TestClient(app)


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "Telegram + Perplexity bot is running"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestWebhook:

    def test_start_scenario(self, client, upstream):
        response = client.post(WEBHOOK, json={"message": {"chat": {"id": TEST_CHAT_ID}, "text": "/start"}})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert upstream.sent_texts() == [START_TEXT]

    def test_start_without_chat_still_acknowledged(self, client, upstream):
        response = client.post(WEBHOOK, json={"message": {"text": "/start"}})

        assert response.status_code == 200
        assert upstream.sent_texts() == []

    def test_text_scenario(self, client, upstream, app):
        response = client.post(WEBHOOK, json=text_update("hello"))

        assert response.status_code == 200
        assert upstream.sent_texts() == ["Hi there"]
        log = app.state.bot.message_log.path.read_text(encoding="utf-8")
        assert "category:other" in log
        assert 'text:"hello"' in log

    def test_upstream_503_still_200(self, client, upstream):
        upstream.on("POST", PPLX_HOST, "/chat/completions", httpx.Response(503, text="down"))
        response = client.post(WEBHOOK, json=text_update("hello"))

        assert response.status_code == 200
        assert upstream.sent_texts() == [UPSTREAM_ERROR_REPLY]

    def test_plain_webhook_path(self, client, upstream):
        response = client.post("/webhook", json=text_update("/start"))

        assert response.status_code == 200
        assert upstream.sent_texts() == [START_TEXT]

    def test_wrong_token_forbidden(self, client, upstream):
        response = client.post("/webhook/not-the-token", json=text_update("/start"))

        assert response.status_code == 403
        assert upstream.requests == []

    def test_empty_update(self, client, upstream):
        response = client.post(WEBHOOK, json={})

        assert response.status_code == 200
        assert upstream.requests == []

    def test_non_json_body_acknowledged(self, client, upstream):
        response = client.post(WEBHOOK, content=b"not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 200
        assert upstream.requests == []

    def test_unhandled_exception_returns_500(self, client, app, monkeypatch):
        async def broken_ask(prompt):
            raise RuntimeError("bug")

        monkeypatch.setattr(app.state.bot.completion, "ask", broken_ask)
        response = client.post(WEBHOOK, json=text_update("hello"))

        assert response.status_code == 500


class TestWebhookSecret:

    @pytest.fixture
    def client(self, settings, upstream):
        secured = settings.model_copy(update={"telegram_webhook_secret": "s3cret"})
        return TestClient(create_app(secured, http_client=upstream.client()))

    def test_missing_secret_forbidden(self, client, upstream):
        response = client.post(WEBHOOK, json=text_update("/start"))

        assert response.status_code == 403
        assert upstream.requests == []

    def test_wrong_secret_forbidden(self, client):
        response = client.post(
            WEBHOOK, json=text_update("/start"),
            headers={"X-Telegram-Bot-Api-Secret-Token": "guess"},
        )
        assert response.status_code == 403

    def test_correct_secret(self, client, upstream):
        response = client.post(
            WEBHOOK, json=text_update("/start"),
            headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
        )
        assert response.status_code == 200
        assert upstream.sent_texts() == [START_TEXT]


class TestSave:

    def test_save_json(self, client, settings):
        response = client.post("/save", json={"filename": "profile", "data": {"name": "Ann", "tags": [1, 2]}})

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["path"].endswith("profile.json")
        with open(body["path"], encoding="utf-8") as f:
            assert json.load(f) == {"name": "Ann", "tags": [1, 2]}

    def test_filename_sanitized(self, client, settings):
        response = client.post("/save", json={"filename": "../../etc/cfg.json", "data": [1]})

        assert response.status_code == 200
        assert response.json()["path"].endswith("data/cfg.json")

    def test_missing_filename(self, client):
        response = client.post("/save", json={"data": {"a": 1}})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_write_failure(self, client, app, monkeypatch):
        def broken_save(filename, data):
            raise OSError("read-only filesystem")

        monkeypatch.setattr(app.state.bot.files, "save_json", broken_save)
        response = client.post("/save", json={"filename": "x", "data": 1})

        assert response.status_code == 500
        assert response.json() == {"error": "read-only filesystem"}


class TestLifecycle:

    def test_startup_registers_webhook(self, app, upstream):
        with TestClient(app):
            pass

        body = json.loads(upstream.calls("/setWebhook")[0].content)
        assert body["url"] == f"https://relay.example.com{WEBHOOK}"

    def test_shutdown_closes_http_client(self, app):
        with TestClient(app):
            assert not app.state.bot.http.client.is_closed

        assert app.state.bot.http.client.is_closed


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
