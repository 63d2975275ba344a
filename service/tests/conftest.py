"""Shared pytest fixtures for relay bot tests."""

import json
from typing import Callable, Union

import httpx
import pytest

from relaybot.config import Settings
from relaybot.telegram_bot.bot import RelayBot

TEST_BOT_TOKEN = "123456:TEST-token"
TEST_CHAT_ID = 4242

TELEGRAM_HOST = "api.telegram.org"
PPLX_HOST = "api.perplexity.ai"
LOGIN_HOST = "login.microsoftonline.com"
GRAPH_HOST = "graph.microsoft.com"

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def completion_response(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


class FakeUpstream:
    """
    Stands in for every external API via httpx.MockTransport.

    Routes are matched newest first on (method, host, path suffix); a
    responder is either a ready Response or a function of the request.
    Unrouted requests get a Telegram-style 404.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, str, str, Responder]] = []

    def on(self, method: str, host: str, path_suffix: str, responder: Responder) -> None:
        self._routes.insert(0, (method, host, path_suffix, responder))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, host, suffix, responder in self._routes:
            if request.method == method and request.url.host == host and request.url.path.endswith(suffix):
                return responder(request) if callable(responder) else responder
        return httpx.Response(404, json={"ok": False, "description": "Not Found"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def calls(self, path_suffix: str, host: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.path.endswith(path_suffix) and (host is None or r.url.host == host)
        ]

    def sent_messages(self) -> list[dict]:
        return [json.loads(r.content) for r in self.calls("/sendMessage", TELEGRAM_HOST)]

    def sent_texts(self) -> list[str]:
        return [m["text"] for m in self.sent_messages()]


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    ok = httpx.Response(200, json={"ok": True, "result": True})
    fake.on("POST", TELEGRAM_HOST, "/sendMessage", ok)
    fake.on("POST", TELEGRAM_HOST, "/sendChatAction", ok)
    fake.on("POST", TELEGRAM_HOST, "/setWebhook", ok)
    fake.on("POST", PPLX_HOST, "/chat/completions", completion_response("Hi there"))
    return fake


@pytest.fixture
def onedrive_routes(upstream):
    """Token and upload endpoints that succeed."""
    upstream.on(
        "POST", LOGIN_HOST, "/oauth2/v2.0/token",
        httpx.Response(200, json={"access_token": "graph-token", "expires_in": 3600, "token_type": "Bearer"}),
    )
    upstream.on("PUT", GRAPH_HOST, ":/content", httpx.Response(201, json={"id": "item-1"}))
    return upstream


@pytest.fixture
def settings(tmp_path):
    return Settings(
        telegram_bot_token=TEST_BOT_TOKEN,
        telegram_webhook_secret="",
        pplx_api_key="pplx-test-key",
        server_url="https://relay.example.com",
        data_dir=str(tmp_path / "data"),
        onedrive_client_id="",
        onedrive_client_secret="",
        onedrive_tenant_id="",
        onedrive_user_id="",
        _env_file=None,
    )


@pytest.fixture
def onedrive_settings(settings):
    return settings.model_copy(update={
        "onedrive_client_id": "client-id",
        "onedrive_client_secret": "client-secret",
        "onedrive_tenant_id": "tenant-id",
        "onedrive_user_id": "user@example.com",
        "onedrive_folder": "TelegramBot",
    })


@pytest.fixture
def bot(settings, upstream):
    return RelayBot.from_settings(settings, http_client=upstream.client())


@pytest.fixture
def onedrive_bot(onedrive_settings, onedrive_routes):
    return RelayBot.from_settings(onedrive_settings, http_client=onedrive_routes.client())


def text_update(text: str, chat_id: int = TEST_CHAT_ID) -> dict:
    return {"update_id": 1, "message": {"message_id": 10, "chat": {"id": chat_id, "type": "private"}, "text": text}}
