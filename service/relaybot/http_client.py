"""
Thin wrapper over httpx for outbound calls.

Every upstream (Telegram, Microsoft identity, Graph) goes through the same
helper so transport failures, non-2xx answers and unparseable bodies
surface as one small set of exceptions.
"""

import httpx
from typing import Any, Optional

from relaybot.errors import MalformedResponse, NetworkError, NonOkStatus


def create_http_client(timeout: float = 60.0) -> httpx.AsyncClient:
    """Create the process-wide async client."""
    return httpx.AsyncClient(timeout=timeout)


class HttpClient:
    """
    Performs a request and returns parsed JSON or raw bytes.

    Raises NetworkError, NonOkStatus or MalformedResponse.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or create_http_client()

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {_redact(url)} failed: {e}") from e

        if response.is_error:
            raise NonOkStatus(response.status_code, response.text, _redact(url))
        return response

    async def request_json(self, method: str, url: str, **kwargs) -> Any:
        response = await self._send(method, url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"{method} {_redact(url)} returned non-JSON body") from e

    async def request_bytes(self, method: str, url: str, **kwargs) -> bytes:
        response = await self._send(method, url, **kwargs)
        return response.content

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()


def _redact(url: str) -> str:
    # Bot API URLs embed the token in the path
    if "/bot" in url:
        head, _, tail = url.partition("/bot")
        _, _, rest = tail.partition("/")
        return f"{head}/bot<token>/{rest}"
    return url
