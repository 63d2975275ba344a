"""
Telegram Bot API client.

Raw HTTP calls against api.telegram.org; the bot token is embedded in the
URL path. Sending helpers never raise so a failed outbound message cannot
abort handling of an update.
"""

from typing import Any, Dict, Optional

from relaybot.errors import FileResolutionError, RelayError
from relaybot.http_client import HttpClient
from relaybot.logging_config import bot_logger as logger

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramClient:
    """Client for the subset of the Bot API the relay uses."""

    def __init__(self, bot_token: str, http: HttpClient, api_base: str = TELEGRAM_API_BASE):
        self.http = http
        self.api_url = f"{api_base}/bot{bot_token}"
        self.file_url = f"{api_base}/file/bot{bot_token}"

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.http.request_json("POST", f"{self.api_url}/{method}", json=payload)

    async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str] = "Markdown") -> bool:
        """
        Send message to a Telegram chat.

        Args:
            chat_id: Telegram chat ID
            text: Message text
            parse_mode: Parse mode (Markdown by default, None for plain text)

        Returns:
            True if Telegram accepted the message
        """
        payload = {
            "chat_id": chat_id,
            "text": text
        }

        if parse_mode:
            payload["parse_mode"] = parse_mode

        try:
            data = await self._call("sendMessage", payload)
        except RelayError as e:
            logger.error(f"sendMessage error: {e}")
            return False

        if not data.get("ok"):
            logger.error(f"sendMessage error: {data}")
            return False
        return True

    async def send_chat_action(self, chat_id: int, action: str = "typing") -> bool:
        """
        Send chat action (typing indicator).

        Args:
            chat_id: Telegram chat ID
            action: Action type (typing, upload_document, etc.)
        """
        try:
            data = await self._call("sendChatAction", {"chat_id": chat_id, "action": action})
        except RelayError as e:
            logger.error(f"sendChatAction error: {e}")
            return False

        if not data.get("ok"):
            logger.error(f"sendChatAction error: {data}")
            return False
        return True

    async def get_file(self, file_id: str) -> str:
        """
        Resolve an opaque file id to a download path.

        Raises:
            FileResolutionError: Telegram reported failure or returned no path
        """
        try:
            data = await self._call("getFile", {"file_id": file_id})
        except RelayError as e:
            raise FileResolutionError(f"getFile failed for {file_id}: {e}") from e

        file_path = (data.get("result") or {}).get("file_path") if data.get("ok") else None
        if not file_path:
            raise FileResolutionError(f"getFile failed for {file_id}: {data}")
        return file_path

    async def download_file(self, file_path: str) -> bytes:
        """Fetch the bytes behind a path returned by get_file."""
        return await self.http.request_bytes("GET", f"{self.file_url}/{file_path}")

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> Dict[str, Any]:
        """Register the webhook URL with Telegram."""
        payload = {"url": url}
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload)
