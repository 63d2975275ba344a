"""
Main Telegram bot handler.

Wires the outbound clients, storage and message log together and routes
each webhook update to exactly one handler.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx

from relaybot.config import Settings
from relaybot.errors import RelayError
from relaybot.http_client import HttpClient, create_http_client
from relaybot.logging_config import bot_logger as logger
from relaybot.services.completion import CompletionClient
from relaybot.services.files import FileStore
from relaybot.services.memory import LOG_FILENAME, MessageLog, match_recall_query
from relaybot.services.onedrive import OneDriveClient

from .dispatcher import UpdateShape, detect_shape, parse_command, parse_update
from .handlers import (
    handle_command,
    handle_document_message,
    handle_empty_message,
    handle_photo_message,
    handle_recall_query,
    handle_text_message,
)
from .telegram_api import TelegramClient


@dataclass
class RelayBot:
    settings: Settings
    http: HttpClient
    telegram: TelegramClient
    completion: CompletionClient
    message_log: MessageLog
    files: FileStore
    onedrive: Optional[OneDriveClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "RelayBot":
        """Build the bot and its collaborators from configuration."""
        client = http_client or create_http_client(settings.http_timeout)
        http = HttpClient(client)
        data_dir = Path(settings.data_dir)

        onedrive = None
        if settings.onedrive_enabled:
            onedrive = OneDriveClient(
                http,
                client_id=settings.onedrive_client_id,
                client_secret=settings.onedrive_client_secret,
                tenant_id=settings.onedrive_tenant_id,
                user_id=settings.onedrive_user_id,
                folder=settings.onedrive_folder,
            )

        return cls(
            settings=settings,
            http=http,
            telegram=TelegramClient(settings.telegram_bot_token, http),
            completion=CompletionClient(
                api_key=settings.pplx_api_key,
                model=settings.pplx_model,
                base_url=settings.pplx_base_url,
                http_client=client,
            ),
            message_log=MessageLog(data_dir / LOG_FILENAME),
            files=FileStore(data_dir),
            onedrive=onedrive,
        )

    async def handle_update(self, update_data: Any) -> UpdateShape:
        """
        Process one webhook update.

        Exceptions from handlers propagate so the webhook can answer 500.

        Returns:
            The shape the update was dispatched as
        """
        update = parse_update(update_data)
        shape = detect_shape(update)
        chat_id = update.chat_id
        logger.info(f"Update {update.update_id} dispatched as {shape.value}")

        if chat_id is None:
            # Nothing to reply to; acknowledge only
            logger.warning(f"Update {update.update_id} has no chat, skipping reply")
            return shape

        message = update.message

        if shape is UpdateShape.COMMAND:
            await handle_command(self, chat_id, parse_command(message.text))
        elif shape is UpdateShape.DOCUMENT:
            await handle_document_message(self, chat_id, message.document)
        elif shape is UpdateShape.PHOTO:
            await handle_photo_message(self, chat_id, message.photo)
        elif shape is UpdateShape.TEXT:
            recall = match_recall_query(message.text)
            if recall:
                await handle_recall_query(self, chat_id, *recall)
            else:
                await handle_text_message(self, chat_id, message.text)
        else:
            await handle_empty_message(self, chat_id)

        return shape

    async def initialize(self) -> None:
        """
        Register the webhook with Telegram (call on startup).

        Failure is logged only; the server keeps running.
        """
        logger.info(f"Webhook will be set to: {self.settings.server_url.rstrip('/')}/webhook/<token>")
        try:
            data = await self.telegram.set_webhook(
                self.settings.webhook_url,
                secret_token=self.settings.telegram_webhook_secret or None,
            )
            logger.info(f"setWebhook response: {data}")
        except RelayError as e:
            logger.error(f"Failed to set Telegram webhook: {e}")

    async def shutdown(self) -> None:
        """Release HTTP connections (call on shutdown)."""
        await self.http.close()
        logger.info("Bot shut down")
