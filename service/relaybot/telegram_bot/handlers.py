"""
Telegram update handlers.

One handler per update shape; each sends exactly one reply to the chat.
Outbound failures are caught here and turned into a reply or a log line,
so a handler only raises on a genuine bug.

Side effects that must not affect the reply (typing indicator, OneDrive
mirroring) run through best_effort.
"""

from __future__ import annotations

import asyncio
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Callable

from relaybot.errors import RelayError
from relaybot.logging_config import bot_logger as logger
from relaybot.services.classifier import classify
from relaybot.services.memory import LOG_FILENAME, LogEntry
from relaybot.utils.best_effort import best_effort
from relaybot.utils.normalize import sanitize_folder_name

from .dispatcher import Command, pick_largest_photo
from .schemas import Document, PhotoSize

if TYPE_CHECKING:
    from .bot import RelayBot


START_TEXT = "Hi! Send me a question and I'll ask Perplexity for you."

CAPABILITIES_TEXT = """I can help with:
• Questions: send any text and I'll ask Perplexity for you
• Files: send a document or photo and I'll store it
• Memory: tell me "my teacher is ..." and later ask "what's my teacher's name?"

Commands:
/start - greeting
/mkdir <folder name> - create a folder in cloud storage"""

MKDIR_USAGE_TEXT = "Usage: /mkdir <folder name>"
STORAGE_DISABLED_TEXT = "Cloud storage is not configured."
MKDIR_FAILED_TEXT = "Sorry, I couldn't create that folder."
FILE_FAILED_TEXT = "Sorry, I couldn't save that file."
RECALL_MISS_TEXT = "I don't know your teacher's name yet."

DEFAULT_PHOTO_EXTENSION = ".jpg"


async def reply(bot: RelayBot, chat_id: int, text: str) -> bool:
    """Send a bot-authored message (plain text, names may contain underscores)."""
    return await bot.telegram.send_message(chat_id, text, parse_mode=None)


async def handle_start_command(bot: RelayBot, chat_id: int, command: Command) -> None:
    """Handle /start command."""
    await reply(bot, chat_id, START_TEXT)


async def handle_mkdir_command(bot: RelayBot, chat_id: int, command: Command) -> None:
    """
    Handle /mkdir <name...>: create a folder in OneDrive.

    Arguments are joined with "_" and stripped of unsafe characters.
    """
    name = sanitize_folder_name(command.args)
    if not name:
        await reply(bot, chat_id, MKDIR_USAGE_TEXT)
        return

    if bot.onedrive is None:
        await reply(bot, chat_id, STORAGE_DISABLED_TEXT)
        return

    attempt = await best_effort("OneDrive mkdir", bot.onedrive.create_folder, name)
    if attempt.ok:
        logger.info(f"Created folder {name} for chat_id={chat_id}")
        await reply(bot, chat_id, f"📁 Folder created: {name}")
    else:
        await reply(bot, chat_id, MKDIR_FAILED_TEXT)


COMMAND_HANDLERS: dict[str, Callable] = {
    "/start": handle_start_command,
    "/mkdir": handle_mkdir_command,
}


async def handle_command(bot: RelayBot, chat_id: int, command: Command) -> None:
    logger.info(f"Command {command.name} from chat_id={chat_id}, args={len(command.args)}")
    await COMMAND_HANDLERS[command.name](bot, chat_id, command)


async def handle_recall_query(bot: RelayBot, chat_id: int, keyword: str, category: str) -> None:
    """Answer a known memory question from the message log."""
    name = await asyncio.to_thread(bot.message_log.recall, keyword, category)
    logger.info(f"Recall keyword={keyword} category={category} found={name is not None}")

    if name:
        await reply(bot, chat_id, f"Your {keyword}'s name is {name}.")
    else:
        await reply(bot, chat_id, RECALL_MISS_TEXT)


async def handle_text_message(bot: RelayBot, chat_id: int, text: str) -> None:
    """
    Handle a plain text message.

    1. Show typing indicator
    2. Ask the model
    3. Send the answer
    4. Append to the message log (and mirror it to OneDrive)
    """
    text = text.strip()
    logger.info(f"Received message from chat_id={chat_id}, text_len={len(text)}")

    await best_effort("sendChatAction", bot.telegram.send_chat_action, chat_id, "typing")

    answer = await bot.completion.ask(text)
    await bot.telegram.send_message(chat_id, answer)

    category = classify(text)
    try:
        bot.message_log.append(LogEntry(chat_id=chat_id, text=text, category=category.value))
    except OSError as e:
        logger.error(f"Failed to append to message log: {e}")
        return

    if bot.onedrive is not None:
        await best_effort(
            "OneDrive log mirror", bot.onedrive.upload_file, bot.message_log.path, LOG_FILENAME
        )


async def _store_attachment(
    bot: RelayBot,
    chat_id: int,
    file_id: str,
    make_name: Callable[[str], str],
) -> None:
    """Resolve, download, save locally, mirror, confirm."""
    try:
        file_path = await bot.telegram.get_file(file_id)
        content = await bot.telegram.download_file(file_path)
        stored = await asyncio.to_thread(bot.files.save_attachment, make_name(file_path), content)
    except (RelayError, OSError) as e:
        logger.error(f"Failed to store attachment {file_id} for chat_id={chat_id}: {e}")
        await reply(bot, chat_id, FILE_FAILED_TEXT)
        return

    logger.info(f"Saved {stored.name} ({stored.size} bytes) for chat_id={chat_id}")

    if bot.onedrive is not None:
        await best_effort("OneDrive upload", bot.onedrive.upload_file, stored.path, stored.name)

    await reply(bot, chat_id, f"✅ Saved file: {stored.name}")


async def handle_document_message(bot: RelayBot, chat_id: int, document: Document) -> None:
    """Handle a document attachment."""
    fallback = f"document_{document.file_unique_id or document.file_id}"

    def make_name(file_path: str) -> str:
        return document.file_name or f"{fallback}{PurePosixPath(file_path).suffix}"

    await _store_attachment(bot, chat_id, document.file_id, make_name)


async def handle_photo_message(bot: RelayBot, chat_id: int, photo: list[PhotoSize]) -> None:
    """Handle a photo; only the highest resolution variant is stored."""
    largest = pick_largest_photo(photo)
    stem = f"photo_{largest.file_unique_id or largest.file_id}"

    def make_name(file_path: str) -> str:
        return f"{stem}{PurePosixPath(file_path).suffix or DEFAULT_PHOTO_EXTENSION}"

    await _store_attachment(bot, chat_id, largest.file_id, make_name)


async def handle_empty_message(bot: RelayBot, chat_id: int) -> None:
    """Reply to anything we can't act on with what the bot can do."""
    await reply(bot, chat_id, CAPABILITIES_TEXT)
