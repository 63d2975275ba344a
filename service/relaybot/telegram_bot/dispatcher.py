"""
Update dispatcher - classifies incoming updates by shape.

Pure and synchronous: no I/O, no state. The handlers module decides what
to do with each shape.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from relaybot.logging_config import bot_logger as logger
from .schemas import PhotoSize, Update

COMMANDS = frozenset({"/start", "/mkdir"})


class UpdateShape(str, Enum):
    COMMAND = "command"
    DOCUMENT = "document"
    PHOTO = "photo"
    TEXT = "text"
    EMPTY = "empty"


@dataclass(frozen=True)
class Command:
    name: str
    args: list[str] = field(default_factory=list)


def parse_update(data: Any) -> Update:
    """
    Build an Update from the webhook body.

    A body that does not validate is treated as an update without a
    message, which the dispatcher classifies as EMPTY.
    """
    if not isinstance(data, dict):
        logger.warning(f"Ignoring non-object update body: {type(data).__name__}")
        return Update()

    try:
        return Update.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Malformed update {data.get('update_id')}: {e.error_count()} validation errors")
        message = data.get("message")
        chat = message.get("chat") if isinstance(message, dict) else None
        # Keep the chat so the user still gets an answer
        if isinstance(chat, dict) and isinstance(chat.get("id"), int):
            return Update.model_validate({"message": {"chat": {"id": chat["id"]}}})
        return Update()


def parse_command(text: Optional[str]) -> Optional[Command]:
    """
    Parse "/cmd arg1 arg2" if cmd is a recognized command.

    "/start@MyBot" (group chat form) is accepted as "/start".
    """
    if not text:
        return None

    tokens = text.strip().split()
    if not tokens or not tokens[0].startswith("/"):
        return None

    name = tokens[0].split("@", 1)[0].lower()
    if name not in COMMANDS:
        return None

    return Command(name=name, args=tokens[1:])


def detect_shape(update: Update) -> UpdateShape:
    """
    Classify an update.

    Returns:
        COMMAND  - text starts with a recognized command
        DOCUMENT - message carries a document
        PHOTO    - message carries one or more photo sizes
        TEXT     - non-empty text that is not a command
        EMPTY    - anything else (no message, blank text, unsupported content)
    """
    message = update.message
    if message is None:
        return UpdateShape.EMPTY

    if parse_command(message.text):
        return UpdateShape.COMMAND

    if message.document is not None:
        return UpdateShape.DOCUMENT

    if message.photo:
        return UpdateShape.PHOTO

    if message.text and message.text.strip():
        return UpdateShape.TEXT

    return UpdateShape.EMPTY


def pick_largest_photo(photo: list[PhotoSize]) -> PhotoSize:
    """Telegram orders photo sizes smallest first."""
    return photo[-1]
