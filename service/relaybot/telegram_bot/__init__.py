"""
Telegram Bot module for the relay.

ARCHITECTURE: Thin routing layer over raw Bot API calls.
- Receives webhook updates (via FastAPI in relaybot.main)
- Classifies each update by shape via dispatcher
- Routes to one handler: command, document, photo, text or empty
- Text goes to Perplexity; files go to disk and optionally OneDrive
- Sends exactly one reply per update
"""

from .bot import RelayBot
from .dispatcher import UpdateShape, detect_shape, parse_update
from .telegram_api import TelegramClient

__all__ = [
    "RelayBot",
    "UpdateShape",
    "detect_shape",
    "parse_update",
    "TelegramClient",
]
