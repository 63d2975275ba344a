"""
Append-only message log and keyword recall.

Each text message is written as one line:

    [2024-05-01T10:00:00.000Z] chat:42 category:people text:"my teacher is Smith"

Lines are never rewritten, so file order is chronological and recall can
scan backwards to let the latest fact win.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from relaybot.logging_config import bot_logger as logger

LOG_FILENAME = "messages.log"

_CATEGORY_PATTERN = re.compile(r'\bcategory:(\S+)')
_TEXT_PATTERN = re.compile(r'\btext:(".*")\s*$')
_WORD_PATTERN = re.compile(r"[^\W\d_][\w'\-]*")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LogEntry:
    chat_id: int
    text: str
    category: Optional[str] = None
    timestamp: str = field(default_factory=_utc_timestamp)

    def to_line(self) -> str:
        return (
            f"[{self.timestamp}] chat:{self.chat_id} "
            f"category:{self.category or 'none'} "
            f"text:{json.dumps(self.text, ensure_ascii=False)}\n"
        )


# Exact-match questions answered from the log: normalized question -> (keyword, category)
RECALL_QUERIES: dict[str, tuple[str, str]] = {
    question: ("teacher", "people")
    for question in (
        "what's my teacher's name",
        "whats my teachers name",
        "whats my teacher's name",
        "what's my teachers name",
        "what is my teacher's name",
        "what is my teachers name",
        "what is the name of my teacher",
        "who is my teacher",
        "who's my teacher",
    )
}


def match_recall_query(text: str) -> Optional[tuple[str, str]]:
    """Return (keyword, category) if text is one of the known recall questions."""
    normalized = (text or "").strip().lower().replace("’", "'").rstrip("?!. ")
    return RECALL_QUERIES.get(normalized)


def extract_name_after_is(text: str) -> Optional[str]:
    """
    Take the word right after the first " is " if it looks like a name.

    "my teacher is Smith" -> "Smith"
    "my teacher is great" -> None
    """
    _, found, rest = text.partition(" is ")
    if not found:
        return None

    match = _WORD_PATTERN.match(rest.lstrip())
    if not match:
        return None

    word = match.group(0)
    if not word[0].isupper():
        return None
    return word


class MessageLog:
    """The process-wide append-only log file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def append(self, entry: LogEntry) -> None:
        """
        Append one line to the log.

        Raises:
            OSError: log directory or file not writable
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(entry.to_line())

    def recall(self, keyword: str, category: Optional[str] = None) -> Optional[str]:
        """
        Find the most recent remembered name for a keyword.

        Args:
            keyword: Case-insensitive substring the logged text must contain
            category: Only consider lines logged with this category

        Returns:
            The capitalized word following " is " in the newest matching line,
            or None
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Cannot read message log {self.path}: {e}")
            return None

        needle = keyword.lower()

        # "\n" only: logged text may contain U+2028, U+2029 or U+0085
        for line in reversed(content.split("\n")):
            if category is not None:
                category_match = _CATEGORY_PATTERN.search(line)
                if not category_match or category_match.group(1) != category:
                    continue

            text_match = _TEXT_PATTERN.search(line)
            if not text_match:
                continue
            try:
                text = json.loads(text_match.group(1))
            except ValueError:
                continue
            if not isinstance(text, str) or needle not in text.lower():
                continue

            name = extract_name_after_is(text)
            if name:
                return name

        return None
