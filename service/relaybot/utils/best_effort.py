"""
Fire-and-forget execution for side effects that must never fail a request
(typing indicators, storage mirroring).
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from relaybot.logging_config import bot_logger as logger


@dataclass
class Attempt:
    """Outcome of a best-effort call."""
    label: str
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None


async def best_effort(label: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Attempt:
    """
    Await func(*args, **kwargs), recording a failure instead of raising.

    A coroutine that returns False is also recorded as a failure, matching
    the bool convention of the storage and Telegram helpers.
    Cancellation still propagates.
    """
    try:
        value = await func(*args, **kwargs)
    except Exception as e:
        logger.warning(f"{label} failed: {e}")
        return Attempt(label=label, ok=False, error=e)

    if value is False:
        logger.warning(f"{label} reported failure")
        return Attempt(label=label, ok=False, value=value)

    return Attempt(label=label, ok=True, value=value)
