"""
Error types raised by outbound calls and startup.

Callers catch these at the call site and turn them into a fallback value
or a user-facing reply; only the webhook route maps an escaping error to
HTTP 500.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for relay errors."""


class ConfigMissing(RelayError):
    """Required configuration is absent or invalid."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class NetworkError(RelayError):
    """Transport-level failure (DNS, connect, timeout, reset)."""


class NonOkStatus(RelayError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "", url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status_code} from {url or 'upstream'}: {body[:200]}")


class MalformedResponse(RelayError):
    """Upstream body could not be parsed."""


class FileResolutionError(RelayError):
    """Telegram could not resolve a file id to a downloadable path."""
