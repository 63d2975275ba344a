"""
OneDrive mirroring via Microsoft Graph.

App-only access: a client-credentials token from the Microsoft identity
platform, then PUT of raw bytes to a path-addressed drive item of the
configured user. Everything here is best-effort: failures are logged and
reported as False, never raised and never retried.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from relaybot.errors import MalformedResponse, RelayError
from relaybot.http_client import HttpClient
from relaybot.logging_config import bot_logger as logger

LOGIN_BASE = "https://login.microsoftonline.com"
GRAPH_BASE = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"

# Refresh a little before the reported expiry
TOKEN_EXPIRY_MARGIN_SECONDS = 60

FOLDER_MARKER = ".keep"


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at - TOKEN_EXPIRY_MARGIN_SECONDS


class OneDriveClient:
    """Uploads files into <folder>/ of a user's OneDrive."""

    def __init__(
        self,
        http: HttpClient,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        user_id: str,
        folder: str = "TelegramBot",
    ):
        self.http = http
        self.client_id = client_id
        self.client_secret = client_secret
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.folder = folder.strip("/")
        self._token: Optional[AccessToken] = None

    async def fetch_access_token(self) -> str:
        """
        Get a bearer token, reusing the cached one until it nears expiry.

        Raises:
            RelayError: token endpoint unreachable, rejected or malformed
        """
        now = time.monotonic()
        if self._token and self._token.is_valid(now):
            return self._token.value

        data = await self.http.request_json(
            "POST",
            f"{LOGIN_BASE}/{self.tenant_id}/oauth2/v2.0/token",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "scope": GRAPH_SCOPE,
                "grant_type": "client_credentials",
            },
        )

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise MalformedResponse("Token response has no access_token")

        expires_in = float(data.get("expires_in") or 0)
        self._token = AccessToken(value=token, expires_at=now + expires_in)
        return token

    def item_url(self, remote_name: str) -> str:
        """Graph URL of the content of <folder>/<remote_name>."""
        path = f"{self.folder}/{remote_name.lstrip('/')}" if self.folder else remote_name.lstrip("/")
        return (
            f"{GRAPH_BASE}/users/{quote(self.user_id, safe='')}"
            f"/drive/root:/{quote(path)}:/content"
        )

    async def upload_bytes(self, content: bytes, remote_name: str) -> bool:
        """
        Upload raw bytes to <folder>/<remote_name>.

        Returns:
            True if the upload succeeded
        """
        try:
            token = await self.fetch_access_token()
            await self.http.request_json(
                "PUT",
                self.item_url(remote_name),
                content=content,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/octet-stream",
                },
            )
        except RelayError as e:
            logger.error(f"OneDrive upload of {remote_name} failed: {e}")
            return False

        logger.info(f"Uploaded {remote_name} to OneDrive ({len(content)} bytes)")
        return True

    async def upload_file(self, local_path: Path, remote_name: str) -> bool:
        """Upload a local file to <folder>/<remote_name>."""
        try:
            content = Path(local_path).read_bytes()
        except OSError as e:
            logger.error(f"Cannot read {local_path} for upload: {e}")
            return False
        return await self.upload_bytes(content, remote_name)

    async def create_folder(self, name: str) -> bool:
        """Create <folder>/<name> by uploading an empty marker file into it."""
        return await self.upload_bytes(b"", f"{name}/{FOLDER_MARKER}")
