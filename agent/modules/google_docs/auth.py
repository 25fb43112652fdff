"""Pre-established Google OAuth credentials with in-memory token refresh.

Tokens come from ``GOOGLE_OAUTH_TOKENS`` (JSON) or, failing that, from the
file named by ``GOOGLE_TOKEN_FILE``. Refreshed tokens are never written back.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from urllib.parse import urlencode

import httpx
import structlog

from shared.config import Settings
from shared.errors import InitializationError, ProviderError

logger = structlog.get_logger()

TOKEN_URL = "https://oauth2.googleapis.com/token"
AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
SCOPES = [
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/drive",
]

# Refresh this long before the recorded expiry.
_EXPIRY_SKEW = timedelta(seconds=60)

CREDENTIALS_NOT_FOUND = (
    "Google credentials not found. Please set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET environment variables."
)


def authorization_url(client_id: str, redirect_uri: str) -> str:
    """Consent URL a user must visit to mint a refresh token."""
    query = urlencode({
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "access_type": "offline",
        "prompt": "consent",
        "scope": " ".join(SCOPES),
    })
    return f"{AUTH_URL}?{query}"


def _parse_expiry(tokens: dict) -> datetime | None:
    """Absolute ``expiry_date`` (ms since epoch) wins over relative ``expires_in`` (s)."""
    expiry_ms = tokens.get("expiry_date")
    if isinstance(expiry_ms, (int, float)) and not isinstance(expiry_ms, bool):
        return datetime.fromtimestamp(expiry_ms / 1000, tz=timezone.utc)
    expires_in = tokens.get("expires_in")
    if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
        return datetime.now(timezone.utc) + timedelta(seconds=expires_in)
    return None


class GoogleCredentials:
    """Access/refresh token pair for the Docs and Drive APIs."""

    def __init__(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
        client_id: str = "",
        client_secret: str = "",
        expires_at: datetime | None = None,
        token_url: str = TOKEN_URL,
    ):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.client_id = client_id
        self.client_secret = client_secret
        self.expires_at = expires_at
        self.token_url = token_url
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> GoogleCredentials:
        """Build credentials from settings or raise ``InitializationError``."""
        tokens = _load_tokens(settings)
        client_id = settings.google_client_id
        client_secret = settings.google_client_secret

        if tokens is None:
            if not client_id or not client_secret:
                raise InitializationError(CREDENTIALS_NOT_FOUND)
            raise InitializationError(
                f"Authentication required. Please visit: {authorization_url(client_id, settings.google_redirect_uri)}"
            )

        creds = cls(
            access_token=tokens.get("access_token"),
            refresh_token=tokens.get("refresh_token"),
            client_id=client_id,
            client_secret=client_secret,
            expires_at=_parse_expiry(tokens),
        )
        if not creds.access_token and not creds.can_refresh:
            if client_id:
                raise InitializationError(
                    "Authentication required. Please visit: "
                    f"{authorization_url(client_id, settings.google_redirect_uri)}"
                )
            raise InitializationError(CREDENTIALS_NOT_FOUND)
        return creds

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token and self.client_id and self.client_secret)

    @property
    def expired(self) -> bool:
        if not self.access_token:
            return True
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at - _EXPIRY_SKEW

    async def token(self, client: httpx.AsyncClient) -> str:
        """Return a usable access token, refreshing it first if needed."""
        async with self._lock:
            if self.expired and self.can_refresh:
                await self._refresh(client)
            if not self.access_token:
                raise ProviderError("No Google access token available")
            return self.access_token

    async def force_refresh(self, client: httpx.AsyncClient, rejected_token: str | None = None) -> bool:
        """Refresh after the API rejected ``rejected_token``. False if impossible.

        A caller that lost the race to another refresh finds the token already
        replaced and reuses it.
        """
        if not self.can_refresh:
            return False
        async with self._lock:
            if rejected_token is None or self.access_token == rejected_token:
                await self._refresh(client)
        return True

    async def _refresh(self, client: httpx.AsyncClient) -> None:
        try:
            resp = await client.post(
                self.token_url,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": self.refresh_token,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"Token refresh failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code != 200 or "error" in data:
            detail = data.get("error_description") or data.get("error") or f"HTTP {resp.status_code}"
            logger.warning("google_token_refresh_failed", status=resp.status_code, error=detail)
            raise ProviderError(f"Token refresh failed: {detail}", status_code=resp.status_code)

        self.access_token = data["access_token"]
        self.refresh_token = data.get("refresh_token", self.refresh_token)
        expires_in = data.get("expires_in", 3600)
        self.expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        logger.info("google_token_refreshed", expires_at=self.expires_at.isoformat())


def _load_tokens(settings: Settings) -> dict | None:
    if settings.google_oauth_tokens:
        try:
            tokens = json.loads(settings.google_oauth_tokens)
        except ValueError as e:
            raise InitializationError("Invalid GOOGLE_OAUTH_TOKENS format") from e
        if not isinstance(tokens, dict):
            raise InitializationError("Invalid GOOGLE_OAUTH_TOKENS format")
        return tokens

    if settings.google_token_file:
        path = Path(settings.google_token_file).expanduser()
        if not path.exists():
            return None
        try:
            tokens = json.loads(path.read_text())
        except ValueError as e:
            raise InitializationError(f"Invalid token file format: {path}") from e
        if not isinstance(tokens, dict):
            raise InitializationError(f"Invalid token file format: {path}")
        return tokens

    return None
