"""Tests for Google credential loading and token refresh."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from modules.google_docs.auth import CREDENTIALS_NOT_FOUND, TOKEN_URL, GoogleCredentials, authorization_url
from shared.config import Settings
from shared.errors import InitializationError, ProviderError


def _settings(**overrides) -> Settings:
    values = {
        "google_oauth_tokens": "",
        "google_token_file": "",
        "google_client_id": "",
        "google_client_secret": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def test_tokens_from_env_json():
    expiry = datetime(2030, 1, 1, tzinfo=timezone.utc)
    creds = GoogleCredentials.from_settings(_settings(
        google_oauth_tokens=json.dumps({
            "access_token": "ya29.a",
            "refresh_token": "1//r",
            "expiry_date": int(expiry.timestamp() * 1000),
        }),
        google_client_id="cid",
        google_client_secret="secret",
    ))

    assert creds.access_token == "ya29.a"
    assert creds.refresh_token == "1//r"
    assert creds.expires_at == expiry
    assert creds.can_refresh is True


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"token"'])
def test_invalid_token_json(raw):
    with pytest.raises(InitializationError, match="Invalid GOOGLE_OAUTH_TOKENS format"):
        GoogleCredentials.from_settings(_settings(google_oauth_tokens=raw))


def test_nothing_configured():
    with pytest.raises(InitializationError) as exc_info:
        GoogleCredentials.from_settings(_settings())
    assert str(exc_info.value) == CREDENTIALS_NOT_FOUND


def test_client_without_tokens_points_at_consent_url():
    with pytest.raises(InitializationError, match="Authentication required. Please visit: https://accounts.google.com"):
        GoogleCredentials.from_settings(_settings(google_client_id="cid", google_client_secret="secret"))


def test_refresh_token_without_client_is_unusable():
    with pytest.raises(InitializationError):
        GoogleCredentials.from_settings(_settings(google_oauth_tokens='{"refresh_token": "1//r"}'))


def test_token_file(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"access_token": "from-file"}))

    creds = GoogleCredentials.from_settings(_settings(google_token_file=str(path)))

    assert creds.access_token == "from-file"


def test_env_tokens_win_over_file(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"access_token": "from-file"}))

    creds = GoogleCredentials.from_settings(
        _settings(google_oauth_tokens='{"access_token": "from-env"}', google_token_file=str(path))
    )

    assert creds.access_token == "from-env"


def test_authorization_url():
    url = authorization_url("cid", "http://localhost")
    assert url.startswith("https://accounts.google.com/o/oauth2/v2/auth?")
    assert "client_id=cid" in url
    assert "access_type=offline" in url


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_valid_token_is_used_without_refresh():
    seen = []
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: seen.append(r) or httpx.Response(500)))
    creds = GoogleCredentials(access_token="ok", expires_at=datetime.now(timezone.utc) + timedelta(hours=1))

    assert await creds.token(client) == "ok"
    assert seen == []
    await client.aclose()


@pytest.mark.asyncio
async def test_expired_token_is_refreshed():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"access_token": "new", "expires_in": 1800})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    creds = GoogleCredentials(
        access_token="old",
        refresh_token="1//r",
        client_id="cid",
        client_secret="secret",
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=5),
    )

    assert await creds.token(client) == "new"
    assert str(seen[0].url) == TOKEN_URL
    assert b"grant_type=refresh_token" in seen[0].content
    assert creds.refresh_token == "1//r"
    assert creds.expired is False
    await client.aclose()


@pytest.mark.asyncio
async def test_refresh_failure_is_provider_error():
    client = httpx.AsyncClient(transport=httpx.MockTransport(
        lambda r: httpx.Response(400, json={"error": "invalid_grant", "error_description": "Token has been revoked."})
    ))
    creds = GoogleCredentials(refresh_token="1//r", client_id="cid", client_secret="secret")

    with pytest.raises(ProviderError, match="Token refresh failed: Token has been revoked."):
        await creds.token(client)
    await client.aclose()


def test_expires_in_sets_expiry():
    creds = GoogleCredentials.from_settings(_settings(
        google_oauth_tokens='{"access_token": "a", "refresh_token": "r", "expires_in": 0}',
        google_client_id="id",
        google_client_secret="sec",
    ))

    assert creds.expires_at is not None
    assert creds.expired is True


def test_expires_in_in_the_future_is_not_expired():
    before = datetime.now(timezone.utc)
    creds = GoogleCredentials.from_settings(_settings(google_oauth_tokens='{"access_token": "a", "expires_in": 3600}'))

    assert creds.expires_at >= before + timedelta(seconds=3600)
    assert creds.expired is False


def test_expiry_date_wins_over_expires_in():
    expiry = datetime(2030, 1, 1, tzinfo=timezone.utc)
    creds = GoogleCredentials.from_settings(_settings(google_oauth_tokens=json.dumps({
        "access_token": "a",
        "expiry_date": int(expiry.timestamp() * 1000),
        "expires_in": 0,
    })))

    assert creds.expires_at == expiry


@pytest.mark.asyncio
async def test_concurrent_rejections_refresh_once():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"access_token": f"new-{len(seen)}", "expires_in": 3600})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    creds = GoogleCredentials(access_token="old", refresh_token="1//r", client_id="cid", client_secret="secret")

    results = await asyncio.gather(creds.force_refresh(client, "old"), creds.force_refresh(client, "old"))

    assert results == [True, True]
    assert len(seen) == 1
    assert creds.access_token == "new-1"
    await client.aclose()
