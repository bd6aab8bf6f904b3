"""
Tests for connected account handling.

Verifies that:
- Connecting an account stores encrypted tokens, never plaintext
- Reconnecting replaces the previous connection for the platform
- Access tokens are refreshed only when close to expiry
"""

from datetime import timedelta

import httpx
import pytest

from sfs_social.errors import TokenRefreshError
from sfs_social.security.encryption import decrypt, encrypt
from sfs_social.social.accounts import (
    connect_account,
    ensure_fresh_access_token,
    get_account_tokens,
    needs_refresh,
)
from sfs_social.types.social import SocialPlatform, utc_now


def twitter_api(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/2/oauth2/token":
        return httpx.Response(
            200,
            json={
                "access_token": "new-access",
                "refresh_token": "new-refresh",
                "expires_in": 7200,
            },
        )
    return httpx.Response(
        200,
        json={"data": {"id": "987", "username": "sfs_dev", "name": "SFS Dev"}},
    )


class TestConnectAccount:
    """Tests for connect_account."""

    @pytest.mark.asyncio
    async def test_stores_sealed_tokens(self, oauth_env, provider_api, mem_storage):
        provider_api.respond(twitter_api)

        account = await connect_account(mem_storage, "user-1", "twitter", "auth-code")

        assert account.platform == SocialPlatform.TWITTER
        assert account.platform_user_id == "987"
        assert account.platform_username == "sfs_dev"
        assert account.access_token != "new-access"
        assert decrypt(account.access_token) == "new-access"
        assert decrypt(account.refresh_token) == "new-refresh"
        assert account.expires_at > utc_now()

        stored = await mem_storage.get_social_account("user-1", SocialPlatform.TWITTER)
        assert stored.id == account.id

    @pytest.mark.asyncio
    async def test_reconnect_keeps_account_id(self, oauth_env, provider_api, mem_storage):
        provider_api.respond(twitter_api)

        first = await connect_account(mem_storage, "user-1", "twitter", "code-1")
        second = await connect_account(mem_storage, "user-1", "twitter", "code-2")

        assert second.id == first.id
        assert second.created_at == first.created_at


class TestNeedsRefresh:
    """Tests for needs_refresh."""

    def test_no_expiry(self, make_account):
        assert not needs_refresh(make_account(expires_at=None), 300)

    def test_within_leeway(self, make_account):
        account = make_account(expires_at=utc_now() + timedelta(seconds=60))

        assert needs_refresh(account, 300)

    def test_outside_leeway(self, make_account):
        account = make_account(expires_at=utc_now() + timedelta(hours=1))

        assert not needs_refresh(account, 300)


class TestEnsureFreshAccessToken:
    """Tests for ensure_fresh_access_token."""

    @pytest.mark.asyncio
    async def test_fresh_token_is_used_as_is(self, make_account, mem_storage, provider_api):
        account = make_account(
            access_token=encrypt("current"),
            refresh_token=encrypt("refresh"),
            expires_at=utc_now() + timedelta(hours=1),
        )

        assert await ensure_fresh_access_token(mem_storage, account) == "current"
        assert provider_api.requests == []

    @pytest.mark.asyncio
    async def test_expired_without_refresh_token(self, make_account, mem_storage, provider_api):
        account = make_account(
            access_token=encrypt("current"),
            expires_at=utc_now() - timedelta(minutes=5),
        )

        assert await ensure_fresh_access_token(mem_storage, account) == "current"
        assert provider_api.requests == []

    @pytest.mark.asyncio
    async def test_expiring_token_is_refreshed_and_saved(
        self, oauth_env, make_account, mem_storage, provider_api
    ):
        provider_api.respond_json({"access_token": "rotated", "expires_in": 7200})
        account = make_account(
            access_token=encrypt("stale"),
            refresh_token=encrypt("refresh-1"),
            expires_at=utc_now() + timedelta(seconds=30),
        )

        token = await ensure_fresh_access_token(mem_storage, account)

        assert token == "rotated"
        stored = await mem_storage.get_social_account("user-1", SocialPlatform.TWITTER)
        access, refresh = get_account_tokens(stored)
        assert access == "rotated"
        assert refresh == "refresh-1"
        assert stored.expires_at > utc_now() + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_refresh_failure_propagates(
        self, oauth_env, make_account, mem_storage, provider_api
    ):
        provider_api.respond_json({"error": "invalid_grant"}, status_code=400)
        account = make_account(
            access_token=encrypt("stale"),
            refresh_token=encrypt("revoked"),
            expires_at=utc_now() - timedelta(minutes=1),
        )

        with pytest.raises(TokenRefreshError, match="invalid_grant"):
            await ensure_fresh_access_token(mem_storage, account)
