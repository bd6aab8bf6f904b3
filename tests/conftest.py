"""
Pytest configuration and shared fixtures for sfs_social tests.

This module provides common fixtures used across all test files:
- Environment setup (encryption key, OAuth credentials)
- A mock HTTP transport for provider APIs
- Sample posts, accounts and storage
"""

import os
import sys
from datetime import timedelta
from typing import Callable, List

import httpx
import pytest

# Environment setup before any imports
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_LEVEL"] = "WARNING"
# 32 bytes of "0", base64-encoded
os.environ["ENCRYPTION_KEY"] = "MDAwMDAwMDAwMDAwMDAwMDAwMDAwMDAwMDAwMDAwMDA="

# Ensure project root is in path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sfs_social.types.social import (  # noqa: E402
    Post,
    PostStatus,
    SocialAccount,
    SocialPlatform,
    utc_now,
)

OAUTH_ENV = {
    "FACEBOOK_APP_ID": "fb_test_id",
    "FACEBOOK_APP_SECRET": "fb_test_secret",
    "INSTAGRAM_CLIENT_ID": "ig_test_id",
    "INSTAGRAM_CLIENT_SECRET": "ig_test_secret",
    "TWITTER_CLIENT_ID": "tw_test_id",
    "TWITTER_CLIENT_SECRET": "tw_test_secret",
    "LINKEDIN_CLIENT_ID": "li_test_id",
    "LINKEDIN_CLIENT_SECRET": "li_test_secret",
    "TIKTOK_CLIENT_KEY": "tk_test_key",
    "TIKTOK_CLIENT_SECRET": "tk_test_secret",
    "YOUTUBE_CLIENT_ID": "yt_test_id",
    "YOUTUBE_CLIENT_SECRET": "yt_test_secret",
    "PINTEREST_APP_ID": "pt_test_id",
    "PINTEREST_APP_SECRET": "pt_test_secret",
}


@pytest.fixture(autouse=True)
def clean_oauth_env(monkeypatch):
    """Start every test with no OAuth credentials or frontend URL."""
    for name in [*OAUTH_ENV, "FRONTEND_URL"]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def oauth_env(monkeypatch):
    """Configure credentials for all seven platforms."""
    for name, value in OAUTH_ENV.items():
        monkeypatch.setenv(name, value)
    return dict(OAUTH_ENV)


class ProviderApi:
    """Routes provider HTTP calls made by the platform integrations to a handler."""

    def __init__(self, platforms) -> None:
        self._platforms = platforms
        self.requests: List[httpx.Request] = []

    def respond(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)
        for platform in self._platforms:
            platform._transport = transport

    def respond_json(self, payload, status_code: int = 200, headers=None) -> None:
        """Answer every request with the same JSON payload."""
        self.respond(lambda request: httpx.Response(status_code, json=payload, headers=headers))

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def provider_api():
    """Mock transport installed on every platform integration."""
    from sfs_social.social.platforms import PLATFORMS

    api = ProviderApi(PLATFORMS.values())
    yield api
    for platform in PLATFORMS.values():
        platform._transport = None


@pytest.fixture
def make_post():
    """Factory for posts; defaults to a due scheduled post."""

    def _make(**overrides) -> Post:
        data = {
            "id": "post-1",
            "user_id": "user-1",
            "content": "Hello from the scheduler",
            "platforms": ["facebook", "twitter"],
            "media_urls": [],
            "status": PostStatus.SCHEDULED,
            "scheduled_at": utc_now() - timedelta(minutes=1),
        }
        data.update(overrides)
        return Post(**data)

    return _make


@pytest.fixture
def make_account():
    """Factory for connected accounts with already-sealed token fields."""

    def _make(platform: SocialPlatform = SocialPlatform.TWITTER, **overrides) -> SocialAccount:
        data = {
            "id": f"acct-{platform.value}",
            "user_id": "user-1",
            "platform": platform,
            "platform_user_id": "12345",
            "platform_username": "tester",
            "access_token": "sealed-access",
            "refresh_token": None,
            "expires_at": None,
        }
        data.update(overrides)
        return SocialAccount(**data)

    return _make


@pytest.fixture
def mem_storage():
    """Fresh in-memory storage."""
    from sfs_social.storage import MemStorage

    return MemStorage()


# Test environment cleanup
@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
