"""
OAuth operations across all supported platforms.

Thin dispatch layer over the platform strategies. Unknown platform ids are
treated like unconfigured ones.
"""

import logging
from typing import List, Optional

from sfs_social.config import OAuthSettings
from sfs_social.errors import NotConfiguredError
from sfs_social.types.social import (
    OAuthConfig,
    OAuthTokens,
    SocialPlatform,
    SocialProfile,
)

from .platforms import BasePlatform, get_platform

logger = logging.getLogger(__name__)


def _require_platform(platform: str) -> BasePlatform:
    integration = get_platform(platform)
    if integration is None:
        raise NotConfiguredError(
            f"OAuth not configured for platform: {platform}",
            platform=platform,
        )
    return integration


def get_oauth_config(platform: str) -> Optional[OAuthConfig]:
    """
    Build the OAuth config for a platform.

    Returns:
        OAuthConfig, or None if the platform is unknown or has no credentials
    """
    integration = get_platform(platform)
    if integration is None:
        return None
    return integration.build_oauth_config()


def get_authorization_url(platform: str, state: str) -> Optional[str]:
    """
    Get the provider authorization URL to redirect a user to.

    Never raises for unknown or unconfigured platforms; returns None so
    callers can hide the connect option.
    """
    integration = get_platform(platform)
    if integration is None:
        return None
    return integration.get_authorization_url(state)


async def exchange_code_for_token(platform: str, code: str) -> OAuthTokens:
    """
    Exchange an authorization code for tokens.

    Raises:
        NotConfiguredError: Unknown platform or missing credentials
        TokenExchangeError: Provider or transport failure
    """
    tokens = await _require_platform(platform).exchange_code_for_tokens(code)
    logger.info(f"Exchanged authorization code for {platform} tokens")
    return tokens


async def refresh_access_token(platform: str, refresh_token: str) -> OAuthTokens:
    """
    Refresh an access token.

    Raises:
        NotConfiguredError: Unknown platform or missing credentials
        TokenRefreshError: Provider or transport failure
    """
    tokens = await _require_platform(platform).refresh_access_token(refresh_token)
    logger.info(f"Refreshed {platform} access token")
    return tokens


async def fetch_user_profile(platform: str, access_token: str) -> SocialProfile:
    """
    Fetch the user's profile normalized to SocialProfile.

    Raises:
        NotConfiguredError: Unknown platform or missing credentials
        ProfileFetchError: Provider or transport failure
    """
    return await _require_platform(platform).get_user_profile(access_token)


def validate_platform_config(platform: str) -> bool:
    """Check that a platform is supported and has both client id and secret."""
    parsed = SocialPlatform.parse(platform)
    if parsed is None:
        return False
    return OAuthSettings().is_configured(parsed)


def get_configured_platforms() -> List[str]:
    """Platform ids that currently have credentials, in declaration order."""
    settings = OAuthSettings()
    return [p.value for p in SocialPlatform if settings.is_configured(p)]
