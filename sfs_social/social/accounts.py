"""
Connected account lifecycle.

Tokens are sealed with the encryption service before they reach storage and
only decrypted at the point of use.
"""

import logging
import uuid
from datetime import timedelta
from typing import Optional, Tuple

from sfs_social.config import PublisherSettings
from sfs_social.security.encryption import decrypt, encrypt
from sfs_social.storage.base import SocialStorage
from sfs_social.types.social import SocialAccount, SocialPlatform, utc_now

from . import oauth

logger = logging.getLogger(__name__)


async def connect_account(
    storage: SocialStorage,
    user_id: str,
    platform: str,
    code: str,
) -> SocialAccount:
    """
    Complete an OAuth callback and store the connected account.

    Exchanges the code, fetches the profile, encrypts the tokens and saves
    the account, replacing any previous connection for the same platform.

    Raises:
        NotConfiguredError, TokenExchangeError, ProfileFetchError: From the
            OAuth layer
        EncryptionConfigError: If ENCRYPTION_KEY is missing or malformed
    """
    tokens = await oauth.exchange_code_for_token(platform, code)
    profile = await oauth.fetch_user_profile(platform, tokens.access_token)

    platform_id = SocialPlatform(platform)
    existing = await storage.get_social_account(user_id, platform_id)

    account = SocialAccount(
        id=existing.id if existing else str(uuid.uuid4()),
        user_id=user_id,
        platform=platform_id,
        platform_user_id=profile.id,
        platform_username=profile.username or profile.name or profile.id,
        access_token=encrypt(tokens.access_token),
        refresh_token=encrypt(tokens.refresh_token) if tokens.refresh_token else None,
        expires_at=tokens.expires_at,
    )
    if existing:
        account = account.model_copy(update={"created_at": existing.created_at})

    saved = await storage.save_social_account(account)
    logger.info(
        f"Connected {platform} account {saved.platform_username}",
        extra={"user_id": user_id, "platform": platform},
    )
    return saved


def get_account_tokens(account: SocialAccount) -> Tuple[str, Optional[str]]:
    """Decrypt an account's (access_token, refresh_token)."""
    access_token = decrypt(account.access_token)
    refresh_token = decrypt(account.refresh_token) if account.refresh_token else None
    return access_token, refresh_token


def needs_refresh(account: SocialAccount, leeway_seconds: int) -> bool:
    """Check whether the access token has expired or will within the leeway."""
    if account.expires_at is None:
        return False
    return account.expires_at <= utc_now() + timedelta(seconds=leeway_seconds)


async def ensure_fresh_access_token(
    storage: SocialStorage,
    account: SocialAccount,
    leeway_seconds: Optional[int] = None,
) -> str:
    """
    Get a usable plaintext access token, refreshing it first if needed.

    Refreshed tokens are re-encrypted and persisted. Accounts without a
    refresh token return their current token as is.

    Raises:
        TokenRefreshError: If the provider rejects the refresh
        DecryptionError: If stored tokens cannot be decrypted
    """
    if leeway_seconds is None:
        leeway_seconds = PublisherSettings().token_refresh_leeway_seconds

    access_token, refresh_token = get_account_tokens(account)
    if not refresh_token or not needs_refresh(account, leeway_seconds):
        return access_token

    logger.info(
        f"Refreshing {account.platform.value} token",
        extra={"account_id": account.id},
    )
    tokens = await oauth.refresh_access_token(account.platform.value, refresh_token)

    updated = account.model_copy(
        update={
            "access_token": encrypt(tokens.access_token),
            "refresh_token": encrypt(tokens.refresh_token) if tokens.refresh_token else None,
            "expires_at": tokens.expires_at,
        }
    )
    await storage.save_social_account(updated)
    return tokens.access_token
