"""
Per-platform publish functions.

Each function has the signature ``(post, user_id) -> PlatformPublishResult``.
It loads the user's connected account, obtains a fresh access token and
hands off to the platform integration. Failures are raised; the publisher
service turns them into results.
"""

import logging
from functools import partial
from typing import Awaitable, Callable, Dict

from sfs_social.errors import PublishError
from sfs_social.storage import storage as default_storage
from sfs_social.storage.base import SocialStorage
from sfs_social.types.social import (
    PlatformPublishResult,
    Post,
    SocialPlatform,
    get_platform_config,
)

from .accounts import ensure_fresh_access_token
from .platforms import get_platform

logger = logging.getLogger(__name__)

PublishFunction = Callable[[Post, str], Awaitable[PlatformPublishResult]]


async def publish_with_account(
    storage: SocialStorage,
    platform: SocialPlatform,
    post: Post,
    user_id: str,
) -> PlatformPublishResult:
    """
    Publish a post using the user's connected account for ``platform``.

    Raises:
        PublishError: If no account is connected or the provider rejects the post
        TokenRefreshError, DecryptionError: If a usable token cannot be obtained
    """
    account = await storage.get_social_account(user_id, platform)
    if account is None:
        raise PublishError(
            f"No connected {get_platform_config(platform).name} account",
            platform=platform.value,
        )

    access_token = await ensure_fresh_access_token(storage, account)
    platform_post_id = await get_platform(platform).publish_post(post, access_token, account)

    logger.info(
        f"Published post {post.id} to {platform.value}",
        extra={"platform_post_id": platform_post_id},
    )
    return PlatformPublishResult(success=True, platform_post_id=platform_post_id)


def build_publishers(storage: SocialStorage) -> Dict[str, PublishFunction]:
    """Publish functions for every platform, bound to ``storage``."""
    return {
        platform.value: partial(publish_with_account, storage, platform)
        for platform in SocialPlatform
    }


async def publish_to_facebook(post: Post, user_id: str) -> PlatformPublishResult:
    return await publish_with_account(default_storage, SocialPlatform.FACEBOOK, post, user_id)


async def publish_to_instagram(post: Post, user_id: str) -> PlatformPublishResult:
    return await publish_with_account(default_storage, SocialPlatform.INSTAGRAM, post, user_id)


async def publish_to_twitter(post: Post, user_id: str) -> PlatformPublishResult:
    return await publish_with_account(default_storage, SocialPlatform.TWITTER, post, user_id)


async def publish_to_linkedin(post: Post, user_id: str) -> PlatformPublishResult:
    return await publish_with_account(default_storage, SocialPlatform.LINKEDIN, post, user_id)


async def publish_to_tiktok(post: Post, user_id: str) -> PlatformPublishResult:
    return await publish_with_account(default_storage, SocialPlatform.TIKTOK, post, user_id)


async def publish_to_youtube(post: Post, user_id: str) -> PlatformPublishResult:
    return await publish_with_account(default_storage, SocialPlatform.YOUTUBE, post, user_id)


async def publish_to_pinterest(post: Post, user_id: str) -> PlatformPublishResult:
    return await publish_with_account(default_storage, SocialPlatform.PINTEREST, post, user_id)


# Publish functions for the default storage, keyed by platform id
PUBLISHERS: Dict[str, PublishFunction] = {
    SocialPlatform.FACEBOOK.value: publish_to_facebook,
    SocialPlatform.INSTAGRAM.value: publish_to_instagram,
    SocialPlatform.TWITTER.value: publish_to_twitter,
    SocialPlatform.LINKEDIN.value: publish_to_linkedin,
    SocialPlatform.TIKTOK.value: publish_to_tiktok,
    SocialPlatform.YOUTUBE.value: publish_to_youtube,
    SocialPlatform.PINTEREST.value: publish_to_pinterest,
}
