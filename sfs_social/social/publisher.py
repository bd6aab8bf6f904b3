"""
Social media post publishing service.

Provides:
- Per-platform content validation (character limits, required media)
- Publishing a post to one platform with failures reported as results
- Concurrent fan-out of a post to all of its platforms
- One scheduler tick over all due posts, isolated per post

A post becomes ``published`` when at least one of its platforms succeeds and
``failed`` only when every platform fails. The per-platform result map is
the place to look for partial failures.
"""

import asyncio
import logging
import uuid
from typing import Dict, Optional

from sfs_social.config import PublisherSettings
from sfs_social.storage import storage as default_storage
from sfs_social.storage.base import SocialStorage
from sfs_social.types.social import (
    PlatformPublishResult,
    Post,
    PostStatus,
    PublishPostResult,
    SocialPlatform,
    ValidationResult,
    get_platform_config,
    utc_now,
)
from sfs_social.utils.logging import Timer, set_publish_context
from sfs_social.utils.media import has_media_kind

from .publishers import PUBLISHERS, PublishFunction, build_publishers

logger = logging.getLogger(__name__)


def validate_post_for_platform(content: str, platform: str) -> ValidationResult:
    """
    Check post content against a platform's character limit.

    Content of exactly the limit is valid.
    """
    parsed = SocialPlatform.parse(platform)
    if parsed is None:
        return ValidationResult(valid=False, error="Unknown platform")

    config = get_platform_config(parsed)
    length = len(content)
    if length > config.max_text_length:
        return ValidationResult(
            valid=False,
            error=(
                f"Content exceeds {config.name} character limit: "
                f"{length} characters (max {config.max_text_length})"
            ),
        )
    return ValidationResult(valid=True)


class PublisherService:
    """
    Service for publishing posts across platforms.

    Publish functions are looked up by platform id; storage receives the
    resulting status of every post.
    """

    def __init__(
        self,
        storage: Optional[SocialStorage] = None,
        publishers: Optional[Dict[str, PublishFunction]] = None,
        max_concurrent_posts: Optional[int] = None,
    ) -> None:
        """
        Initialize the publisher service.

        Args:
            storage: Storage collaborator (defaults to the in-memory store)
            publishers: Publish functions keyed by platform id (defaults to
                functions bound to ``storage``)
            max_concurrent_posts: Posts published concurrently per tick
        """
        self.storage = storage or default_storage
        if publishers is not None:
            self._publishers = dict(publishers)
        elif storage is None:
            self._publishers = dict(PUBLISHERS)
        else:
            self._publishers = build_publishers(storage)

        if max_concurrent_posts is None:
            max_concurrent_posts = PublisherSettings().publisher_max_concurrent_posts
        self.max_concurrent_posts = max_concurrent_posts

    def validate_post_for_platform(self, content: str, platform: str) -> ValidationResult:
        return validate_post_for_platform(content, platform)

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    async def publish_to_platform(self, post: Post, platform: str) -> PlatformPublishResult:
        """
        Publish a post to a single platform.

        Never raises: a missing publisher, invalid content, missing media and
        any provider error all come back as ``success=False`` with the error.
        Content and media checks happen before any network call.
        """
        publish = self._publishers.get(platform)
        if publish is None:
            return PlatformPublishResult(
                success=False,
                error=f"No publisher found for platform: {platform}",
            )

        validation = validate_post_for_platform(post.content, platform)
        if not validation.valid:
            return PlatformPublishResult(success=False, error=validation.error)

        config = get_platform_config(SocialPlatform(platform))
        if config.required_media and not has_media_kind(
            post.media_urls, config.required_media, allow_unknown=True
        ):
            return PlatformPublishResult(
                success=False,
                error=f"{config.name} requires {config.required_media} content",
            )

        try:
            result = await publish(post, post.user_id)
            if isinstance(result, dict):
                result = PlatformPublishResult(**result)
            return result
        except Exception as e:
            logger.error(f"Failed to publish post {post.id} to {platform}: {e}")
            return PlatformPublishResult(success=False, error=str(e))

    async def publish_post(self, post: Post) -> PublishPostResult:
        """
        Publish a post to every platform it lists and persist the outcome.

        ``success`` is true only when every platform succeeded, while the
        stored status is ``published`` as soon as one platform succeeded.
        Only scheduled posts are published; any other post is left untouched.
        When storage refuses the status write, the status it holds is reported.
        """
        set_publish_context(post_id=post.id, user_id=post.user_id)

        if post.status != PostStatus.SCHEDULED:
            logger.warning(f"Post {post.id} is {post.status.value}, not scheduled; skipping")
            return PublishPostResult(success=False, status=post.status)

        logger.info(f"Publishing post {post.id} to {', '.join(post.platforms)}")

        outcomes = await asyncio.gather(
            *(self.publish_to_platform(post, platform) for platform in post.platforms)
        )
        results: Dict[str, PlatformPublishResult] = dict(zip(post.platforms, outcomes))

        if any(result.success for result in outcomes):
            status = PostStatus.PUBLISHED
            updates = {"status": PostStatus.PUBLISHED, "published_at": utc_now()}
        else:
            status = PostStatus.FAILED
            updates = {"status": PostStatus.FAILED}

        if await self.storage.update_post(post.id, updates) is None:
            stored = await self.storage.get_post(post.id)
            logger.warning(
                f"Storage refused to mark post {post.id} {status.value}; "
                f"stored status is {stored.status.value if stored else 'unknown'}"
            )
            if stored is not None:
                status = stored.status

        failed = [platform for platform, result in results.items() if not result.success]
        if failed:
            logger.warning(
                f"Post {post.id} {status.value}; failed on {', '.join(failed)}",
                extra={"errors": {p: results[p].error for p in failed}},
            )
        else:
            logger.info(f"Post {post.id} published to all platforms")

        return PublishPostResult(
            success=all(result.success for result in outcomes),
            status=status,
            results=results,
        )

    async def process_scheduled_posts(self) -> Dict[str, PublishPostResult]:
        """
        Run one scheduler tick: publish every due post.

        Never raises. A failure fetching due posts ends the tick with no
        effect; a failure in one post does not affect the others.

        Returns:
            Results keyed by post id
        """
        set_publish_context(tick_id=str(uuid.uuid4()))

        try:
            posts = await self.storage.get_scheduled_posts_due()
        except Exception:
            logger.exception("Failed to fetch scheduled posts")
            return {}

        if not posts:
            logger.debug("No scheduled posts due")
            return {}

        logger.info(f"Processing {len(posts)} scheduled posts")
        semaphore = asyncio.Semaphore(self.max_concurrent_posts)

        async def publish_one(post: Post) -> PublishPostResult:
            async with semaphore:
                try:
                    return await self.publish_post(post)
                except Exception as e:
                    logger.exception(f"Error processing post {post.id}")
                    return PublishPostResult(
                        success=False,
                        results={
                            platform: PlatformPublishResult(success=False, error=str(e))
                            for platform in post.platforms
                        },
                    )

        with Timer("scheduler_tick", logger):
            outcomes = await asyncio.gather(*(publish_one(post) for post in posts))

        return {post.id: outcome for post, outcome in zip(posts, outcomes)}


# Global service instance
publisher_service = PublisherService()
