"""
In-memory storage collaborator.

Suitable for development and tests. Data is lost on restart.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sfs_social.types.social import (
    Post,
    PostStatus,
    SocialAccount,
    SocialPlatform,
    utc_now,
)

from .base import SocialStorage

logger = logging.getLogger(__name__)


class MemStorage(SocialStorage):
    """
    Dict-backed storage.

    All mutations go through one asyncio.Lock so concurrent updates keyed by
    post id never interleave.
    """

    def __init__(self) -> None:
        self._posts: Dict[str, Post] = {}
        self._accounts: Dict[Tuple[str, SocialPlatform], SocialAccount] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Posts
    # =========================================================================

    async def create_post(self, post: Post) -> Post:
        async with self._lock:
            self._posts[post.id] = post
        logger.debug(f"Created post {post.id}")
        return post

    async def get_post(self, post_id: str) -> Optional[Post]:
        return self._posts.get(post_id)

    async def get_scheduled_posts_due(self, now: Optional[datetime] = None) -> List[Post]:
        now = now or utc_now()
        due = [post for post in self._posts.values() if post.is_due(now)]
        return sorted(due, key=lambda post: post.scheduled_at)

    async def update_post(self, post_id: str, updates: Dict[str, Any]) -> Optional[Post]:
        """
        Apply a partial update.

        Status only moves forward (draft, scheduled, then published or
        failed). An update asking for any other status change is rejected
        and None is returned.
        """
        async with self._lock:
            current = self._posts.get(post_id)
            if current is None:
                logger.warning(f"Post {post_id} not found for update")
                return None

            new_status = updates.get("status")
            if new_status is not None:
                new_status = PostStatus(new_status)
                if new_status != current.status and not current.status.can_transition_to(new_status):
                    logger.warning(
                        f"Refusing to move post {post_id} from "
                        f"{current.status.value} to {new_status.value}"
                    )
                    return None

            data = current.model_dump()
            data.update(updates)
            data["id"] = post_id
            data["updated_at"] = utc_now()
            updated = Post.model_validate(data)
            self._posts[post_id] = updated

        return updated

    # =========================================================================
    # Accounts
    # =========================================================================

    async def get_social_account(
        self,
        user_id: str,
        platform: SocialPlatform,
    ) -> Optional[SocialAccount]:
        return self._accounts.get((user_id, SocialPlatform(platform)))

    async def save_social_account(self, account: SocialAccount) -> SocialAccount:
        async with self._lock:
            account = account.model_copy(update={"updated_at": utc_now()})
            self._accounts[(account.user_id, account.platform)] = account
        logger.debug(f"Saved {account.platform.value} account for user {account.user_id}")
        return account


# Default storage instance
storage = MemStorage()
