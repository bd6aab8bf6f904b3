"""
Storage collaborator interface.

The publisher and account helpers only depend on this interface. Swap in a
durable implementation without touching them.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from sfs_social.types.social import Post, SocialAccount, SocialPlatform


class SocialStorage(ABC):
    """Persistence for posts and connected accounts."""

    @abstractmethod
    async def get_scheduled_posts_due(self, now: Optional[datetime] = None) -> List[Post]:
        """
        Get posts that are scheduled and whose time has come.

        Args:
            now: Reference time (defaults to current UTC time)

        Returns:
            Due posts, oldest scheduled_at first
        """
        pass

    @abstractmethod
    async def update_post(self, post_id: str, updates: Dict[str, Any]) -> Optional[Post]:
        """
        Apply a partial update to a post.

        Returns:
            The updated post, or None if it does not exist
        """
        pass

    @abstractmethod
    async def get_post(self, post_id: str) -> Optional[Post]:
        pass

    @abstractmethod
    async def create_post(self, post: Post) -> Post:
        pass

    @abstractmethod
    async def get_social_account(
        self,
        user_id: str,
        platform: SocialPlatform,
    ) -> Optional[SocialAccount]:
        """Get the account a user connected for a platform."""
        pass

    @abstractmethod
    async def save_social_account(self, account: SocialAccount) -> SocialAccount:
        """Insert or replace the account for (user_id, platform)."""
        pass
