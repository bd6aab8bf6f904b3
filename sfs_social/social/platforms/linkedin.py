"""
LinkedIn API integration.

Uses OAuth 2.0 with OpenID Connect for the member profile and the UGC Posts
API for sharing.
"""

import logging
from typing import Any, Dict

import httpx

from sfs_social.types.social import (
    Post,
    SocialAccount,
    SocialPlatform,
    SocialProfile,
)

from .base import BasePlatform

logger = logging.getLogger(__name__)


class LinkedInPlatform(BasePlatform):
    """LinkedIn member sharing integration."""

    AUTHORIZATION_URL = "https://www.linkedin.com/oauth/v2/authorization"
    TOKEN_URL = "https://www.linkedin.com/oauth/v2/accessToken"

    API_BASE = "https://api.linkedin.com/v2"

    def __init__(self) -> None:
        super().__init__(SocialPlatform.LINKEDIN)

    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        response = await client.get(
            f"{self.API_BASE}/userinfo",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        data = self._profile_json(response)
        return SocialProfile(
            id=str(data["sub"]),
            username=data.get("name"),
            name=data.get("name"),
            profile_picture=data.get("picture"),
        )

    def _share_content(self, post: Post, person_urn: str) -> Dict[str, Any]:
        share: Dict[str, Any] = {
            "shareCommentary": {"text": post.content},
            "shareMediaCategory": "NONE",
        }

        # Media is shared as a link preview; binary asset upload is not used
        if post.media_urls:
            share["shareMediaCategory"] = "ARTICLE"
            share["media"] = [
                {"status": "READY", "originalUrl": url} for url in post.media_urls
            ]

        return {
            "author": person_urn,
            "lifecycleState": "PUBLISHED",
            "specificContent": {"com.linkedin.ugc.ShareContent": share},
            "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
        }

    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        """Publish a post to LinkedIn."""
        person_urn = f"urn:li:person:{account.platform_user_id}"

        async with self._client() as client:
            response = await client.post(
                f"{self.API_BASE}/ugcPosts",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json",
                    "X-Restli-Protocol-Version": "2.0.0",
                },
                json=self._share_content(post, person_urn),
            )
        data = self._publish_json(response, "share post")

        # The post URN normally comes back in a header rather than the body
        post_urn = response.headers.get("x-restli-id") or data.get("id", "")

        logger.info(f"Published LinkedIn post {post_urn}")
        return post_urn
