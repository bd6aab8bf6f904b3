"""
Facebook Graph API integration.

Users authorize with their personal account; posts are published to the
first Page they manage, using that Page's access token.
"""

import logging
from typing import Any, Dict, List

import httpx

from sfs_social.errors import PublishError
from sfs_social.types.social import (
    OAuthConfig,
    Post,
    SocialAccount,
    SocialPage,
    SocialPlatform,
    SocialProfile,
)

from .base import BasePlatform

logger = logging.getLogger(__name__)

GRAPH_VERSION = "v18.0"
GRAPH_BASE = f"https://graph.facebook.com/{GRAPH_VERSION}"
DIALOG_URL = f"https://www.facebook.com/{GRAPH_VERSION}/dialog/oauth"


class FacebookPlatform(BasePlatform):
    """Facebook Pages publishing."""

    AUTHORIZATION_URL = DIALOG_URL
    TOKEN_URL = f"{GRAPH_BASE}/oauth/access_token"

    def __init__(self) -> None:
        super().__init__(SocialPlatform.FACEBOOK)

    async def _refresh_request(
        self,
        client: httpx.AsyncClient,
        config: OAuthConfig,
        refresh_token: str,
    ) -> httpx.Response:
        """Facebook has no refresh grant; a long-lived token is obtained by exchange."""
        return await client.get(
            config.token_url,
            params={
                "grant_type": "fb_exchange_token",
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "fb_exchange_token": refresh_token,
            },
        )

    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        response = await client.get(
            f"{GRAPH_BASE}/me",
            params={
                "fields": "id,name,picture,accounts{id,name,followers_count}",
                "access_token": access_token,
            },
        )
        data = self._profile_json(response)

        pages = [
            SocialPage(
                id=str(page["id"]),
                name=page.get("name", ""),
                followers_count=page.get("followers_count"),
            )
            for page in (data.get("accounts") or {}).get("data", [])
        ]
        picture = ((data.get("picture") or {}).get("data") or {}).get("url")

        return SocialProfile(
            id=str(data["id"]),
            username=data.get("name"),
            name=data.get("name"),
            profile_picture=picture,
            pages=pages,
        )

    async def _managed_pages(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> List[Dict[str, Any]]:
        response = await client.get(
            f"{GRAPH_BASE}/me/accounts",
            params={"fields": "id,name,access_token", "access_token": access_token},
        )
        return self._publish_json(response, "list pages").get("data", [])

    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        """Publish to the user's Page feed, or as a photo when an image is attached."""
        images = self._media_of_kind(post, "image")

        async with self._client() as client:
            pages = await self._managed_pages(client, access_token)
            if not pages:
                raise PublishError(
                    "No Facebook Page available for publishing",
                    platform=self.platform.value,
                )
            page = pages[0]
            page_token = page.get("access_token") or access_token

            if images:
                response = await client.post(
                    f"{GRAPH_BASE}/{page['id']}/photos",
                    data={"url": images[0], "caption": post.content, "access_token": page_token},
                )
            else:
                response = await client.post(
                    f"{GRAPH_BASE}/{page['id']}/feed",
                    data={"message": post.content, "access_token": page_token},
                )
        data = self._publish_json(response, "publish page post")

        post_id = data.get("post_id") or data.get("id")
        if not post_id:
            raise PublishError("Facebook did not return a post id", platform=self.platform.value)

        logger.info(f"Published Facebook post {post_id} to page {page['id']}")
        return str(post_id)
