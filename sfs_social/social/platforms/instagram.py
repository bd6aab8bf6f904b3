"""
Instagram Graph API integration.

Instagram business accounts are reached through a Facebook login, so OAuth
goes through the Facebook dialog and Graph token endpoint. Publishing is a
two-step container flow: create a media container, then publish it.
"""

import logging

import httpx

from sfs_social.errors import ProfileFetchError, PublishError
from sfs_social.types.social import (
    Post,
    SocialAccount,
    SocialPlatform,
    SocialProfile,
)

from .base import BasePlatform
from .facebook import DIALOG_URL, GRAPH_BASE

logger = logging.getLogger(__name__)


class InstagramPlatform(BasePlatform):
    """Instagram business account publishing."""

    AUTHORIZATION_URL = DIALOG_URL
    TOKEN_URL = f"{GRAPH_BASE}/oauth/access_token"

    def __init__(self) -> None:
        super().__init__(SocialPlatform.INSTAGRAM)

    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        """Profile of the first Instagram business account linked to a managed Page."""
        response = await client.get(
            f"{GRAPH_BASE}/me/accounts",
            params={
                "fields": "instagram_business_account"
                "{id,username,name,profile_picture_url,followers_count}",
                "access_token": access_token,
            },
        )
        pages = self._profile_json(response).get("data", [])

        for page in pages:
            ig = page.get("instagram_business_account")
            if ig:
                return SocialProfile(
                    id=str(ig["id"]),
                    username=ig.get("username"),
                    name=ig.get("name"),
                    profile_picture=ig.get("profile_picture_url"),
                    followers_count=ig.get("followers_count"),
                )

        raise ProfileFetchError(
            "Profile fetch failed: no Instagram business account linked",
            platform=self.platform.value,
        )

    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        ig_user_id = account.platform_user_id
        images = self._media_of_kind(post, "image")
        videos = self._media_of_kind(post, "video")

        container = {"caption": post.content, "access_token": access_token}
        if images:
            container["image_url"] = images[0]
        elif videos:
            container["media_type"] = "REELS"
            container["video_url"] = videos[0]
        else:
            raise PublishError(
                "Instagram posts require an image or video",
                platform=self.platform.value,
            )

        async with self._client() as client:
            response = await client.post(f"{GRAPH_BASE}/{ig_user_id}/media", data=container)
            creation_id = self._publish_json(response, "create media container")["id"]

            response = await client.post(
                f"{GRAPH_BASE}/{ig_user_id}/media_publish",
                data={"creation_id": creation_id, "access_token": access_token},
            )
        media_id = self._publish_json(response, "publish media")["id"]

        logger.info(f"Published Instagram media {media_id}")
        return str(media_id)
