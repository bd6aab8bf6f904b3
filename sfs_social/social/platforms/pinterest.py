"""Pinterest API v5 integration."""

import logging

import httpx

from sfs_social.errors import PublishError
from sfs_social.types.social import (
    Post,
    SocialAccount,
    SocialPlatform,
    SocialProfile,
)

from .base import BasePlatform

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100


class PinterestPlatform(BasePlatform):
    """Creates image Pins on the user's first board."""

    AUTHORIZATION_URL = "https://www.pinterest.com/oauth/"
    TOKEN_URL = "https://api.pinterest.com/v5/oauth/token"

    API_BASE = "https://api.pinterest.com/v5"

    def __init__(self) -> None:
        super().__init__(SocialPlatform.PINTEREST)

    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        response = await client.get(
            f"{self.API_BASE}/user_account",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        data = self._profile_json(response)
        username = data.get("username")
        return SocialProfile(
            id=str(data.get("id") or username),
            username=username,
            name=data.get("business_name") or username,
            profile_picture=data.get("profile_image"),
            followers_count=data.get("follower_count"),
        )

    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        images = self._media_of_kind(post, "image", allow_unknown=True)
        if not images:
            raise PublishError("Pinterest requires image content", platform=self.platform.value)

        auth = {"Authorization": f"Bearer {access_token}"}

        async with self._client() as client:
            response = await client.get(
                f"{self.API_BASE}/boards",
                params={"page_size": 1},
                headers=auth,
            )
            boards = self._publish_json(response, "list boards").get("items") or []
            if not boards:
                raise PublishError(
                    "No Pinterest board available for publishing",
                    platform=self.platform.value,
                )

            response = await client.post(
                f"{self.API_BASE}/pins",
                headers={**auth, "Content-Type": "application/json"},
                json={
                    "board_id": boards[0]["id"],
                    "title": post.content.splitlines()[0][:MAX_TITLE_LENGTH] if post.content else "",
                    "description": post.content,
                    "media_source": {"source_type": "image_url", "url": images[0]},
                },
            )
        pin_id = self._publish_json(response, "create pin")["id"]

        logger.info(f"Created Pin {pin_id}")
        return str(pin_id)
