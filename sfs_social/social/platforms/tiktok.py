"""
TikTok Content Posting API integration.

TikTok names its client id ``client_key``, nests token and user fields one
level under ``data``, and always answers with an ``error`` object whose code
is ``ok`` on success.
"""

import logging
from typing import Any, Dict

import httpx

from sfs_social.errors import PublishError
from sfs_social.types.social import (
    OAuthConfig,
    Post,
    SocialAccount,
    SocialPlatform,
    SocialProfile,
)

from .base import BasePlatform

logger = logging.getLogger(__name__)


class TikTokPlatform(BasePlatform):
    """TikTok video publishing via PULL_FROM_URL."""

    AUTHORIZATION_URL = "https://www.tiktok.com/v2/auth/authorize/"
    TOKEN_URL = "https://open.tiktokapis.com/v2/oauth/token/"
    CLIENT_ID_PARAM = "client_key"

    API_BASE = "https://open.tiktokapis.com/v2"

    def __init__(self) -> None:
        super().__init__(SocialPlatform.TIKTOK)

    async def _exchange_request(
        self,
        client: httpx.AsyncClient,
        config: OAuthConfig,
        code: str,
    ) -> httpx.Response:
        return await client.post(
            config.token_url,
            json={
                "client_key": config.client_id,
                "client_secret": config.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": config.redirect_uri,
            },
            headers={"Content-Type": "application/json"},
        )

    async def _refresh_request(
        self,
        client: httpx.AsyncClient,
        config: OAuthConfig,
        refresh_token: str,
    ) -> httpx.Response:
        return await client.post(
            config.token_url,
            data={
                "client_key": config.client_id,
                "client_secret": config.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def _token_payload(self, data: Dict[str, Any]) -> Dict[str, Any]:
        nested = data.get("data")
        return nested if isinstance(nested, dict) else data

    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        response = await client.post(
            f"{self.API_BASE}/user/info/",
            params={"fields": "open_id,display_name,avatar_url,follower_count"},
            headers={"Authorization": f"Bearer {access_token}"},
        )
        user = self._profile_json(response)["data"]["user"]
        return SocialProfile(
            id=str(user["open_id"]),
            username=user.get("display_name"),
            name=user.get("display_name"),
            profile_picture=user.get("avatar_url"),
            followers_count=user.get("follower_count"),
        )

    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        """Start a direct post that TikTok pulls from the video URL."""
        videos = self._media_of_kind(post, "video", allow_unknown=True)
        if not videos:
            raise PublishError("TikTok requires video content", platform=self.platform.value)

        payload = {
            "post_info": {
                "title": post.content[: self.config.max_text_length],
                "privacy_level": "PUBLIC_TO_EVERYONE",
            },
            "source_info": {"source": "PULL_FROM_URL", "video_url": videos[0]},
        }

        async with self._client() as client:
            response = await client.post(
                f"{self.API_BASE}/post/publish/video/init/",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json; charset=UTF-8",
                },
                json=payload,
            )
        data = self._publish_json(response, "initialize video post")

        error = data.get("error") or {}
        if error.get("code", "ok") != "ok":
            raise PublishError(
                f"Failed to initialize video post on TikTok: {error.get('message') or error['code']}",
                platform=self.platform.value,
                raw_error=data,
            )

        publish_id = (data.get("data") or {}).get("publish_id")
        if not publish_id:
            raise PublishError("TikTok did not return a publish id", platform=self.platform.value)

        logger.info(f"Started TikTok publish {publish_id}")
        return str(publish_id)
