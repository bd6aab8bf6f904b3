"""
YouTube Data API v3 integration.

Videos are fetched from the post's media URL and sent with a resumable
upload: an initial metadata request returns an upload URL, then the bytes
are PUT to it.
"""

import logging
from typing import Dict

import httpx

from sfs_social.errors import ProfileFetchError, PublishError
from sfs_social.types.social import (
    OAuthConfig,
    Post,
    SocialAccount,
    SocialPlatform,
    SocialProfile,
)

from .base import BasePlatform

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100


class YouTubePlatform(BasePlatform):
    """YouTube channel uploads."""

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    API_BASE = "https://www.googleapis.com/youtube/v3"
    UPLOAD_URL = "https://www.googleapis.com/upload/youtube/v3/videos"

    def __init__(self) -> None:
        super().__init__(SocialPlatform.YOUTUBE)

    def authorization_params(self, config: OAuthConfig, state: str) -> Dict[str, str]:
        params = super().authorization_params(config, state)
        # Google only issues a refresh token on offline access with consent
        params["access_type"] = "offline"
        params["prompt"] = "consent"
        return params

    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        response = await client.get(
            f"{self.API_BASE}/channels",
            params={"part": "snippet,statistics", "mine": "true"},
            headers={"Authorization": f"Bearer {access_token}"},
        )
        items = self._profile_json(response).get("items") or []
        if not items:
            raise ProfileFetchError(
                "Profile fetch failed: no YouTube channel found",
                platform=self.platform.value,
            )

        channel = items[0]
        snippet = channel.get("snippet") or {}
        statistics = channel.get("statistics") or {}
        subscribers = statistics.get("subscriberCount")
        thumbnail = ((snippet.get("thumbnails") or {}).get("default") or {}).get("url")

        return SocialProfile(
            id=str(channel["id"]),
            username=snippet.get("title"),
            name=snippet.get("title"),
            profile_picture=thumbnail,
            followers_count=int(subscribers) if subscribers is not None else None,
        )

    @staticmethod
    def _title_for(post: Post) -> str:
        first_line = post.content.strip().splitlines()[0] if post.content.strip() else "Untitled"
        return first_line[:MAX_TITLE_LENGTH]

    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        videos = self._media_of_kind(post, "video", allow_unknown=True)
        if not videos:
            raise PublishError("YouTube requires video content", platform=self.platform.value)

        auth = {"Authorization": f"Bearer {access_token}"}
        metadata = {
            "snippet": {"title": self._title_for(post), "description": post.content},
            "status": {"privacyStatus": "public"},
        }

        async with self._client() as client:
            source = await client.get(videos[0], follow_redirects=True)
            if not source.is_success:
                raise PublishError(
                    f"Failed to download video: HTTP {source.status_code}",
                    platform=self.platform.value,
                )
            content_type = source.headers.get("content-type", "video/*")

            session = await client.post(
                self.UPLOAD_URL,
                params={"uploadType": "resumable", "part": "snippet,status"},
                headers={
                    **auth,
                    "Content-Type": "application/json; charset=UTF-8",
                    "X-Upload-Content-Type": content_type,
                    "X-Upload-Content-Length": str(len(source.content)),
                },
                json=metadata,
            )
            if not session.is_success:
                self._publish_json(session, "start upload")
            upload_url = session.headers.get("location")
            if not upload_url:
                raise PublishError(
                    "YouTube did not return an upload URL",
                    platform=self.platform.value,
                )

            response = await client.put(
                upload_url,
                headers={**auth, "Content-Type": content_type},
                content=source.content,
            )
        video_id = self._publish_json(response, "upload video")["id"]

        logger.info(f"Uploaded YouTube video {video_id}")
        return str(video_id)
