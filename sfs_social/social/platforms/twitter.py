"""
Twitter/X API v2 integration.

Implements the OAuth 2.0 authorization code flow with PKCE and posts
tweets through API v2.
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

# Plain PKCE: the verifier equals the challenge, so no per-state storage
# is needed between the authorize redirect and the callback.
PKCE_CHALLENGE = "challenge"
PKCE_METHOD = "plain"


class TwitterPlatform(BasePlatform):
    """
    Twitter/X API v2 integration.

    Token requests authenticate the client with HTTP Basic auth.
    """

    AUTHORIZATION_URL = "https://twitter.com/i/oauth2/authorize"
    TOKEN_URL = "https://api.twitter.com/2/oauth2/token"

    API_BASE = "https://api.twitter.com/2"

    def __init__(self) -> None:
        super().__init__(SocialPlatform.TWITTER)

    def authorization_params(self, config: OAuthConfig, state: str) -> Dict[str, str]:
        params = super().authorization_params(config, state)
        params["code_challenge"] = PKCE_CHALLENGE
        params["code_challenge_method"] = PKCE_METHOD
        return params

    async def _exchange_request(
        self,
        client: httpx.AsyncClient,
        config: OAuthConfig,
        code: str,
    ) -> httpx.Response:
        return await client.post(
            config.token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": config.redirect_uri,
                "client_id": config.client_id,
                "code_verifier": PKCE_CHALLENGE,
            },
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Authorization": self._basic_auth(config),
            },
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
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": config.client_id,
            },
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Authorization": self._basic_auth(config),
            },
        )

    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        """Get the authenticated user's Twitter profile."""
        response = await client.get(
            f"{self.API_BASE}/users/me",
            headers={"Authorization": f"Bearer {access_token}"},
            params={"user.fields": "profile_image_url,public_metrics"},
        )
        user = self._profile_json(response)["data"]
        metrics = user.get("public_metrics") or {}
        return SocialProfile(
            id=str(user["id"]),
            username=user.get("username"),
            name=user.get("name"),
            profile_picture=user.get("profile_image_url"),
            followers_count=metrics.get("followers_count"),
        )

    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        """Publish a tweet."""
        payload: Dict[str, Any] = {"text": post.content}

        async with self._client() as client:
            response = await client.post(
                f"{self.API_BASE}/tweets",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
        data = self._publish_json(response, "post tweet")

        tweet_id = (data.get("data") or {}).get("id")
        if not tweet_id:
            raise PublishError("Twitter did not return a tweet id", platform=self.platform.value)

        logger.info(f"Published tweet {tweet_id} for user {account.platform_username}")
        return str(tweet_id)
