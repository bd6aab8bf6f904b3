"""
Base class for social media platform integrations.

Defines the interface that all platform implementations must follow and the
shared OAuth plumbing: config building, authorization URLs, token responses
and error wrapping. Subclasses override the request shapes that differ per
provider.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Type
from urllib.parse import urlencode

import httpx

from sfs_social.config import OAuthSettings, PublisherSettings
from sfs_social.errors import (
    NotConfiguredError,
    ProfileFetchError,
    PublishError,
    SocialError,
    TokenExchangeError,
    TokenRefreshError,
)
from sfs_social.types.social import (
    OAuthConfig,
    OAuthTokens,
    PLATFORM_CONFIGS,
    Post,
    SocialAccount,
    SocialPlatform,
    SocialProfile,
)
from sfs_social.utils.media import media_kind

logger = logging.getLogger(__name__)

REDIRECT_PATH = "/api/social/oauth/{platform}/callback"


class BasePlatform(ABC):
    """
    Abstract base class for social media platform integrations.

    All platform implementations must inherit from this class, set the
    OAuth endpoints and implement profile fetching and publishing.
    """

    AUTHORIZATION_URL: str = ""
    TOKEN_URL: str = ""

    # Name of the client id parameter in the authorization URL
    CLIENT_ID_PARAM = "client_id"

    def __init__(self, platform: SocialPlatform) -> None:
        """
        Initialize the platform integration.

        Args:
            platform: The platform this integration serves
        """
        self.config = PLATFORM_CONFIGS[platform]
        self.platform = platform
        self._logger = logging.getLogger(f"{__name__}.{platform.value}")
        # Overridable HTTP transport (httpx.MockTransport in tests)
        self._transport: Optional[httpx.AsyncBaseTransport] = None

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        """Check if both client id and secret are present."""
        return OAuthSettings().is_configured(self.platform)

    def redirect_uri(self, settings: Optional[OAuthSettings] = None) -> str:
        settings = settings or OAuthSettings()
        return settings.base_url + REDIRECT_PATH.format(platform=self.platform.value)

    def build_oauth_config(self) -> Optional[OAuthConfig]:
        """
        Build the OAuth client configuration from the environment.

        Returns:
            OAuthConfig, or None if credentials are missing
        """
        settings = OAuthSettings()
        client_id, client_secret = settings.credentials_for(self.platform)
        if not (client_id and client_secret):
            return None

        return OAuthConfig(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=self.redirect_uri(settings),
            scope=list(self.config.oauth_scopes),
            auth_url=self.AUTHORIZATION_URL,
            token_url=self.TOKEN_URL,
        )

    def _require_config(self) -> OAuthConfig:
        """Return the OAuth config or raise if the platform is unconfigured."""
        config = self.build_oauth_config()
        if config is None:
            raise NotConfiguredError(
                f"OAuth not configured for platform: {self.platform.value}",
                platform=self.platform.value,
            )
        return config

    def _client(self) -> httpx.AsyncClient:
        """HTTP client with the configured provider timeout."""
        timeout = PublisherSettings().publisher_http_timeout
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    @staticmethod
    def _basic_auth(config: OAuthConfig) -> str:
        credentials = f"{config.client_id}:{config.client_secret}"
        return "Basic " + base64.b64encode(credentials.encode()).decode()

    # -------------------------------------------------------------------------
    # OAuth Methods
    # -------------------------------------------------------------------------

    def authorization_params(self, config: OAuthConfig, state: str) -> Dict[str, str]:
        """Query parameters for the authorization URL."""
        return {
            self.CLIENT_ID_PARAM: config.client_id,
            "redirect_uri": config.redirect_uri,
            "scope": self.config.scope_separator.join(config.scope),
            "state": state,
            "response_type": "code",
        }

    def get_authorization_url(self, state: str) -> Optional[str]:
        """
        Get the OAuth authorization URL for user authentication.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL, or None if the platform is not configured
        """
        config = self.build_oauth_config()
        if config is None:
            return None
        return f"{config.auth_url}?{urlencode(self.authorization_params(config, state))}"

    async def _exchange_request(
        self,
        client: httpx.AsyncClient,
        config: OAuthConfig,
        code: str,
    ) -> httpx.Response:
        """Default exchange: form-encoded POST with client credentials in the body."""
        return await client.post(
            config.token_url,
            data={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": config.redirect_uri,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    async def _refresh_request(
        self,
        client: httpx.AsyncClient,
        config: OAuthConfig,
        refresh_token: str,
    ) -> httpx.Response:
        """Default refresh: form-encoded POST with grant_type=refresh_token."""
        return await client.post(
            config.token_url,
            data={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def _token_payload(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Locate the token fields in a token response body."""
        return data

    def _tokens_from_response(
        self,
        data: Dict[str, Any],
        previous_refresh_token: Optional[str] = None,
    ) -> OAuthTokens:
        if not isinstance(data, dict):
            raise ValueError("token response is not a JSON object")
        payload = self._token_payload(data)
        return OAuthTokens.from_response(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token") or previous_refresh_token,
            expires_in=payload.get("expires_in"),
        )

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            NotConfiguredError: If the platform has no client credentials
            TokenExchangeError: On provider or transport failure
        """
        config = self._require_config()
        try:
            async with self._client() as client:
                response = await self._exchange_request(client, config, code)
            data = self._json_or_raise(response, TokenExchangeError, "Token exchange failed")
            return self._tokens_from_response(data)
        except SocialError:
            raise
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise TokenExchangeError(
                f"Token exchange failed: {e}",
                platform=self.platform.value,
            ) from e

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Refresh an access token.

        The previous refresh token is kept when the provider does not
        issue a new one.

        Raises:
            NotConfiguredError: If the platform has no client credentials
            TokenRefreshError: On provider or transport failure
        """
        config = self._require_config()
        try:
            async with self._client() as client:
                response = await self._refresh_request(client, config, refresh_token)
            data = self._json_or_raise(response, TokenRefreshError, "Token refresh failed")
            return self._tokens_from_response(data, previous_refresh_token=refresh_token)
        except SocialError:
            raise
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise TokenRefreshError(
                f"Token refresh failed: {e}",
                platform=self.platform.value,
            ) from e

    # -------------------------------------------------------------------------
    # User/Account Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _fetch_profile(
        self,
        client: httpx.AsyncClient,
        access_token: str,
    ) -> SocialProfile:
        """Call the provider and normalize its profile schema."""
        pass

    async def get_user_profile(self, access_token: str) -> SocialProfile:
        """
        Get the authenticated user's normalized profile.

        Raises:
            NotConfiguredError: If the platform has no client credentials
            ProfileFetchError: On provider or transport failure
        """
        self._require_config()
        try:
            async with self._client() as client:
                return await self._fetch_profile(client, access_token)
        except SocialError:
            raise
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            raise ProfileFetchError(
                f"Profile fetch failed: {e}",
                platform=self.platform.value,
            ) from e

    # -------------------------------------------------------------------------
    # Content Publishing Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    async def publish_post(
        self,
        post: Post,
        access_token: str,
        account: SocialAccount,
    ) -> str:
        """
        Publish a post to the platform.

        Args:
            post: The post to publish
            access_token: Decrypted access token
            account: The connected account to post from

        Returns:
            The platform's id for the created post

        Raises:
            PublishError: If the provider rejects the request
        """
        pass

    def _media_of_kind(self, post: Post, kind: str, allow_unknown: bool = False) -> List[str]:
        """
        Media URLs on the post classified as ``kind`` ("image" or "video").

        Platforms that accept a single media kind pass ``allow_unknown`` so
        URLs without a recognizable extension are sent and left to the provider.
        """
        accepted = (kind, None) if allow_unknown else (kind,)
        return [url for url in post.media_urls if media_kind(url) in accepted]

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    @staticmethod
    def _error_detail(response: httpx.Response) -> Tuple[str, Optional[Dict[str, Any]]]:
        """
        Extract a readable error from a provider response.

        Returns:
            Tuple of (detail message, raw error payload if JSON)
        """
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}", None

        if not isinstance(data, dict):
            return str(data), None

        error = data.get("error")
        if isinstance(error, dict):
            detail = error.get("message") or error.get("code") or str(error)
        else:
            detail = (
                data.get("error_description")
                or error
                or data.get("message")
                or data.get("detail")
                or f"HTTP {response.status_code}"
            )
        return str(detail), data

    def _json_or_raise(
        self,
        response: httpx.Response,
        error_class: Type[SocialError],
        prefix: str,
    ) -> Dict[str, Any]:
        """Return the JSON body of a 2xx response, otherwise raise ``error_class``."""
        if not response.is_success:
            detail, raw = self._error_detail(response)
            self._logger.warning(
                f"{prefix} ({response.status_code}): {detail}",
                extra={"platform": self.platform.value},
            )
            raise error_class(f"{prefix}: {detail}", platform=self.platform.value, raw_error=raw)
        return response.json() if response.content else {}

    def _profile_json(self, response: httpx.Response) -> Dict[str, Any]:
        return self._json_or_raise(response, ProfileFetchError, "Profile fetch failed")

    def _publish_json(self, response: httpx.Response, action: str) -> Dict[str, Any]:
        return self._json_or_raise(
            response,
            PublishError,
            f"Failed to {action} on {self.config.name}",
        )
