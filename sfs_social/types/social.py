"""
Type definitions for social account connection and scheduled publishing.

Provides models for:
- Supported platforms and their static configuration
- Posts and their status state machine
- Connected accounts (with encrypted tokens)
- OAuth configuration, tokens and normalized profiles
- Validation and publish results
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SocialPlatform(str, Enum):
    """Supported social media platforms."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    PINTEREST = "pinterest"

    @classmethod
    def parse(cls, value: "str | SocialPlatform") -> Optional["SocialPlatform"]:
        """Return the platform for an id, or None if it is not supported."""
        try:
            return cls(value)
        except ValueError:
            return None


class PostStatus(str, Enum):
    """Status of a post."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PostStatus.PUBLISHED, PostStatus.FAILED)

    def can_transition_to(self, target: "PostStatus") -> bool:
        """Check whether moving from this status to ``target`` is allowed."""
        return target in _STATUS_TRANSITIONS[self]


_STATUS_TRANSITIONS: Dict[PostStatus, frozenset] = {
    PostStatus.DRAFT: frozenset({PostStatus.SCHEDULED}),
    PostStatus.SCHEDULED: frozenset({PostStatus.PUBLISHED, PostStatus.FAILED}),
    PostStatus.PUBLISHED: frozenset(),
    PostStatus.FAILED: frozenset(),
}


# -----------------------------------------------------------------------------
# Post Models
# -----------------------------------------------------------------------------


class Post(BaseModel):
    """A post composed by a user for one or more platforms."""

    id: str
    user_id: str
    content: str
    platforms: List[str] = Field(..., min_length=1)
    media_urls: List[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    scheduled_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("platforms")
    @classmethod
    def dedupe_platforms(cls, v: List[str]) -> List[str]:
        """Keep platform order but drop repeats."""
        return list(dict.fromkeys(v))

    @field_validator("media_urls", mode="before")
    @classmethod
    def default_media_urls(cls, v: Optional[List[str]]) -> List[str]:
        return v or []

    @field_validator("scheduled_at", "published_at", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Treat naive datetimes as UTC."""
        return _as_utc(v)

    @model_validator(mode="after")
    def check_published_at(self) -> "Post":
        """published_at is set exactly when the post is published."""
        if self.status == PostStatus.PUBLISHED and self.published_at is None:
            raise ValueError("published posts must have published_at")
        if self.status != PostStatus.PUBLISHED and self.published_at is not None:
            raise ValueError("published_at is only allowed on published posts")
        return self

    def is_due(self, now: Optional[datetime] = None) -> bool:
        """Check whether the post is scheduled and its time has come."""
        now = now or utc_now()
        return (
            self.status == PostStatus.SCHEDULED
            and self.scheduled_at is not None
            and self.scheduled_at <= now
        )


# -----------------------------------------------------------------------------
# OAuth and Account Models
# -----------------------------------------------------------------------------


class SocialAccount(BaseModel):
    """
    A connected social media account.

    ``access_token`` and ``refresh_token`` hold encrypted blobs produced by
    :func:`sfs_social.security.encryption.encrypt`, never plaintext.
    """

    id: str
    user_id: str
    platform: SocialPlatform
    platform_user_id: str
    platform_username: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("expires_at", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class OAuthConfig(BaseModel):
    """Per-platform OAuth client configuration."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    redirect_uri: str
    scope: List[str]
    auth_url: str
    token_url: str


class OAuthTokens(BaseModel):
    """Tokens returned by a code exchange or refresh."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_response(
        cls,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_in: Optional[int] = None,
    ) -> "OAuthTokens":
        """Build tokens, computing expires_at as now + expires_in."""
        expires_at = None
        if expires_in is not None:
            expires_in = int(expires_in)
            expires_at = utc_now() + timedelta(seconds=expires_in)
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
            expires_at=expires_at,
        )


class SocialPage(BaseModel):
    """A page the user can manage (Facebook)."""

    id: str
    name: str
    followers_count: Optional[int] = None


class SocialProfile(BaseModel):
    """Provider-agnostic view of a user's profile or channel."""

    id: str
    username: Optional[str] = None
    name: Optional[str] = None
    profile_picture: Optional[str] = None
    followers_count: Optional[int] = None
    pages: Optional[List[SocialPage]] = None


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------


class ValidationResult(BaseModel):
    """Outcome of validating content for a platform."""

    valid: bool
    error: Optional[str] = None


class PlatformPublishResult(BaseModel):
    """Outcome of publishing a post to a single platform."""

    success: bool
    platform_post_id: Optional[str] = None
    error: Optional[str] = None


class PublishPostResult(BaseModel):
    """Aggregated outcome of publishing a post to all of its platforms."""

    success: bool
    status: Optional[PostStatus] = None
    results: Dict[str, PlatformPublishResult] = Field(default_factory=dict)


# -----------------------------------------------------------------------------
# Platform Configuration
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class PlatformConfig:
    """Static configuration for a social media platform."""

    platform: SocialPlatform
    name: str
    max_text_length: int
    client_id_env: str
    client_secret_env: str
    oauth_scopes: List[str] = field(default_factory=list)
    scope_separator: str = " "
    required_media: Optional[Literal["image", "video"]] = None


PLATFORM_CONFIGS: Dict[SocialPlatform, PlatformConfig] = {
    SocialPlatform.FACEBOOK: PlatformConfig(
        platform=SocialPlatform.FACEBOOK,
        name="Facebook",
        max_text_length=63206,
        client_id_env="FACEBOOK_APP_ID",
        client_secret_env="FACEBOOK_APP_SECRET",
        oauth_scopes=[
            "pages_manage_posts",
            "pages_read_engagement",
            "pages_show_list",
            "public_profile",
        ],
        scope_separator=",",
    ),
    SocialPlatform.INSTAGRAM: PlatformConfig(
        platform=SocialPlatform.INSTAGRAM,
        name="Instagram",
        max_text_length=2200,
        client_id_env="INSTAGRAM_CLIENT_ID",
        client_secret_env="INSTAGRAM_CLIENT_SECRET",
        oauth_scopes=[
            "instagram_basic",
            "instagram_content_publish",
            "pages_show_list",
        ],
        scope_separator=",",
    ),
    SocialPlatform.TWITTER: PlatformConfig(
        platform=SocialPlatform.TWITTER,
        name="Twitter/X",
        max_text_length=280,
        client_id_env="TWITTER_CLIENT_ID",
        client_secret_env="TWITTER_CLIENT_SECRET",
        oauth_scopes=["tweet.read", "tweet.write", "users.read", "offline.access"],
    ),
    SocialPlatform.LINKEDIN: PlatformConfig(
        platform=SocialPlatform.LINKEDIN,
        name="LinkedIn",
        max_text_length=3000,
        client_id_env="LINKEDIN_CLIENT_ID",
        client_secret_env="LINKEDIN_CLIENT_SECRET",
        oauth_scopes=["openid", "profile", "email", "w_member_social"],
    ),
    SocialPlatform.TIKTOK: PlatformConfig(
        platform=SocialPlatform.TIKTOK,
        name="TikTok",
        max_text_length=2200,
        client_id_env="TIKTOK_CLIENT_KEY",
        client_secret_env="TIKTOK_CLIENT_SECRET",
        oauth_scopes=["user.info.basic", "video.publish", "video.upload"],
        scope_separator=",",
        required_media="video",
    ),
    SocialPlatform.YOUTUBE: PlatformConfig(
        platform=SocialPlatform.YOUTUBE,
        name="YouTube",
        max_text_length=5000,
        client_id_env="YOUTUBE_CLIENT_ID",
        client_secret_env="YOUTUBE_CLIENT_SECRET",
        oauth_scopes=[
            "https://www.googleapis.com/auth/youtube.upload",
            "https://www.googleapis.com/auth/youtube.readonly",
        ],
        required_media="video",
    ),
    SocialPlatform.PINTEREST: PlatformConfig(
        platform=SocialPlatform.PINTEREST,
        name="Pinterest",
        max_text_length=500,
        client_id_env="PINTEREST_APP_ID",
        client_secret_env="PINTEREST_APP_SECRET",
        oauth_scopes=["boards:read", "pins:read", "pins:write", "user_accounts:read"],
        scope_separator=",",
        required_media="image",
    ),
}


def get_platform_config(platform: SocialPlatform) -> PlatformConfig:
    """Get configuration for a platform."""
    return PLATFORM_CONFIGS[platform]
