"""
Type definitions for the sfs_social project.
"""

from .social import (
    PLATFORM_CONFIGS,
    OAuthConfig,
    OAuthTokens,
    PlatformConfig,
    PlatformPublishResult,
    Post,
    PostStatus,
    PublishPostResult,
    SocialAccount,
    SocialPage,
    SocialPlatform,
    SocialProfile,
    ValidationResult,
    get_platform_config,
    utc_now,
)

__all__ = [
    # Platforms
    "PLATFORM_CONFIGS",
    "PlatformConfig",
    "SocialPlatform",
    "get_platform_config",
    # Posts
    "Post",
    "PostStatus",
    # Accounts and OAuth
    "OAuthConfig",
    "OAuthTokens",
    "SocialAccount",
    "SocialPage",
    "SocialProfile",
    # Results
    "PlatformPublishResult",
    "PublishPostResult",
    "ValidationResult",
    "utc_now",
]
