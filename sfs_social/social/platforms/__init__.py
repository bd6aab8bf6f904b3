"""
Social media platform integrations.

One strategy per supported platform behind the BasePlatform interface.
"""

from typing import Dict, Optional, Union

from sfs_social.types.social import SocialPlatform

from .base import BasePlatform
from .facebook import FacebookPlatform
from .instagram import InstagramPlatform
from .linkedin import LinkedInPlatform
from .pinterest import PinterestPlatform
from .tiktok import TikTokPlatform
from .twitter import TwitterPlatform
from .youtube import YouTubePlatform

PLATFORMS: Dict[SocialPlatform, BasePlatform] = {
    SocialPlatform.FACEBOOK: FacebookPlatform(),
    SocialPlatform.INSTAGRAM: InstagramPlatform(),
    SocialPlatform.TWITTER: TwitterPlatform(),
    SocialPlatform.LINKEDIN: LinkedInPlatform(),
    SocialPlatform.TIKTOK: TikTokPlatform(),
    SocialPlatform.YOUTUBE: YouTubePlatform(),
    SocialPlatform.PINTEREST: PinterestPlatform(),
}


def get_platform(platform: Union[str, SocialPlatform]) -> Optional[BasePlatform]:
    """Get the integration for a platform id, or None if unsupported."""
    parsed = SocialPlatform.parse(platform)
    if parsed is None:
        return None
    return PLATFORMS[parsed]


__all__ = [
    "BasePlatform",
    "FacebookPlatform",
    "InstagramPlatform",
    "LinkedInPlatform",
    "PLATFORMS",
    "PinterestPlatform",
    "TikTokPlatform",
    "TwitterPlatform",
    "YouTubePlatform",
    "get_platform",
]
