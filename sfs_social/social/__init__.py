"""
Social account connection and scheduled publishing.

Provides:
- OAuth across seven platforms (oauth)
- Encrypted account storage and token refresh (accounts)
- Multi-platform publishing with partial-failure tolerance (publisher)
- A fixed-interval scheduler for due posts (worker)
"""

from .oauth import (
    exchange_code_for_token,
    fetch_user_profile,
    get_authorization_url,
    get_configured_platforms,
    get_oauth_config,
    refresh_access_token,
    validate_platform_config,
)
from .publisher import PublisherService, publisher_service, validate_post_for_platform
from .worker import PublisherScheduler, start_publisher, stop_publisher

__all__ = [
    "PublisherScheduler",
    "PublisherService",
    "exchange_code_for_token",
    "fetch_user_profile",
    "get_authorization_url",
    "get_configured_platforms",
    "get_oauth_config",
    "publisher_service",
    "refresh_access_token",
    "start_publisher",
    "stop_publisher",
    "validate_platform_config",
    "validate_post_for_platform",
]
