"""
Shared exceptions for encryption, OAuth and publishing.

Encryption and OAuth functions raise these to their callers. The publisher
catches them per platform and per post and reports them as results.
"""

from typing import Any, Dict, Optional


class SocialError(Exception):
    """Base exception for all sfs_social errors."""

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        raw_error: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the error.

        Args:
            message: Human-readable error message
            platform: Platform id the error relates to, if any
            raw_error: Raw error payload returned by the provider
        """
        super().__init__(message)
        self.message = message
        self.platform = platform
        self.raw_error = raw_error


class InvalidInputError(SocialError):
    """Empty or malformed argument passed to the encryption service."""

    pass


class ConfigError(SocialError):
    """Required configuration is missing or malformed."""

    pass


class EncryptionConfigError(ConfigError):
    """The encryption key is absent or not 32 bytes."""

    pass


class NotConfiguredError(ConfigError):
    """OAuth operation attempted for a platform without client credentials."""

    pass


class DecryptionError(SocialError):
    """Authentication tag did not verify (tampered data or wrong key)."""

    pass


class TokenExchangeError(SocialError):
    """Provider rejected the authorization code exchange."""

    pass


class TokenRefreshError(SocialError):
    """Provider rejected the token refresh."""

    pass


class ProfileFetchError(SocialError):
    """Provider failed to return the user profile."""

    pass


class ValidationFailedError(SocialError):
    """Post content or media does not meet the platform requirements."""

    pass


class PublishError(SocialError):
    """Provider publish call failed."""

    pass
