"""Utility modules for sfs_social."""

from .logging import (
    DevelopmentFormatter,
    JSONFormatter,
    PublishContextFilter,
    SensitiveDataFilter,
    Timer,
    clear_publish_context,
    redact_sensitive_data,
    set_publish_context,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "set_publish_context",
    "clear_publish_context",
    "Timer",
    "JSONFormatter",
    "DevelopmentFormatter",
    "PublishContextFilter",
    "SensitiveDataFilter",
    "redact_sensitive_data",
]
