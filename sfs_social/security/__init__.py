"""Credential encryption helpers."""

from .encryption import (
    decrypt,
    encrypt,
    generate_encryption_key,
    hash_value,
    safe_compare,
)

__all__ = [
    "decrypt",
    "encrypt",
    "generate_encryption_key",
    "hash_value",
    "safe_compare",
]
