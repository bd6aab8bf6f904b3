"""
Encryption of OAuth credentials at rest.

Tokens are sealed with AES-256-GCM. Every call derives a fresh per-message key
from the master key with HKDF-SHA256 over a random salt, and uses a fresh IV,
so identical plaintexts never produce identical blobs.

Blob format: ``salt:iv:authTag:ciphertext``, each segment standard base64.

The master key is read from ``ENCRYPTION_KEY`` (base64, 32 bytes) on every
call. Generate one with :func:`generate_encryption_key`.
"""

import base64
import binascii
import hashlib
import hmac
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from sfs_social.config import EncryptionSettings
from sfs_social.errors import DecryptionError, EncryptionConfigError, InvalidInputError

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 12
SALT_LENGTH = 64
TAG_LENGTH = 16
SEGMENT_SEPARATOR = ":"
HKDF_INFO = b"sfs-social-token-encryption"


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(data: str) -> bytes:
    return base64.b64decode(data.encode("ascii"), validate=True)


def _get_master_key() -> bytes:
    """
    Load and validate the master key from configuration.

    Raises:
        EncryptionConfigError: If the key is missing or not 32 bytes
    """
    secret = EncryptionSettings().encryption_key
    raw: Optional[str] = secret.get_secret_value() if secret else None
    if not raw:
        raise EncryptionConfigError("ENCRYPTION_KEY environment variable is not set")

    try:
        key = _b64decode(raw.strip())
    except (binascii.Error, ValueError):
        raise EncryptionConfigError("ENCRYPTION_KEY must be exactly 32 bytes")

    if len(key) != KEY_LENGTH:
        raise EncryptionConfigError("ENCRYPTION_KEY must be exactly 32 bytes")
    return key


def _derive_key(master_key: bytes, salt: bytes) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        info=HKDF_INFO,
    )
    return hkdf.derive(master_key)


def encrypt(plaintext: Optional[str]) -> str:
    """
    Encrypt a secret for storage.

    Args:
        plaintext: The value to seal, must be non-empty

    Returns:
        ``salt:iv:authTag:ciphertext`` blob

    Raises:
        InvalidInputError: If plaintext is empty or None
        EncryptionConfigError: If the master key is missing or malformed
    """
    if not plaintext:
        raise InvalidInputError("Cannot encrypt empty or null value")

    master_key = _get_master_key()
    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)

    sealed = AESGCM(_derive_key(master_key, salt)).encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

    return SEGMENT_SEPARATOR.join(
        _b64encode(part) for part in (salt, iv, tag, ciphertext)
    )


def decrypt(blob: Optional[str]) -> str:
    """
    Decrypt a blob produced by :func:`encrypt`.

    Tampered data and a wrong key fail identically.

    Raises:
        InvalidInputError: If blob is empty or not four segments
        DecryptionError: If authentication fails
        EncryptionConfigError: If the master key is missing or malformed
    """
    if not blob:
        raise InvalidInputError("Cannot decrypt empty or null value")

    parts = blob.split(SEGMENT_SEPARATOR)
    if len(parts) != 4:
        raise InvalidInputError("Invalid ciphertext format")

    master_key = _get_master_key()

    try:
        salt, iv, tag, ciphertext = (_b64decode(part) for part in parts)
        aead = AESGCM(_derive_key(master_key, salt))
        plaintext = aead.decrypt(iv, ciphertext + tag, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, ValueError, binascii.Error):
        logger.warning("Token decryption failed")
        raise DecryptionError("Decryption failed")


def generate_encryption_key() -> str:
    """Generate a random base64-encoded 32-byte key for ENCRYPTION_KEY."""
    return _b64encode(os.urandom(KEY_LENGTH))


def hash_value(value: str) -> str:
    """One-way SHA-256 digest of a value, as 64 hex characters."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def safe_compare(a: str, b: str) -> bool:
    """Constant-time string equality for secrets."""
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
