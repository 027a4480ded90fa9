"""AES-256-GCM encryption for stored provider API keys.

Stored format is ``iv:authTag:ciphertext``, each part hex-encoded, with a
16-byte IV. The key comes from ``API_KEY_ENCRYPTION_KEY``: any string of at
least 32 characters, of which the first 32 UTF-8 bytes are used.
"""

import binascii
import logging
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

_MIN_KEY_LENGTH = 32


class ApiKeyDecryptionError(Exception):
    """Raised when a stored API key cannot be decrypted for any reason."""


def get_encryption_key(raw_key: Optional[str]) -> bytes:
    """Derive the 32-byte AES key from the configured key string.

    Args:
        raw_key: Value of ``API_KEY_ENCRYPTION_KEY``.

    Returns:
        32-byte key.

    Raises:
        ValueError: If the key is missing or shorter than 32 characters.
    """
    if not raw_key:
        raise ValueError("API_KEY_ENCRYPTION_KEY environment variable is not set")
    if len(raw_key) < _MIN_KEY_LENGTH:
        raise ValueError(
            f"API_KEY_ENCRYPTION_KEY must be at least {_MIN_KEY_LENGTH} characters long"
        )
    return raw_key.encode("utf-8")[:_MIN_KEY_LENGTH]


def decrypt_api_key(encrypted: str, raw_key: Optional[str]) -> str:
    """Decrypt a stored API key.

    Args:
        encrypted: ``iv:authTag:ciphertext`` hex string.
        raw_key: Value of ``API_KEY_ENCRYPTION_KEY``.

    Returns:
        Plaintext provider key.

    Raises:
        ApiKeyDecryptionError: If the key is misconfigured, the blob is
            malformed, or authentication fails.
    """
    try:
        key = get_encryption_key(raw_key)
    except ValueError as e:
        logger.error("api_key_decrypt_error: reason=key_config, error=%s", str(e))
        raise ApiKeyDecryptionError(str(e)) from e

    parts = (encrypted or "").split(":")
    if len(parts) != 3 or not all(parts):
        logger.warning("api_key_decrypt_error: reason=invalid_format, parts=%d", len(parts))
        raise ApiKeyDecryptionError("Invalid encrypted data format")

    try:
        iv, tag, ciphertext = (bytes.fromhex(part) for part in parts)
    except (ValueError, binascii.Error) as e:
        logger.warning("api_key_decrypt_error: reason=invalid_hex")
        raise ApiKeyDecryptionError("Invalid encrypted data format") from e

    try:
        plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, None)
    except (InvalidTag, ValueError) as e:
        logger.warning("api_key_decrypt_error: reason=authentication_failed")
        raise ApiKeyDecryptionError("Failed to decrypt API key") from e

    return plaintext.decode("utf-8")
