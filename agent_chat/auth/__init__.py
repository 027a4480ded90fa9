"""Authentication and credential encryption utilities."""

from agent_chat.auth.context import JWTAuthContext
from agent_chat.auth.encryption import (
    ApiKeyDecryptionError,
    decrypt_api_key,
    get_encryption_key,
)
from agent_chat.auth.jwt import (
    TokenPayload,
    decode_token,
)

__all__ = [
    "ApiKeyDecryptionError",
    "JWTAuthContext",
    "TokenPayload",
    "decode_token",
    "decrypt_api_key",
    "get_encryption_key",
]
