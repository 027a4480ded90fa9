"""JWT session token validation."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from agent_chat.settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT token payload."""

    sub: UUID
    exp: datetime
    email: Optional[str] = None


def decode_token(token: str, settings: Optional[Settings] = None) -> TokenPayload:
    """
    Decode and validate a JWT session token.

    Args:
        token: JWT string to decode
        settings: Settings with JWT configuration (loaded from env if omitted)

    Returns:
        TokenPayload with user id, expiry, and optional email

    Raises:
        ValueError: If token is expired, invalid, or malformed
    """
    settings = settings or load_settings()

    if not settings.jwt_secret_key:
        raise ValueError("jwt_secret_key must be configured in settings")

    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        user_id = UUID(payload["sub"])
        exp = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    except ExpiredSignatureError as e:
        logger.warning("token_expired: error=%s", str(e))
        raise ValueError("Token has expired") from e
    except JWTError as e:
        logger.warning("token_invalid: error=%s", str(e))
        raise ValueError("Invalid token") from e
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("token_parse_error: error=%s", str(e))
        raise ValueError("Invalid token") from e

    return TokenPayload(sub=user_id, exp=exp, email=payload.get("email"))
