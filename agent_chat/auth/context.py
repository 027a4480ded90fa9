"""Per-request caller identity backed by a JWT bearer token."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agent_chat.auth.jwt import decode_token
from agent_chat.chat.errors import UnauthenticatedError
from agent_chat.db.models.user import UserORM
from agent_chat.settings import Settings

logger = logging.getLogger(__name__)


class JWTAuthContext:
    """Resolve the caller from an ``Authorization: Bearer <jwt>`` header.

    When a session factory is given, the user must also exist and be active.

    Args:
        authorization: Raw Authorization header value (may be None).
        settings: Settings with JWT configuration.
        session_factory: Optional factory used to check the user row.
    """

    def __init__(
        self,
        authorization: Optional[str],
        settings: Settings,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ) -> None:
        self._authorization = authorization
        self._settings = settings
        self._session_factory = session_factory
        self._caller_id: Optional[UUID] = None

    async def resolve_caller_id(self) -> UUID:
        """Return the authenticated user id.

        Raises:
            UnauthenticatedError: If the header is missing, malformed, invalid,
                expired, or names an unknown or inactive user.
        """
        if self._caller_id is not None:
            return self._caller_id

        if not self._authorization:
            logger.info("auth_context_rejected: reason=missing_authorization_header")
            raise UnauthenticatedError("Authorization header required")

        parts = self._authorization.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
            logger.warning("auth_context_rejected: reason=malformed_authorization_header")
            raise UnauthenticatedError("Malformed Authorization header")

        try:
            payload = decode_token(parts[1].strip(), settings=self._settings)
        except ValueError as e:
            logger.warning("auth_context_rejected: reason=invalid_token, error=%s", str(e))
            raise UnauthenticatedError(str(e)) from e

        if self._session_factory is not None:
            async with self._session_factory() as session:
                result = await session.execute(select(UserORM).where(UserORM.id == payload.sub))
                user = result.scalar_one_or_none()
            if user is None:
                logger.warning("auth_context_rejected: reason=user_not_found, user_id=%s", payload.sub)
                raise UnauthenticatedError("User not found")
            if not user.is_active:
                logger.warning("auth_context_rejected: reason=user_inactive, user_id=%s", payload.sub)
                raise UnauthenticatedError("User account is inactive")

        self._caller_id = payload.sub
        return payload.sub
