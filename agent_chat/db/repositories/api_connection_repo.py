"""Stored API connection listing and decryption."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agent_chat.auth.encryption import ApiKeyDecryptionError, decrypt_api_key
from agent_chat.chat.errors import InvalidCredentialError
from agent_chat.db.models.api_connection import ApiConnectionORM
from agent_chat.db.repositories.base import BaseRepository
from agent_chat.models.chat_models import CredentialRecord

logger = logging.getLogger(__name__)


class ApiConnectionRepository(BaseRepository[ApiConnectionORM]):
    """Session-scoped queries over the ``api_connection`` table."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ApiConnectionORM)

    async def list_for_owner(self, owner_id: UUID) -> list[ApiConnectionORM]:
        """List an owner's connections, most recently updated first.

        Args:
            owner_id: Owner UUID.

        Returns:
            Connections in listing order (``updated_at`` DESC, then ``id``).
        """
        stmt = (
            select(ApiConnectionORM)
            .where(ApiConnectionORM.owner_id == owner_id)
            .order_by(ApiConnectionORM.updated_at.desc(), ApiConnectionORM.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class SQLCredentialStore:
    """``CredentialStore`` backed by PostgreSQL and AES-256-GCM decryption.

    Args:
        session_factory: Factory for short-lived sessions (one per call).
        encryption_key: Value of ``API_KEY_ENCRYPTION_KEY``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        encryption_key: Optional[str],
    ) -> None:
        self._session_factory = session_factory
        self._encryption_key = encryption_key

    async def list_for_owner(self, owner_id: UUID) -> list[CredentialRecord]:
        async with self._session_factory() as session:
            rows = await ApiConnectionRepository(session).list_for_owner(owner_id)
        return [
            CredentialRecord(
                id=row.id,
                owner_id=row.owner_id,
                service=row.service,
                name=row.name,
                api_key_encrypted=row.api_key_encrypted,
            )
            for row in rows
        ]

    async def decrypt(self, credential: CredentialRecord) -> str:
        """Decrypt the stored secret.

        Raises:
            InvalidCredentialError: If the blob cannot be decrypted.
        """
        try:
            return decrypt_api_key(credential.api_key_encrypted, self._encryption_key)
        except ApiKeyDecryptionError as e:
            logger.warning(
                "credential_decrypt_failed: credential_id=%s, service=%s, error=%s",
                credential.id,
                credential.service,
                str(e),
            )
            raise InvalidCredentialError(str(e)) from e
