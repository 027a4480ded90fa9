"""Unit tests for JWT session tokens and the request auth context."""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from agent_chat.auth.context import JWTAuthContext
from agent_chat.auth.jwt import TokenPayload, decode_token
from agent_chat.chat.errors import UnauthenticatedError
from agent_chat.settings import Settings
from tests.credentials import create_access_token

USER_ID = UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret_key="test-secret-key-for-jwt-testing-only-not-for-production")


def _session_factory(user) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    return factory


class TestTokens:
    """Tests for decode_token()."""

    def test_round_trip(self, settings: Settings) -> None:
        token = create_access_token(USER_ID, email="a@example.com", settings=settings)

        payload = decode_token(token, settings=settings)

        assert isinstance(payload, TokenPayload)
        assert payload.sub == USER_ID
        assert payload.email == "a@example.com"

    def test_expired(self, settings: Settings) -> None:
        token = create_access_token(USER_ID, expires_minutes=-1, settings=settings)

        with pytest.raises(ValueError, match="Token has expired"):
            decode_token(token, settings=settings)

    def test_tampered(self, settings: Settings) -> None:
        token = create_access_token(USER_ID, settings=settings)

        with pytest.raises(ValueError, match="Invalid token"):
            decode_token(token[:-4] + "abcd", settings=settings)

    def test_non_uuid_subject(self, settings: Settings) -> None:
        from jose import jwt

        token = jwt.encode({"sub": "user-1", "exp": 4102444800}, settings.jwt_secret_key)

        with pytest.raises(ValueError, match="Invalid token"):
            decode_token(token, settings=settings)


class TestJWTAuthContext:
    """Tests for JWTAuthContext.resolve_caller_id()."""

    async def test_resolves_and_caches(self, settings: Settings) -> None:
        token = create_access_token(USER_ID, settings=settings)
        factory = _session_factory(MagicMock(is_active=True))
        auth = JWTAuthContext(f"Bearer {token}", settings, session_factory=factory)

        assert await auth.resolve_caller_id() == USER_ID
        assert await auth.resolve_caller_id() == USER_ID
        factory.assert_called_once()

    async def test_without_database_check(self, settings: Settings) -> None:
        token = create_access_token(USER_ID, settings=settings)

        assert await JWTAuthContext(f"bearer {token}", settings).resolve_caller_id() == USER_ID

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer not-a-jwt"])
    async def test_rejected_headers(self, settings: Settings, header) -> None:
        with pytest.raises(UnauthenticatedError):
            await JWTAuthContext(header, settings).resolve_caller_id()

    async def test_unknown_user(self, settings: Settings) -> None:
        token = create_access_token(USER_ID, settings=settings)
        auth = JWTAuthContext(f"Bearer {token}", settings, session_factory=_session_factory(None))

        with pytest.raises(UnauthenticatedError, match="User not found"):
            await auth.resolve_caller_id()

    async def test_inactive_user(self, settings: Settings) -> None:
        token = create_access_token(USER_ID, settings=settings)
        factory = _session_factory(MagicMock(is_active=False))
        auth = JWTAuthContext(f"Bearer {token}", settings, session_factory=factory)

        with pytest.raises(UnauthenticatedError, match="inactive"):
            await auth.resolve_caller_id()
