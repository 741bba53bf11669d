"""Tests for SpotifyAuthService and the OAuth state store."""

import time
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.application.services import AuthorizationStateStore, SpotifyAuthService
from upbeat.domain.entities import SpotifyCredential
from upbeat.domain.exceptions import AuthenticationError, TokenRefreshException
from upbeat.infrastructure.persistence import SpotifyCredentialRepository


@pytest.fixture
def spotify_client() -> MagicMock:
    client = MagicMock()
    client.get_authorization_url = MagicMock(
        side_effect=lambda state: f"https://accounts.spotify.com/authorize?state={state}"
    )
    client.exchange_code = AsyncMock(
        return_value={"access_token": "at1", "refresh_token": "rt1", "expires_in": 3600}
    )
    client.refresh_token = AsyncMock(
        return_value={"access_token": "at2", "expires_in": 3600}
    )
    return client


@pytest.fixture
def state_store() -> AuthorizationStateStore:
    return AuthorizationStateStore()


@pytest.fixture
def auth_service(
    session: AsyncSession,
    spotify_client: MagicMock,
    state_store: AuthorizationStateStore,
) -> SpotifyAuthService:
    return SpotifyAuthService(session, spotify_client, state_store)


async def _store_credential(
    session: AsyncSession, expires_at: datetime, refresh: str = "rt-old"
) -> None:
    await SpotifyCredentialRepository(session).upsert(
        SpotifyCredential(
            user_id="u1",
            access_token="at-old",
            refresh_token=refresh,
            expires_at=expires_at,
        )
    )


class TestAuthorizationStateStore:
    def test_state_is_single_use(self, state_store: AuthorizationStateStore) -> None:
        state = state_store.issue("u1")

        assert state_store.consume(state) == "u1"
        assert state_store.consume(state) is None

    def test_unknown_state(self, state_store: AuthorizationStateStore) -> None:
        assert state_store.consume("forged") is None

    def test_expired_state(self) -> None:
        store = AuthorizationStateStore(ttl_seconds=60)
        state = store.issue("u1")
        store._pending[state] = ("u1", time.time() - 120)

        assert store.consume(state) is None


class TestConnect:
    async def test_authorization_round_trip(
        self, auth_service: SpotifyAuthService, spotify_client: MagicMock, session
    ) -> None:
        url = auth_service.build_authorization_url("u1")
        state = url.split("state=")[1]

        user_id = await auth_service.complete_authorization(state, "the-code")

        assert user_id == "u1"
        spotify_client.exchange_code.assert_awaited_once_with("the-code")
        stored = await SpotifyCredentialRepository(session).get("u1")
        assert stored is not None
        assert stored.access_token == "at1"
        assert stored.refresh_token == "rt1"
        assert await auth_service.is_connected("u1")

    async def test_bad_state_is_rejected(
        self, auth_service: SpotifyAuthService, spotify_client: MagicMock
    ) -> None:
        with pytest.raises(AuthenticationError):
            await auth_service.complete_authorization("forged", "code")
        spotify_client.exchange_code.assert_not_awaited()

    async def test_disconnect(self, auth_service: SpotifyAuthService) -> None:
        await auth_service.connect("u1", "code")

        assert await auth_service.disconnect("u1") is True
        assert not await auth_service.is_connected("u1")
        assert await auth_service.disconnect("u1") is False


class TestValidAccessToken:
    async def test_never_connected(self, auth_service: SpotifyAuthService) -> None:
        assert await auth_service.get_valid_access_token("u1") is None

    async def test_fresh_token_is_returned_without_refresh(
        self, session, auth_service: SpotifyAuthService, spotify_client: MagicMock
    ) -> None:
        await _store_credential(session, datetime.now(UTC) + timedelta(hours=1))

        assert await auth_service.get_valid_access_token("u1") == "at-old"
        spotify_client.refresh_token.assert_not_awaited()

    async def test_expired_token_is_refreshed_keeping_refresh_token(
        self, session, auth_service: SpotifyAuthService, spotify_client: MagicMock
    ) -> None:
        await _store_credential(session, datetime.now(UTC) - timedelta(minutes=1))

        assert await auth_service.get_valid_access_token("u1") == "at2"

        spotify_client.refresh_token.assert_awaited_once_with("rt-old")
        stored = await SpotifyCredentialRepository(session).get("u1")
        assert stored is not None
        assert stored.access_token == "at2"
        assert stored.refresh_token == "rt-old"
        assert not stored.is_expired()

    async def test_rotated_refresh_token_is_stored(
        self, session, auth_service: SpotifyAuthService, spotify_client: MagicMock
    ) -> None:
        spotify_client.refresh_token.return_value = {
            "access_token": "at3",
            "refresh_token": "rt-new",
            "expires_in": 3600,
        }
        await _store_credential(session, datetime.now(UTC) - timedelta(minutes=1))

        await auth_service.get_valid_access_token("u1")

        stored = await SpotifyCredentialRepository(session).get("u1")
        assert stored is not None
        assert stored.refresh_token == "rt-new"

    async def test_revoked_refresh_token_propagates(
        self, session, auth_service: SpotifyAuthService, spotify_client: MagicMock
    ) -> None:
        spotify_client.refresh_token.side_effect = TokenRefreshException(
            error_code="invalid_grant", http_status=400
        )
        await _store_credential(session, datetime.now(UTC) - timedelta(minutes=1))

        with pytest.raises(TokenRefreshException):
            await auth_service.get_valid_access_token("u1")
