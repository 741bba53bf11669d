"""Tests for SpotifyCredentialRepository and UserRepository."""

from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.domain.entities import SpotifyCredential
from upbeat.infrastructure.persistence import (
    SpotifyCredentialRepository,
    UserRepository,
)
from upbeat.infrastructure.persistence.models import UserModel


def _credential(user_id: str = "u1", access: str = "at", refresh: str = "rt") -> SpotifyCredential:
    return SpotifyCredential(
        user_id=user_id,
        access_token=access,
        refresh_token=refresh,
        expires_at=datetime.now(UTC) + timedelta(hours=1),
    )


class TestSpotifyCredentialRepository:
    async def test_get_unknown(self, session: AsyncSession) -> None:
        assert await SpotifyCredentialRepository(session).get("nobody") is None

    async def test_upsert_inserts_then_replaces(self, session: AsyncSession) -> None:
        repo = SpotifyCredentialRepository(session)

        await repo.upsert(_credential())
        await repo.upsert(_credential(access="at2", refresh="rt2"))

        stored = await repo.get("u1")
        assert stored is not None
        assert stored.access_token == "at2"
        assert stored.refresh_token == "rt2"
        assert stored.expires_at.tzinfo is not None

    async def test_delete(self, session: AsyncSession) -> None:
        repo = SpotifyCredentialRepository(session)
        await repo.upsert(_credential())

        assert await repo.delete("u1") is True
        assert await repo.get("u1") is None
        assert await repo.delete("u1") is False


class TestUserRepository:
    async def test_upsert_name(self, session: AsyncSession) -> None:
        repo = UserRepository(session)

        await repo.upsert_name("u1", "Alex")
        user = await session.get(UserModel, "u1")
        assert user is not None
        assert user.name == "Alex"

        await repo.upsert_name("u1", "Alexandra")
        await session.refresh(user)
        assert user.name == "Alexandra"

    async def test_upsert_does_not_touch_other_users(self, session: AsyncSession) -> None:
        await UserRepository(session).upsert_name("u1", "Alex")

        assert await session.get(UserModel, "ghost") is None
