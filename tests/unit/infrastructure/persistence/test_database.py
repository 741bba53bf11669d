"""Tests for Database session management."""

import pytest
from sqlalchemy import select

from upbeat.domain.entities import Provider
from upbeat.infrastructure.persistence import Database, PlaylistRepository
from upbeat.infrastructure.persistence.models import PlaylistModel


class TestSessionScope:
    """Test commit/rollback behavior of session_scope."""

    async def test_commits_on_success(self, db: Database) -> None:
        async with db.session_scope() as session:
            playlist_id = await PlaylistRepository(session).create_playlist(
                "u1", "Mix", Provider.SPOTIFY
            )

        async with db.session_scope() as session:
            result = await session.execute(
                select(PlaylistModel).where(PlaylistModel.id == playlist_id)
            )
            assert result.scalar_one_or_none() is not None

    async def test_rolls_back_on_error(self, db: Database) -> None:
        playlist_id = None
        with pytest.raises(RuntimeError):
            async with db.session_scope() as session:
                playlist_id = await PlaylistRepository(session).create_playlist(
                    "u1", "Mix", Provider.SPOTIFY
                )
                raise RuntimeError("boom")

        async with db.session_scope() as session:
            assert await PlaylistRepository(session).get_by_id(playlist_id) is None
