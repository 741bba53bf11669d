"""Tests for PlaylistGenerationService.

Hey future me - the second test is the important one: it pins down that a failure AFTER the
playlist row was committed leaves an empty playlist behind (two-phase write, not atomic).
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.application.services import PlaylistGenerationService
from upbeat.domain.entities import Provider, Visibility
from upbeat.domain.exceptions import RecommendationFailedError, ValidationError
from upbeat.infrastructure.persistence import Database, PlaylistRepository


def _recommendations(tracks=None, error: Exception | None = None) -> MagicMock:
    service = MagicMock()
    service.generate = AsyncMock(return_value=tracks or [], side_effect=error)
    return service


class TestGeneratePlaylist:
    async def test_happy_path_persists_playlist_and_songs(
        self, session: AsyncSession, make_track
    ) -> None:
        recommended = [make_track(f"r{i}") for i in range(20)]
        service = PlaylistGenerationService(session, _recommendations(recommended))

        result = await service.generate_playlist(
            owner_id="u1",
            name="  Friday  ",
            provider=Provider.SPOTIFY,
            seeds=[make_track("seed")],
            genre="Pop",
            mood="Happy",
        )

        repo = PlaylistRepository(session)
        playlist = await repo.get_by_id(result.playlist_id)
        songs = await repo.get_playlist_songs(result.playlist_id)
        assert playlist is not None
        assert playlist.name == "Friday"
        assert playlist.owner_id == "u1"
        assert playlist.visibility == Visibility.PRIVATE
        assert playlist.genre == "Pop"
        assert result.tracks == recommended
        assert [s.external_id for s in songs] == [t.external_id for t in recommended]

    async def test_song_insert_failure_leaves_empty_playlist(
        self, db: Database, make_track, mocker
    ) -> None:
        mocker.patch.object(
            PlaylistRepository,
            "add_songs",
            AsyncMock(side_effect=RuntimeError("disk full")),
        )

        with pytest.raises(RuntimeError):
            async with db.session_scope() as session:
                service = PlaylistGenerationService(
                    session, _recommendations([make_track("r1")])
                )
                await service.generate_playlist(
                    "u1", "Mix", Provider.SPOTIFY, [make_track("seed")]
                )

        async with db.session_scope() as session:
            repo = PlaylistRepository(session)
            playlists = await repo.get_user_playlists("u1")
            assert len(playlists) == 1
            assert await repo.get_playlist_songs(playlists[0].id) == []

    async def test_recommendation_failure_persists_nothing(
        self, session: AsyncSession, make_track
    ) -> None:
        service = PlaylistGenerationService(
            session, _recommendations(error=RecommendationFailedError("spotify"))
        )

        with pytest.raises(RecommendationFailedError):
            await service.generate_playlist(
                "u1", "Mix", Provider.SPOTIFY, [make_track("seed")]
            )

        assert await PlaylistRepository(session).get_user_playlists("u1") == []

    async def test_empty_recommendations_still_create_playlist(
        self, session: AsyncSession, make_track
    ) -> None:
        service = PlaylistGenerationService(session, _recommendations([]))

        result = await service.generate_playlist(
            "u1", "Mix", Provider.ITUNES, [make_track("1", provider=Provider.ITUNES)]
        )

        assert result.tracks == []
        assert await PlaylistRepository(session).get_playlist_songs(result.playlist_id) == []

    @pytest.mark.parametrize("name", ["", "   "])
    async def test_blank_name_is_rejected(
        self, session: AsyncSession, make_track, name: str
    ) -> None:
        recommendations = _recommendations()
        service = PlaylistGenerationService(session, recommendations)

        with pytest.raises(ValidationError):
            await service.generate_playlist(
                "u1", name, Provider.SPOTIFY, [make_track("seed")]
            )
        recommendations.generate.assert_not_awaited()

    async def test_no_seeds_is_rejected(self, session: AsyncSession) -> None:
        service = PlaylistGenerationService(session, _recommendations())

        with pytest.raises(ValidationError):
            await service.generate_playlist("u1", "Mix", Provider.SPOTIFY, [])
