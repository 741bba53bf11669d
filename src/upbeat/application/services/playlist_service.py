"""Playlist read helpers that need more than the store."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.domain.entities import SongWithPopularity
from upbeat.domain.exceptions import EntityNotFoundException
from upbeat.infrastructure.integrations import SpotifyClient
from upbeat.infrastructure.persistence import PlaylistRepository

logger = logging.getLogger(__name__)


class PlaylistService:
    """Songs enriched with live Spotify data."""

    def __init__(self, session: AsyncSession, spotify_client: SpotifyClient) -> None:
        self._playlists = PlaylistRepository(session)
        self._client = spotify_client

    # Hey future me - popularity is fetched LIVE (app token, /v1/tracks in chunks of 50), never
    # stored. iTunes songs and ids Spotify doesn't know anymore simply get 0.
    async def get_songs_with_popularity(
        self, playlist_id: str
    ) -> list[SongWithPopularity]:
        """List a playlist's songs with Spotify popularity (0-100, 0 if unknown).

        Raises:
            EntityNotFoundException: If the playlist does not exist
        """
        if await self._playlists.get_by_id(playlist_id) is None:
            raise EntityNotFoundException("Playlist", playlist_id)

        songs = await self._playlists.get_playlist_songs(playlist_id)
        spotify_ids = list(
            dict.fromkeys(song.external_id for song in songs if song.spotify_uri)
        )

        popularity: dict[str, int] = {}
        if spotify_ids:
            tracks = await self._client.get_tracks(spotify_ids)
            popularity = {
                track["id"]: int(track.get("popularity") or 0)
                for track in tracks
                if track.get("id")
            }

        return [
            SongWithPopularity(
                song=song,
                popularity=popularity.get(song.external_id, 0)
                if song.spotify_uri and song.external_id
                else 0,
            )
            for song in songs
        ]
