"""Export generated playlists into the user's own Spotify account."""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.application.services.spotify_auth_service import SpotifyAuthService
from upbeat.domain.entities import ExportResult
from upbeat.domain.exceptions import (
    AuthorizationError,
    EntityNotFoundException,
    ExternalProviderError,
    NotConnectedError,
)
from upbeat.infrastructure.integrations import SpotifyClient
from upbeat.infrastructure.observability import log_operation
from upbeat.infrastructure.persistence import PlaylistRepository

logger = logging.getLogger(__name__)

EXPORT_DESCRIPTION = "Generated by Upbeat - {count} upbeat tracks"


# Listen up, export is NOT idempotent: every call creates a brand new playlist on Spotify. We only
# remember the latest one (exported_at + external id/url overwritten together). Songs that didn't
# come from Spotify (iTunes picks, cross-provider clones) are skipped silently and show up as
# tracks_exported < total_tracks, that's the one allowed "partial success".
class SpotifyExportService:
    """Push an internal playlist to Spotify as a native playlist."""

    def __init__(
        self,
        session: AsyncSession,
        spotify_client: SpotifyClient,
        auth_service: SpotifyAuthService,
    ) -> None:
        """Initialize export service.

        Args:
            session: Database session for playlist reads and provenance update
            spotify_client: Spotify client for profile/playlist calls
            auth_service: Source of valid user access tokens
        """
        self._playlists = PlaylistRepository(session)
        self._client = spotify_client
        self._auth = auth_service

    async def export(self, playlist_id: str, user_id: str) -> ExportResult:
        """Export a playlist to the user's Spotify account.

        Args:
            playlist_id: Internal playlist id
            user_id: Exporting user (must own the playlist)

        Returns:
            External playlist id/url plus exported vs. total song counts

        Raises:
            EntityNotFoundException: If the playlist does not exist
            AuthorizationError: If the user does not own the playlist
            NotConnectedError: If the user never linked a Spotify account
            ExternalProviderError: If a Spotify call fails
        """
        playlist = await self._playlists.get_by_id(playlist_id)
        if playlist is None:
            raise EntityNotFoundException("Playlist", playlist_id)
        if not playlist.is_owned_by(user_id):
            raise AuthorizationError()

        songs = await self._playlists.get_playlist_songs(playlist_id)

        access_token = await self._auth.get_valid_access_token(user_id)
        if access_token is None:
            raise NotConnectedError()

        async with log_operation(
            logger, "spotify_export", playlist_id=playlist_id, song_count=len(songs)
        ):
            profile = await self._client.get_current_user(access_token)

            track_uris = [song.spotify_uri for song in songs if song.spotify_uri]

            created = await self._client.create_playlist(
                user_id=profile["id"],
                name=playlist.name,
                description=EXPORT_DESCRIPTION.format(count=len(songs)),
                access_token=access_token,
                public=False,
            )
            external_id = created.get("id")
            external_url = (created.get("external_urls") or {}).get("spotify")
            if not external_id or not external_url:
                raise ExternalProviderError(
                    "Spotify did not return the created playlist", provider="spotify"
                )

            if track_uris:
                await self._client.add_tracks_to_playlist(
                    external_id, track_uris, access_token
                )

            await self._playlists.record_export(
                playlist_id,
                exported_at=datetime.now(UTC),
                external_playlist_id=external_id,
                external_playlist_url=external_url,
            )

        return ExportResult(
            external_playlist_id=external_id,
            external_playlist_url=external_url,
            tracks_exported=len(track_uris),
            total_tracks=len(songs),
        )
