"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import (
    Playlist,
    PlaylistFilter,
    Provider,
    Song,
    SpotifyCredential,
    Visibility,
)


# Hey future me, ITrackProvider is the PORT every catalog adapter implements (Spotify, iTunes).
# RecommendationService only ever talks to this interface - it doesn't know that iTunes fakes
# recommendations with a fan-out search or that Spotify caps seeds at 5. Adapters raise
# ExternalProviderError (or ConfigurationError) and return TrackDTOs, nothing provider-raw.
class ITrackProvider(ABC):
    """Port for a music catalog with search and recommendations."""

    provider: Provider

    @abstractmethod
    async def search(self, query: str) -> list[TrackDTO]:
        """Search the catalog for tracks."""
        pass

    @abstractmethod
    async def recommend(self, seeds: Sequence[TrackDTO]) -> list[TrackDTO]:
        """Return recommended tracks for the given seed tracks."""
        pass


# Listen up, this is the Playlist Persistence Store contract. Ownership checks live HERE for
# visibility/dislike updates, but NOT for delete - the caller must verify ownership first.
class IPlaylistRepository(ABC):
    """Repository interface for Playlist and Song records."""

    @abstractmethod
    async def create_playlist(
        self,
        owner_id: str,
        name: str,
        provider: Provider,
        genre: str | None = None,
        mood: str | None = None,
    ) -> str:
        """Insert a private playlist with zero counters, return its id."""
        pass

    @abstractmethod
    async def add_songs(self, playlist_id: str, tracks: Sequence[TrackDTO]) -> int:
        """Bulk insert generated songs for an existing playlist."""
        pass

    @abstractmethod
    async def get_by_id(self, playlist_id: str) -> Playlist | None:
        """Get a playlist by id."""
        pass

    @abstractmethod
    async def get_user_playlists(self, owner_id: str) -> list[Playlist]:
        """List playlists owned by a user."""
        pass

    @abstractmethod
    async def get_playlist_songs(self, playlist_id: str) -> list[Song]:
        """List songs of a playlist."""
        pass

    @abstractmethod
    async def delete_playlist(self, playlist_id: str) -> None:
        """Delete a playlist and all of its songs."""
        pass

    @abstractmethod
    async def update_visibility(
        self, playlist_id: str, caller_id: str, visibility: Visibility
    ) -> str | None:
        """Change visibility, returning the (possibly new) share token."""
        pass

    @abstractmethod
    async def update_dislike_setting(
        self, playlist_id: str, caller_id: str, allow: bool
    ) -> None:
        """Enable or disable dislikes on an owned playlist."""
        pass

    @abstractmethod
    async def get_public_playlists(self, limit: int = 50) -> list[Playlist]:
        """List public playlists, newest first."""
        pass

    @abstractmethod
    async def get_filtered_playlists(self, filters: PlaylistFilter) -> list[Playlist]:
        """List public playlists matching genre/mood/search."""
        pass

    @abstractmethod
    async def get_trending_playlists(self, limit: int = 20) -> list[Playlist]:
        """List public playlists by views, then likes."""
        pass

    @abstractmethod
    async def get_by_share_token(self, share_token: str) -> Playlist | None:
        """Resolve a share token, counting one view."""
        pass

    @abstractmethod
    async def clone_playlist(
        self, source_playlist_id: str, new_owner_id: str, new_name: str
    ) -> str:
        """Copy a playlist and its songs to a new owner."""
        pass

    @abstractmethod
    async def record_export(
        self,
        playlist_id: str,
        exported_at: datetime,
        external_playlist_id: str,
        external_playlist_url: str,
    ) -> None:
        """Store export provenance in one update."""
        pass


class ISpotifyCredentialRepository(ABC):
    """Repository interface for users' linked Spotify accounts."""

    @abstractmethod
    async def get(self, user_id: str) -> SpotifyCredential | None:
        """Get the credential of a user, if connected."""
        pass

    @abstractmethod
    async def upsert(self, credential: SpotifyCredential) -> None:
        """Insert or replace the credential of a user."""
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Remove the credential of a user."""
        pass


__all__ = [
    "IPlaylistRepository",
    "ISpotifyCredentialRepository",
    "ITrackProvider",
]
