"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum


# Hey future me, Provider is the ONLY source of truth for "which catalog is this from"! It's stored
# as a plain lowercase string in the DB (playlists.provider, songs.provider), so never rename the
# values - existing rows would stop parsing. Export only works for SPOTIFY-origin songs.
class Provider(str, Enum):
    """External music catalog a track or playlist comes from."""

    SPOTIFY = "spotify"
    ITUNES = "itunes"


class Visibility(str, Enum):
    """Playlist visibility."""

    PRIVATE = "private"
    PUBLIC = "public"


# Yo, Playlist is the DOMAIN ENTITY (not the DB model)! Repositories convert PlaylistModel rows into
# this. A few invariants the Store keeps for us:
# - share_token is set the first time the playlist goes public and NEVER changes afterwards, even
#   when it goes private again (old share links keep resolving - that's intended, not a leak fix)
# - exported_at / external_playlist_id / external_playlist_url are written together or not at all
# - views/likes/dislikes only ever go up
# owner_name is filled by queries that join users (public listings); it's None elsewhere.
@dataclass
class Playlist:
    """A generated playlist owned by one user."""

    id: str
    owner_id: str
    name: str
    provider: Provider
    created_at: datetime
    visibility: Visibility = Visibility.PRIVATE
    share_token: str | None = None
    views: int = 0
    likes: int = 0
    dislikes: int = 0
    allow_dislikes: bool = False
    genre: str | None = None
    mood: str | None = None
    exported_at: datetime | None = None
    external_playlist_id: str | None = None
    external_playlist_url: str | None = None
    owner_name: str | None = None

    @property
    def is_public(self) -> bool:
        """Check if playlist is visible to the community."""
        return self.visibility == Visibility.PUBLIC

    @property
    def is_exported(self) -> bool:
        """Check if playlist was pushed to an external account."""
        return self.exported_at is not None

    def is_owned_by(self, user_id: str) -> bool:
        """Check if the given user owns this playlist."""
        return self.owner_id == user_id


@dataclass
class Song:
    """A track persisted as part of a playlist."""

    id: str
    playlist_id: str
    title: str
    artist: str
    provider: Provider
    external_id: str | None = None
    preview_url: str | None = None
    album_art_url: str | None = None
    is_generated: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def spotify_uri(self) -> str | None:
        """Spotify track URI, only for Spotify-origin songs with an id."""
        if self.provider != Provider.SPOTIFY or not self.external_id:
            return None
        return f"spotify:track:{self.external_id}"


@dataclass
class SongWithPopularity:
    """Song plus Spotify popularity (0-100, 0 when unknown)."""

    song: Song
    popularity: int = 0


# Hey future me - SpotifyCredential is the user's OAuth token for EXPORT (writing playlists into their
# own account). It has nothing to do with the client-credentials token the Spotify adapter uses for
# search/recommendations - that one is app-level and lives in memory only.
@dataclass
class SpotifyCredential:
    """A user's linked Spotify account tokens (1:1 with user)."""

    user_id: str
    access_token: str
    refresh_token: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the access token is past its expiry."""
        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return now >= expires_at

    @staticmethod
    def expiry_from_now(expires_in: int) -> datetime:
        """Compute an absolute expiry from Spotify's expires_in seconds."""
        return datetime.now(UTC) + timedelta(seconds=expires_in)


@dataclass
class ExportResult:
    """Outcome of pushing a playlist to the user's Spotify account.

    tracks_exported < total_tracks is normal: songs from other providers are
    skipped, not treated as errors.
    """

    external_playlist_id: str
    external_playlist_url: str
    tracks_exported: int
    total_tracks: int


@dataclass
class PlaylistFilter:
    """Community listing filter. genre/mood match exactly (case-insensitive),
    search is a substring match over playlist name and owner name."""

    genre: str | None = None
    mood: str | None = None
    search: str | None = None
    limit: int = 50


__all__ = [
    "ExportResult",
    "Playlist",
    "PlaylistFilter",
    "Provider",
    "Song",
    "SongWithPopularity",
    "SpotifyCredential",
    "Visibility",
]
