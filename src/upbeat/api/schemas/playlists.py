"""API schemas for playlists, songs and community listings."""

from datetime import datetime

from pydantic import BaseModel, Field

from upbeat.domain.entities import (
    Playlist,
    Provider,
    Song,
    SongWithPopularity,
    Visibility,
)


class PlaylistResponse(BaseModel):
    """Playlist as returned by the API."""

    id: str
    owner_id: str
    owner_name: str | None = None
    name: str
    provider: Provider
    visibility: Visibility
    share_token: str | None = None
    views: int
    likes: int
    dislikes: int
    allow_dislikes: bool
    genre: str | None = None
    mood: str | None = None
    created_at: datetime
    is_exported: bool = False
    exported_at: datetime | None = None
    external_playlist_url: str | None = None

    @classmethod
    def from_entity(cls, playlist: Playlist) -> "PlaylistResponse":
        return cls(
            id=playlist.id,
            owner_id=playlist.owner_id,
            owner_name=playlist.owner_name,
            name=playlist.name,
            provider=playlist.provider,
            visibility=playlist.visibility,
            share_token=playlist.share_token,
            views=playlist.views,
            likes=playlist.likes,
            dislikes=playlist.dislikes,
            allow_dislikes=playlist.allow_dislikes,
            genre=playlist.genre,
            mood=playlist.mood,
            created_at=playlist.created_at,
            is_exported=playlist.is_exported,
            exported_at=playlist.exported_at,
            external_playlist_url=playlist.external_playlist_url,
        )


# Hey future me - this is what strangers see (share links, community listings). No owner_id and
# no export details: those belong to the owner's own view only.
class PublicPlaylistResponse(BaseModel):
    """Playlist as shown to anyone who is not its owner."""

    id: str
    owner_name: str | None = None
    name: str
    provider: Provider
    share_token: str | None = None
    views: int
    likes: int
    dislikes: int
    allow_dislikes: bool
    genre: str | None = None
    mood: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, playlist: Playlist) -> "PublicPlaylistResponse":
        return cls(
            id=playlist.id,
            owner_name=playlist.owner_name,
            name=playlist.name,
            provider=playlist.provider,
            share_token=playlist.share_token,
            views=playlist.views,
            likes=playlist.likes,
            dislikes=playlist.dislikes,
            allow_dislikes=playlist.allow_dislikes,
            genre=playlist.genre,
            mood=playlist.mood,
            created_at=playlist.created_at,
        )


class SongResponse(BaseModel):
    """Song as returned by the API."""

    id: str
    title: str
    artist: str
    provider: Provider
    external_id: str | None = None
    preview_url: str | None = None
    album_art_url: str | None = None
    is_generated: bool

    @classmethod
    def from_entity(cls, song: Song) -> "SongResponse":
        return cls(
            id=song.id,
            title=song.title,
            artist=song.artist,
            provider=song.provider,
            external_id=song.external_id,
            preview_url=song.preview_url,
            album_art_url=song.album_art_url,
            is_generated=song.is_generated,
        )


class SongWithPopularityResponse(SongResponse):
    """Song plus Spotify popularity."""

    popularity: int = Field(..., ge=0, le=100)

    @classmethod
    def from_result(cls, item: SongWithPopularity) -> "SongWithPopularityResponse":
        base = SongResponse.from_entity(item.song)
        return cls(**base.model_dump(), popularity=item.popularity)


class VisibilityRequest(BaseModel):
    """Request schema for changing playlist visibility."""

    visibility: Visibility


class VisibilityResponse(BaseModel):
    """Visibility change result (share_token is set once ever made public)."""

    playlist_id: str
    visibility: Visibility
    share_token: str | None = None


class AllowDislikesRequest(BaseModel):
    """Request schema for the dislike setting."""

    allow_dislikes: bool


class ClonePlaylistRequest(BaseModel):
    """Request schema for cloning; name defaults to "<source name> (Copy)"."""

    name: str | None = Field(default=None, min_length=1, max_length=255)


class ClonePlaylistResponse(BaseModel):
    """Response schema for cloning."""

    playlist_id: str


class SharedPlaylistResponse(BaseModel):
    """A playlist resolved through its share link, with songs."""

    playlist: PublicPlaylistResponse
    songs: list[SongResponse]
