"""API schemas for catalog search and playlist generation."""

from pydantic import BaseModel, Field

from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider

# Generous upper bound; the UI sends 20 picks and Spotify only ever uses the first 5
MAX_SEED_TRACKS = 50


class TrackSchema(BaseModel):
    """Provider-normalized track (search result or seed)."""

    external_id: str = Field(..., min_length=1, description="Provider track id")
    title: str = Field(..., min_length=1)
    artist: str = ""
    provider: Provider
    album_art_url: str | None = None
    preview_url: str | None = None
    genre: str | None = Field(
        default=None, description="Primary genre (iTunes only, drives fan-out search)"
    )
    external_url: str | None = None

    @classmethod
    def from_dto(cls, track: TrackDTO) -> "TrackSchema":
        return cls(
            external_id=track.external_id,
            title=track.title,
            artist=track.artist,
            provider=track.provider,
            album_art_url=track.album_art_url,
            preview_url=track.preview_url,
            genre=track.genre,
            external_url=track.external_url,
        )

    def to_dto(self) -> TrackDTO:
        return TrackDTO(
            external_id=self.external_id,
            title=self.title,
            artist=self.artist,
            provider=self.provider,
            album_art_url=self.album_art_url,
            preview_url=self.preview_url,
            genre=self.genre,
            external_url=self.external_url,
        )


class SearchResponse(BaseModel):
    """Search results of one provider."""

    provider: Provider
    query: str
    tracks: list[TrackSchema]


class GeneratePlaylistRequest(BaseModel):
    """Request schema for playlist generation."""

    name: str = Field(..., min_length=1, max_length=255, description="Playlist name")
    seeds: list[TrackSchema] = Field(
        ...,
        min_length=1,
        max_length=MAX_SEED_TRACKS,
        description="User-picked seed tracks, in pick order",
    )
    genre: str | None = Field(default=None, max_length=100)
    mood: str | None = Field(default=None, max_length=100)


class GeneratePlaylistResponse(BaseModel):
    """Response schema for playlist generation."""

    playlist_id: str
    track_count: int
    tracks: list[TrackSchema]
