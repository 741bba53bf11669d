"""
Track Data Transfer Object shared by both provider adapters.

Hey future me - TrackDTO is the LINGUA FRANCA between the Spotify adapter, the iTunes adapter,
the RecommendationService and the PlaylistRepository. Raw provider JSON NEVER crosses an adapter
boundary: each adapter owns one strict mapping function (raw dict -> TrackDTO) and everything
downstream only sees this shape. It's a value type - copy it around freely, it's never persisted
as-is (the repository turns it into SongModel rows).
"""

from dataclasses import dataclass

from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import ValidationError


@dataclass(frozen=True)
class TrackDTO:
    """Provider-normalized track."""

    external_id: str  # Spotify track id, or iTunes trackId as string
    title: str
    artist: str
    provider: Provider
    album_art_url: str | None = None
    preview_url: str | None = None
    genre: str | None = None  # iTunes primaryGenreName; Spotify tracks carry none
    external_url: str | None = None  # Link to the track page on the provider

    def __post_init__(self) -> None:
        """Validate essential fields."""
        if not self.external_id or not str(self.external_id).strip():
            raise ValidationError("Track external_id cannot be empty")
        if not self.title or not self.title.strip():
            raise ValidationError("Track title cannot be empty")


__all__ = ["TrackDTO"]
