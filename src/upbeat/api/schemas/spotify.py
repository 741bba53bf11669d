"""API schemas for the Spotify account connection and export."""

from pydantic import BaseModel

from upbeat.domain.entities import ExportResult


class ExportResponse(BaseModel):
    """Result of exporting a playlist to Spotify."""

    success: bool = True
    external_playlist_id: str
    playlist_url: str
    tracks_exported: int
    total_tracks: int

    @classmethod
    def from_result(cls, result: ExportResult) -> "ExportResponse":
        return cls(
            external_playlist_id=result.external_playlist_id,
            playlist_url=result.external_playlist_url,
            tracks_exported=result.tracks_exported,
            total_tracks=result.total_tracks,
        )


class ConnectionStatusResponse(BaseModel):
    """Whether the caller linked a Spotify account."""

    connected: bool


class AuthorizationUrlResponse(BaseModel):
    """URL to send the user to for connecting Spotify."""

    url: str
