"""Spotify Track Provider - ITrackProvider implementation for Spotify.

FLOW:
    RecommendationService
        │
        └─► SpotifyTrackProvider.recommend(seeds)
                │
                └─► SpotifyClient.get_recommendations(seed ids[:5])
                        │
                        └─► raw track dicts → map_spotify_track() → TrackDTO
"""

import logging
from collections.abc import Sequence
from typing import Any

from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import ValidationError
from upbeat.domain.ports import ITrackProvider
from upbeat.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)


def map_spotify_track(raw: dict[str, Any]) -> TrackDTO:
    """Convert a Spotify track object into a TrackDTO.

    Artists are joined with ", ", album art is the first (largest) album image.

    Raises:
        ValidationError: If the track has no id or name (e.g. local files)
    """
    artists = raw.get("artists") or []
    images = (raw.get("album") or {}).get("images") or []
    external_urls = raw.get("external_urls") or {}

    return TrackDTO(
        external_id=raw.get("id") or "",
        title=raw.get("name") or "",
        artist=", ".join(a["name"] for a in artists if a.get("name")),
        provider=Provider.SPOTIFY,
        album_art_url=images[0].get("url") if images else None,
        preview_url=raw.get("preview_url"),
        external_url=external_urls.get("spotify"),
    )


def _map_tracks(raw_tracks: list[dict[str, Any]]) -> list[TrackDTO]:
    tracks: list[TrackDTO] = []
    for raw in raw_tracks:
        try:
            tracks.append(map_spotify_track(raw))
        except ValidationError as e:
            logger.debug(f"Skipping unmappable Spotify track: {e.message}")
    return tracks


class SpotifyTrackProvider(ITrackProvider):
    """Spotify implementation of ITrackProvider."""

    provider = Provider.SPOTIFY

    def __init__(self, client: SpotifyClient) -> None:
        self._client = client

    async def search(self, query: str) -> list[TrackDTO]:
        data = await self._client.search_tracks(query)
        return _map_tracks((data.get("tracks") or {}).get("items") or [])

    async def recommend(self, seeds: Sequence[TrackDTO]) -> list[TrackDTO]:
        """Recommend upbeat tracks; only the first five seeds are used."""
        seed_ids = [seed.external_id for seed in seeds]
        data = await self._client.get_recommendations(seed_ids)
        return _map_tracks(data.get("tracks") or [])


__all__ = ["SpotifyTrackProvider", "map_spotify_track"]
