"""iTunes Track Provider - ITrackProvider implementation for iTunes.

Hey future me - iTunes has NO recommendation endpoint, so recommend() is a FAN-OUT SEARCH:

    seeds ──► distinct genres (first 3) ──► search(genre)  ─┐
          └─► distinct artists (first 2) ─► search(artist) ─┴─► merge in order, dedupe, cap 20

- At most 5 requests, each up to 10 songs
- Seed track ids are pre-seeded into the "seen" set, so seeds never come back
- Genre results come first, then artist results, never re-ranked
- One failing leg is logged and skipped, the other legs still count
"""

import logging
from collections.abc import Sequence
from typing import Any

from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import ExternalProviderError, ValidationError
from upbeat.domain.ports import ITrackProvider
from upbeat.infrastructure.integrations.itunes_client import ITunesClient

logger = logging.getLogger(__name__)

MAX_GENRE_SEARCHES = 3
MAX_ARTIST_SEARCHES = 2
MAX_RECOMMENDATIONS = 20


def map_itunes_track(raw: dict[str, Any]) -> TrackDTO:
    """Convert an iTunes search result into a TrackDTO.

    Raises:
        ValidationError: If the result has no trackId or trackName
    """
    track_id = raw.get("trackId")
    return TrackDTO(
        external_id=str(track_id) if track_id is not None else "",
        title=raw.get("trackName") or "",
        artist=raw.get("artistName") or "",
        provider=Provider.ITUNES,
        album_art_url=raw.get("artworkUrl100"),
        preview_url=raw.get("previewUrl"),
        genre=raw.get("primaryGenreName"),
        external_url=raw.get("trackViewUrl"),
    )


def _distinct(values: Sequence[str | None], limit: int) -> list[str]:
    result: list[str] = []
    for value in values:
        if value and value not in result:
            result.append(value)
            if len(result) == limit:
                break
    return result


class ITunesTrackProvider(ITrackProvider):
    """iTunes implementation of ITrackProvider."""

    provider = Provider.ITUNES

    def __init__(self, client: ITunesClient) -> None:
        self._client = client

    async def search(self, query: str) -> list[TrackDTO]:
        results = await self._client.search_songs(query)
        tracks: list[TrackDTO] = []
        for raw in results:
            try:
                tracks.append(map_itunes_track(raw))
            except ValidationError as e:
                logger.debug(f"Skipping unmappable iTunes result: {e.message}")
        return tracks

    async def recommend(self, seeds: Sequence[TrackDTO]) -> list[TrackDTO]:
        """Approximate recommendations with genre and artist searches."""
        genres = _distinct([s.genre for s in seeds], MAX_GENRE_SEARCHES)
        artists = _distinct([s.artist for s in seeds], MAX_ARTIST_SEARCHES)
        legs = [("genre", g) for g in genres] + [("artist", a) for a in artists]

        seen = {seed.external_id for seed in seeds}
        recommendations: list[TrackDTO] = []

        for kind, term in legs:
            try:
                found = await self.search(term)
            except ExternalProviderError as e:
                logger.warning(
                    f"iTunes {kind} search failed, skipping: {e.message}",
                    extra={"kind": kind, "term": term},
                )
                continue

            for track in found:
                if track.external_id in seen:
                    continue
                seen.add(track.external_id)
                recommendations.append(track)

        return recommendations[:MAX_RECOMMENDATIONS]


__all__ = ["ITunesTrackProvider", "map_itunes_track"]
