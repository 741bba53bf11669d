"""Playlist generation: seeds in, persisted playlist out.

Hey future me - the ORDER here is load-bearing and must not be shuffled:

    1. RecommendationService.generate(seeds)   (external HTTP, may fail → nothing persisted)
    2. create_playlist()  → COMMIT              (playlist row exists, zero songs)
    3. add_songs()        → commit by caller    (songs appear)

Step 2 commits on its own so the playlist id is durable before the song batch. If the process
dies or add_songs fails between 2 and 3, the user is left with an EMPTY playlist. That state is
reachable on purpose and every reader (lists, songs endpoint, export, clone) must cope with it.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.application.services.recommendation_service import RecommendationService
from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import ValidationError
from upbeat.infrastructure.observability import log_operation
from upbeat.infrastructure.persistence import PlaylistRepository

logger = logging.getLogger(__name__)


@dataclass
class GeneratedPlaylist:
    """Result of a generation run."""

    playlist_id: str
    tracks: list[TrackDTO]


class PlaylistGenerationService:
    """Compose recommendation and persistence into one generation flow."""

    def __init__(
        self,
        session: AsyncSession,
        recommendation_service: RecommendationService,
    ) -> None:
        """Initialize generation service.

        Args:
            session: Database session (committed between playlist and songs)
            recommendation_service: Aggregator used for the seed selection
        """
        self._session = session
        self._recommendations = recommendation_service
        self._playlists = PlaylistRepository(session)

    async def generate_playlist(
        self,
        owner_id: str,
        name: str,
        provider: Provider,
        seeds: Sequence[TrackDTO],
        genre: str | None = None,
        mood: str | None = None,
    ) -> GeneratedPlaylist:
        """Generate recommendations and persist them as a new private playlist.

        Args:
            owner_id: User creating the playlist
            name: Playlist name
            provider: Catalog to generate from
            seeds: User-picked seed tracks
            genre: Optional genre label for community filtering
            mood: Optional mood label for community filtering

        Returns:
            The new playlist id and the tracks that were stored

        Raises:
            ValidationError: If the name is blank or there are no seeds
            RecommendationFailedError: If the provider fails (nothing is persisted)
        """
        name = name.strip()
        if not name:
            raise ValidationError("Playlist name cannot be empty")
        if not seeds:
            raise ValidationError("At least one seed track is required")

        async with log_operation(
            logger,
            "playlist_generation",
            provider=provider.value,
            seed_count=len(seeds),
        ):
            tracks = await self._recommendations.generate(seeds, provider)

            playlist_id = await self._playlists.create_playlist(
                owner_id=owner_id,
                name=name,
                provider=provider,
                genre=genre,
                mood=mood,
            )
            await self._session.commit()

            await self._playlists.add_songs(playlist_id, tracks)

            logger.info(
                f"Generated playlist {playlist_id} with {len(tracks)} tracks",
                extra={"playlist_id": playlist_id, "track_count": len(tracks)},
            )
            return GeneratedPlaylist(playlist_id=playlist_id, tracks=tracks)
