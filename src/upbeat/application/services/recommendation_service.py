"""Recommendation aggregation across track providers."""

import logging
from collections.abc import Sequence

from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import (
    ExternalProviderError,
    RecommendationFailedError,
    ValidationError,
)
from upbeat.infrastructure.providers import TrackProviderRegistry

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 20


# Hey future me, this service is deliberately thin: pick the adapter, call recommend(), cap at 20.
# Its real job is the error contract - whatever the adapter blows up with (HTTP error, 429, garbage
# payload) comes out as ONE RecommendationFailedError with the original chained as __cause__.
# ConfigurationError is NOT wrapped: "Spotify isn't set up" should stay a 503, not look like a
# flaky upstream. Also note: up to 20, never exactly 20. iTunes fan-out often returns fewer.
class RecommendationService:
    """Produce recommended tracks for a seed selection from one provider."""

    def __init__(self, registry: TrackProviderRegistry) -> None:
        self._registry = registry

    async def generate(
        self, seeds: Sequence[TrackDTO], provider: Provider
    ) -> list[TrackDTO]:
        """Recommend up to 20 tracks for the given seeds.

        Args:
            seeds: User-picked seed tracks (ordered)
            provider: Catalog to ask

        Returns:
            At most 20 recommended tracks, in provider order

        Raises:
            RecommendationFailedError: If the provider adapter fails
            ConfigurationError: If the provider is not configured
        """
        adapter = self._registry.get_provider(provider)
        try:
            tracks = await adapter.recommend(seeds)
        except (ExternalProviderError, ValidationError) as e:
            logger.warning(
                f"Recommendation request to {provider.value} failed: {e.message}",
                extra={"provider": provider.value, "seed_count": len(seeds)},
            )
            raise RecommendationFailedError(provider.value, e.message) from e

        return tracks[:MAX_RECOMMENDATIONS]
