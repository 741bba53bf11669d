"""Catalog search across track providers."""

from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import ValidationError
from upbeat.infrastructure.providers import TrackProviderRegistry


class TrackSearchService:
    """Search a provider's catalog for seed candidates."""

    def __init__(self, registry: TrackProviderRegistry) -> None:
        self._registry = registry

    async def search(self, query: str, provider: Provider) -> list[TrackDTO]:
        """Search tracks on one provider.

        Raises:
            ValidationError: If the query is blank
            ExternalProviderError: If the provider call fails
        """
        query = query.strip()
        if not query:
            raise ValidationError("Search query cannot be empty")
        return await self._registry.get_provider(provider).search(query)
