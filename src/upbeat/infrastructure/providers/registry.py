"""Track Provider Registry.

Maps each Provider to its ITrackProvider adapter. Adapters are registered when
the application starts (see infrastructure/lifecycle.py:build_provider_registry)
and looked up per request through api/dependencies.py.
"""

import logging

from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import ConfigurationError
from upbeat.domain.ports import ITrackProvider

logger = logging.getLogger(__name__)


class TrackProviderRegistry:
    """Registry of track provider adapters, one per Provider."""

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._providers: dict[Provider, ITrackProvider] = {}

    def register(self, provider: ITrackProvider) -> None:
        """Register a track provider.

        Args:
            provider: Adapter to register (replaces any adapter for the same Provider)
        """
        self._providers[provider.provider] = provider
        logger.debug(f"Registered track provider: {provider.provider.value}")

    def get_provider(self, provider: Provider) -> ITrackProvider:
        """Get the adapter for a provider.

        Raises:
            ConfigurationError: If no adapter is registered for it
        """
        adapter = self._providers.get(provider)
        if adapter is None:
            raise ConfigurationError(f"No track provider registered for {provider.value}")
        return adapter

    def get_all_providers(self) -> list[ITrackProvider]:
        """Get all registered providers."""
        return list(self._providers.values())


__all__ = ["TrackProviderRegistry"]
