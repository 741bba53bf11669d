"""iTunes Search API HTTP client.

Hey future me - the iTunes Search API is PUBLIC: no OAuth, no API key. The catch
is a tight per-IP limit (~20 calls/minute) and no recommendation endpoint at all, which is why
the iTunes provider fakes recommendations with several searches (see ITunesTrackProvider).
"""

import logging
from typing import Any, cast

import httpx

from upbeat.config.settings import ITunesSettings
from upbeat.domain.exceptions import ExternalProviderError, RateLimitExceededError
from upbeat.infrastructure.rate_limiter import RateLimiter, get_itunes_limiter

logger = logging.getLogger(__name__)

PROVIDER_NAME = "itunes"
SEARCH_LIMIT = 10


class ITunesClient:
    """HTTP client for the iTunes Search API."""

    def __init__(
        self,
        settings: ITunesSettings,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """
        Initialize iTunes client.

        Args:
            settings: iTunes configuration settings
            http_client: Optional pre-built HTTP client
            rate_limiter: Limiter to use instead of the shared iTunes limiter
        """
        self.settings = settings
        self._client = http_client
        self._rate_limiter = rate_limiter or get_itunes_limiter()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search_songs(
        self, term: str, limit: int = SEARCH_LIMIT
    ) -> list[dict[str, Any]]:
        """
        Search songs by free-text term.

        Args:
            term: Search term (title, artist, genre name...)
            limit: Maximum number of results

        Returns:
            Raw result objects from the response's results list

        Raises:
            ExternalProviderError: On transport errors and non-2xx responses
            RateLimitExceededError: On 429 (Apple sometimes answers 403 instead)
        """
        client = await self._get_client()
        url = f"{self.settings.base_url.rstrip('/')}/search"
        params = {"term": term, "media": "music", "entity": "song", "limit": limit}

        try:
            async with self._rate_limiter:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"iTunes search failed for '{term}': {e}")
            raise ExternalProviderError(
                f"iTunes request failed: {e}", provider=PROVIDER_NAME
            ) from e

        if response.status_code == 429:
            self._rate_limiter.handle_rate_limit_response()
            raise RateLimitExceededError(
                "iTunes Search API rate limited (429)", provider=PROVIDER_NAME
            )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalProviderError(
                f"iTunes Search API returned {response.status_code}",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
            ) from e

        # iTunes serves JSON with a text/javascript content type, json() doesn't care
        try:
            data = cast(dict[str, Any], response.json())
        except ValueError as e:
            raise ExternalProviderError(
                "iTunes Search API returned invalid JSON", provider=PROVIDER_NAME
            ) from e
        return cast(list[dict[str, Any]], data.get("results", []))

    async def __aenter__(self) -> "ITunesClient":
        """Enter async context."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context and close client."""
        await self.close()
