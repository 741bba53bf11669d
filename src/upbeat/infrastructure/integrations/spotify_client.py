"""Spotify Web API HTTP client (client-credentials catalog access + user OAuth)."""

import logging
import time
from dataclasses import dataclass
from typing import Any, cast
from urllib.parse import urlencode

import httpx

from upbeat.config.settings import SpotifySettings
from upbeat.domain.exceptions import (
    ConfigurationError,
    ExternalProviderError,
    RateLimitExceededError,
    TokenRefreshException,
)
from upbeat.infrastructure.rate_limiter import RateLimiter, get_spotify_limiter

logger = logging.getLogger(__name__)

PROVIDER_NAME = "spotify"

# Scopes needed to create playlists in the user's account and read their profile
USER_SCOPES = [
    "playlist-modify-public",
    "playlist-modify-private",
    "user-read-private",
    "user-read-email",
]

# Product policy for "upbeat" recommendations, not user-configurable
MAX_SEED_TRACKS = 5
RECOMMENDATION_LIMIT = 20
TARGET_ENERGY = 0.8
TARGET_VALENCE = 0.7
MIN_TEMPO = 120

# /v1/tracks accepts at most 50 ids per call
TRACKS_BATCH_SIZE = 50
# /v1/playlists/{id}/tracks accepts at most 100 uris per call
ADD_TRACKS_BATCH_SIZE = 100


# Hey future me, this is the ONE piece of process-wide mutable state in the app: the app-level
# client-credentials token. Single slot, no lock! Two requests that both see an expired token will
# both fetch a new one and both write it back - last writer wins, and both tokens are equally valid,
# so the race is harmless. Don't "fix" it with an asyncio.Lock unless Spotify starts complaining.
@dataclass
class ClientCredentialsCache:
    """Single-slot cache for the client-credentials access token."""

    access_token: str | None = None
    expires_at: float = 0.0  # epoch seconds

    def get(self, margin_seconds: int = 60) -> str | None:
        """Return the cached token unless it expires within margin_seconds."""
        if self.access_token is None:
            return None
        if time.time() >= self.expires_at - margin_seconds:
            return None
        return self.access_token

    def store(self, access_token: str, expires_in: int) -> None:
        """Replace the cached token."""
        self.access_token = access_token
        self.expires_at = time.time() + expires_in

    def clear(self) -> None:
        """Forget the cached token."""
        self.access_token = None
        self.expires_at = 0.0


_app_token_cache = ClientCredentialsCache()


def get_app_token_cache() -> ClientCredentialsCache:
    """Get the process-wide client-credentials token cache."""
    return _app_token_cache


class SpotifyClient:
    """HTTP client for Spotify API operations.

    Catalog calls (search, recommendations, track lookup) use the app's
    client-credentials token. Account calls (profile, playlist creation) take a
    user access token obtained through the authorization-code flow.
    """

    AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    API_BASE_URL = "https://api.spotify.com/v1"

    # Hey future me, the httpx client is lazy-loaded in _get_client() so this can be constructed
    # outside a running event loop (dependency factories, tests). Tests inject their own
    # httpx.AsyncClient with a MockTransport via http_client.
    def __init__(
        self,
        settings: SpotifySettings,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
        token_cache: ClientCredentialsCache | None = None,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            http_client: Optional pre-built HTTP client
            rate_limiter: Limiter to use instead of the shared Spotify limiter
            token_cache: Cache to use instead of the process-wide token slot
        """
        self.settings = settings
        self._client = http_client
        self._rate_limiter = rate_limiter or get_spotify_limiter()
        self._token_cache = token_cache or get_app_token_cache()

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

    def _require_credentials(self) -> None:
        if not self.settings.is_configured:
            raise ConfigurationError(
                "Spotify client credentials are not configured. "
                "Set SPOTIFY__CLIENT_ID and SPOTIFY__CLIENT_SECRET in your environment. "
                "Get credentials at https://developer.spotify.com/dashboard"
            )

    # Yo, every HTTP failure gets translated to a domain error RIGHT HERE. Nothing above the
    # integrations package should ever see an httpx exception. No retry: one failed call is one
    # ExternalProviderError. A 429 additionally tells the limiter to cool down so the next caller
    # doesn't walk straight into another 429.
    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            async with self._rate_limiter:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    data=data,
                    headers=headers,
                    auth=auth,
                )
        except httpx.HTTPError as e:
            logger.error(f"Spotify request failed: {method} {url}: {e}")
            raise ExternalProviderError(
                f"Spotify request failed: {e}", provider=PROVIDER_NAME
            ) from e

        if response.status_code == 429:
            retry_after_str = response.headers.get("Retry-After")
            retry_after = (
                int(retry_after_str)
                if retry_after_str and retry_after_str.isdigit()
                else None
            )
            self._rate_limiter.handle_rate_limit_response(retry_after)
            raise RateLimitExceededError(
                f"Spotify API rate limited (429). URL: {url}",
                provider=PROVIDER_NAME,
                retry_after=retry_after,
            )

        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Spotify API error {response.status_code} for "
                f"{response.request.method} {response.request.url}"
            )
            raise ExternalProviderError(
                f"Spotify API returned {response.status_code}",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
            ) from e

    # A gateway or captive portal can answer 200 with an HTML page. That is still a provider
    # failure, not a crash.
    def _decode_json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ExternalProviderError(
                "Spotify API returned invalid JSON",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise ExternalProviderError(
                "Spotify API returned an unexpected payload",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
            )
        return cast(dict[str, Any], data)

    async def _api_request(
        self,
        method: str,
        path: str,
        access_token: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated, rate-limited Web API request.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Path below API_BASE_URL, e.g. "/search"
            access_token: App or user access token
            params: Query parameters
            json: JSON body

        Returns:
            Decoded JSON body ({} for empty responses)

        Raises:
            ExternalProviderError: On transport errors and non-2xx responses
            RateLimitExceededError: On 429
        """
        response = await self._send(
            method,
            f"{self.API_BASE_URL}{path}",
            params=params,
            json=json,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        self._raise_for_status(response)
        if not response.content:
            return {}
        return self._decode_json(response)

    async def _token_request(self, data: dict[str, Any]) -> dict[str, Any]:
        self._require_credentials()
        response = await self._send(
            "POST",
            self.TOKEN_URL,
            data=data,
            auth=(self.settings.client_id, self.settings.client_secret),
        )
        if data.get("grant_type") == "refresh_token":
            self._check_refresh_failure(response)
        self._raise_for_status(response)
        token_data = self._decode_json(response)
        if "access_token" not in token_data:
            raise ExternalProviderError(
                "Spotify token response has no access_token",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
            )
        return token_data

    # =========================================================================
    # App token (client credentials)
    # =========================================================================

    async def get_app_token(self) -> str:
        """
        Get a client-credentials access token, refreshing it lazily.

        The cached token is considered expired token_refresh_margin_seconds
        before its real expiry so it never runs out mid-request.

        Returns:
            App access token

        Raises:
            ConfigurationError: If client credentials are not configured
            ExternalProviderError: If the token request fails
        """
        self._require_credentials()

        cached = self._token_cache.get(self.settings.token_refresh_margin_seconds)
        if cached is not None:
            return cached

        token_data = await self._token_request({"grant_type": "client_credentials"})
        access_token = str(token_data["access_token"])
        self._token_cache.store(access_token, int(token_data.get("expires_in", 3600)))
        logger.debug("Fetched new Spotify client-credentials token")
        return access_token

    # =========================================================================
    # Catalog
    # =========================================================================

    async def search_tracks(self, query: str, limit: int = 10) -> dict[str, Any]:
        """
        Search the Spotify catalog for tracks.

        Args:
            query: Free-text search query
            limit: Maximum number of results

        Returns:
            Raw search response with tracks.items
        """
        token = await self.get_app_token()
        return await self._api_request(
            "GET",
            "/search",
            token,
            params={"q": query, "type": "track", "limit": limit},
        )

    # Hey future me, seeds are silently cut to the first 5 - that's Spotify's hard cap, not an
    # error. The energy/valence/tempo targets are what makes the result "upbeat". Don't expose them
    # as parameters, they're product policy.
    async def get_recommendations(self, seed_track_ids: list[str]) -> dict[str, Any]:
        """
        Get track recommendations for up to five seed tracks.

        Args:
            seed_track_ids: Spotify track ids (extras beyond five are dropped)

        Returns:
            Raw recommendations response with a tracks list
        """
        token = await self.get_app_token()
        seeds = seed_track_ids[:MAX_SEED_TRACKS]
        return await self._api_request(
            "GET",
            "/recommendations",
            token,
            params={
                "seed_tracks": ",".join(seeds),
                "limit": RECOMMENDATION_LIMIT,
                "target_energy": TARGET_ENERGY,
                "target_valence": TARGET_VALENCE,
                "min_tempo": MIN_TEMPO,
            },
        )

    async def get_tracks(self, track_ids: list[str]) -> list[dict[str, Any]]:
        """
        Get full track objects, batching ids in chunks of 50.

        Args:
            track_ids: Spotify track ids

        Returns:
            Track objects (unknown ids are skipped)
        """
        if not track_ids:
            return []

        token = await self.get_app_token()
        tracks: list[dict[str, Any]] = []
        for start in range(0, len(track_ids), TRACKS_BATCH_SIZE):
            chunk = track_ids[start : start + TRACKS_BATCH_SIZE]
            data = await self._api_request(
                "GET", "/tracks", token, params={"ids": ",".join(chunk)}
            )
            tracks.extend(t for t in data.get("tracks", []) if t)
        return tracks

    # =========================================================================
    # User OAuth (authorization code)
    # =========================================================================

    def get_authorization_url(self, state: str) -> str:
        """
        Build the Spotify authorization URL for connecting a user account.

        Args:
            state: Opaque CSRF state echoed back on the callback

        Returns:
            Authorization URL

        Raises:
            ConfigurationError: If client credentials or redirect_uri are missing
        """
        self._require_credentials()
        if not self.settings.redirect_uri.strip():
            raise ConfigurationError(
                "SPOTIFY__REDIRECT_URI is not configured. "
                "Set it to match your callback URL "
                "(e.g., http://localhost:8000/api/spotify/callback)"
            )

        params = {
            "client_id": self.settings.client_id,
            "response_type": "code",
            "redirect_uri": self.settings.redirect_uri,
            "state": state,
            "scope": " ".join(USER_SCOPES),
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """
        Exchange an authorization code for user tokens.

        Args:
            code: Authorization code from the callback

        Returns:
            Token response with access_token, refresh_token, expires_in
        """
        return await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.settings.redirect_uri,
            }
        )

    # Hey future me - Spotify returns 400 {"error": "invalid_grant"} when the refresh token was
    # revoked, and 401/403 when the app lost access. Both mean "user must reconnect", so they become
    # TokenRefreshException instead of a generic provider error.
    async def refresh_token(self, refresh_token: str) -> dict[str, Any]:
        """
        Refresh a user access token.

        Args:
            refresh_token: Refresh token from a previous exchange

        Returns:
            Token response; refresh_token is only present if Spotify rotated it

        Raises:
            TokenRefreshException: If the refresh token is invalid or revoked
            ExternalProviderError: For other failures
        """
        return await self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token}
        )

    def _check_refresh_failure(self, response: httpx.Response) -> None:
        if response.status_code == 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if error_data.get("error") == "invalid_grant":
                description = error_data.get(
                    "error_description", "Refresh token is invalid or has been revoked"
                )
                raise TokenRefreshException(
                    message=f"Refresh token invalid: {description}. "
                    "Please reconnect your Spotify account.",
                    error_code="invalid_grant",
                    http_status=400,
                )

        if response.status_code in (401, 403):
            raise TokenRefreshException(
                message="Spotify access denied. Please reconnect your Spotify account.",
                error_code="access_denied",
                http_status=response.status_code,
            )

    async def get_current_user(self, access_token: str) -> dict[str, Any]:
        """
        Get the profile of the user owning access_token.

        Args:
            access_token: User access token

        Returns:
            User profile with id and display_name
        """
        return await self._api_request("GET", "/me", access_token)

    async def create_playlist(
        self,
        user_id: str,
        name: str,
        description: str,
        access_token: str,
        public: bool = False,
    ) -> dict[str, Any]:
        """
        Create a playlist in a user's account.

        Args:
            user_id: Spotify user id
            name: Playlist name
            description: Playlist description
            access_token: User access token
            public: Whether the new playlist is public

        Returns:
            Created playlist object with id and external_urls
        """
        return await self._api_request(
            "POST",
            f"/users/{user_id}/playlists",
            access_token,
            json={"name": name, "description": description, "public": public},
        )

    async def add_tracks_to_playlist(
        self, playlist_id: str, track_uris: list[str], access_token: str
    ) -> None:
        """
        Append tracks to a playlist.

        Args:
            playlist_id: Spotify playlist id
            track_uris: spotify:track:<id> URIs
            access_token: User access token
        """
        for start in range(0, len(track_uris), ADD_TRACKS_BATCH_SIZE):
            await self._api_request(
                "POST",
                f"/playlists/{playlist_id}/tracks",
                access_token,
                json={"uris": track_uris[start : start + ADD_TRACKS_BATCH_SIZE]},
            )

    async def __aenter__(self) -> "SpotifyClient":
        """Enter async context."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context and close client."""
        await self.close()
