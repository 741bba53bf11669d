"""Spotify account connection and user token management.

Hey future me - this is the "get a valid user access token" capability the export needs.

OAuth Flow:
1. build_authorization_url(user_id) → URL with a random state bound to the user
2. User grants access on Spotify, Spotify redirects to /api/spotify/callback?code&state
3. complete_authorization(state, code) → resolve the user from state, exchange, store tokens
4. get_valid_access_token(user_id) → stored token, refreshed first if it has expired

The callback comes from the user's browser without our X-User-Id header, that's why the state
carries the user. States live in memory for 10 minutes and are single-use.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.domain.entities import SpotifyCredential
from upbeat.domain.exceptions import AuthenticationError
from upbeat.infrastructure.integrations import SpotifyClient
from upbeat.infrastructure.persistence import SpotifyCredentialRepository

logger = logging.getLogger(__name__)

STATE_TTL_SECONDS = 600


@dataclass
class AuthorizationStateStore:
    """Pending OAuth states: state -> (user_id, created_at)."""

    ttl_seconds: int = STATE_TTL_SECONDS
    _pending: dict[str, tuple[str, float]] = field(default_factory=dict)

    def issue(self, user_id: str) -> str:
        """Create a new single-use state for a user."""
        self._purge_expired()
        state = secrets.token_urlsafe(32)
        self._pending[state] = (user_id, time.time())
        return state

    def consume(self, state: str) -> str | None:
        """Resolve and forget a state, None if unknown or expired."""
        entry = self._pending.pop(state, None)
        if entry is None:
            return None
        user_id, created_at = entry
        if time.time() - created_at > self.ttl_seconds:
            return None
        return user_id

    def _purge_expired(self) -> None:
        now = time.time()
        for state, (_, created_at) in list(self._pending.items()):
            if now - created_at > self.ttl_seconds:
                del self._pending[state]


_state_store: AuthorizationStateStore | None = None


def get_authorization_state_store() -> AuthorizationStateStore:
    """Get the process-wide OAuth state store."""
    global _state_store
    if _state_store is None:
        _state_store = AuthorizationStateStore()
    return _state_store


class SpotifyAuthService:
    """Connect, refresh and disconnect users' Spotify accounts."""

    def __init__(
        self,
        session: AsyncSession,
        spotify_client: SpotifyClient,
        state_store: AuthorizationStateStore | None = None,
    ) -> None:
        """Initialize auth service.

        Args:
            session: Database session for the credential repository
            spotify_client: Spotify client used for token calls
            state_store: Pending OAuth states (process-wide store by default)
        """
        self._client = spotify_client
        self._credentials = SpotifyCredentialRepository(session)
        self._states = state_store or get_authorization_state_store()

    def build_authorization_url(self, user_id: str) -> str:
        """Build the Spotify consent URL for a user.

        Raises:
            ConfigurationError: If Spotify credentials are not configured
        """
        state = self._states.issue(user_id)
        logger.debug(f"Issued Spotify OAuth state {state[:8]}... for user {user_id}")
        return self._client.get_authorization_url(state)

    async def complete_authorization(self, state: str, code: str) -> str:
        """Finish the OAuth callback.

        Returns:
            The user id the account was connected for

        Raises:
            AuthenticationError: If the state is unknown, reused or expired
        """
        user_id = self._states.consume(state)
        if user_id is None:
            raise AuthenticationError(
                "Invalid or expired authorization state. Please connect again."
            )
        await self.connect(user_id, code)
        return user_id

    async def connect(self, user_id: str, code: str) -> SpotifyCredential:
        """Exchange an authorization code and store the user's tokens."""
        token_data = await self._client.exchange_code(code)
        credential = SpotifyCredential(
            user_id=user_id,
            access_token=token_data["access_token"],
            refresh_token=token_data.get("refresh_token", ""),
            expires_at=SpotifyCredential.expiry_from_now(
                int(token_data.get("expires_in", 3600))
            ),
        )
        await self._credentials.upsert(credential)
        logger.info(f"Connected Spotify account for user {user_id}")
        return credential

    # Hey future me - Spotify usually does NOT send a new refresh_token on refresh. Keep the old
    # one in that case, otherwise the next refresh has nothing to send. TokenRefreshException
    # (revoked access) propagates: the caller gets a 401 and the user must reconnect.
    async def get_valid_access_token(self, user_id: str) -> str | None:
        """Get a usable access token for a user, refreshing it if expired.

        Returns:
            Access token, or None if the user never connected an account

        Raises:
            TokenRefreshException: If the stored refresh token was revoked
        """
        credential = await self._credentials.get(user_id)
        if credential is None:
            return None

        if not credential.is_expired():
            return credential.access_token

        logger.debug(f"Refreshing expired Spotify token for user {user_id}")
        token_data = await self._client.refresh_token(credential.refresh_token)
        refreshed = SpotifyCredential(
            user_id=user_id,
            access_token=token_data["access_token"],
            refresh_token=token_data.get("refresh_token") or credential.refresh_token,
            expires_at=SpotifyCredential.expiry_from_now(
                int(token_data.get("expires_in", 3600))
            ),
        )
        await self._credentials.upsert(refreshed)
        return refreshed.access_token

    async def is_connected(self, user_id: str) -> bool:
        """Check whether the user linked a Spotify account."""
        return await self._credentials.get(user_id) is not None

    async def disconnect(self, user_id: str) -> bool:
        """Forget the user's Spotify tokens.

        Returns:
            True if an account was connected
        """
        removed = await self._credentials.delete(user_id)
        if removed:
            logger.info(f"Disconnected Spotify account for user {user_id}")
        return removed
