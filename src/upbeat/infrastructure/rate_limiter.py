"""
Token bucket rate limiter shared by the outbound catalog clients.

Hey future me - one limiter per provider, shared by every request in the process.
Spotify and iTunes both throttle per app/IP, so two parallel generations must draw
from the SAME bucket or we hammer the API twice as hard as we think.

ALGORITHM: Token Bucket
- Bucket holds max_tokens
- Refilled at refill_rate tokens/sec
- Every request consumes one token, waiting if the bucket is empty

429 HANDLING:
- We do NOT retry inside the clients (a 429 surfaces as RateLimitExceededError)
- But we remember the Retry-After cooldown, so the NEXT request through this limiter
  waits instead of immediately earning another 429

USAGE:
    limiter = get_spotify_limiter()

    async with limiter:
        response = await client.get(url)

    if response.status_code == 429:
        limiter.handle_rate_limit_response(retry_after)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter."""

    max_tokens: int = 10  # Bucket size
    refill_rate: float = 2.0  # Tokens per second
    max_backoff_seconds: float = 60.0  # Cap for a remembered Retry-After
    initial_backoff_seconds: float = 1.0  # Cooldown when no Retry-After is sent
    backoff_multiplier: float = 2.0


@dataclass
class RateLimiter:
    """Token Bucket Rate Limiter with a remembered 429 cooldown.

    Attributes:
        config: Rate limiter configuration
        _tokens: Current available tokens
        _last_refill: Last time tokens were refilled
        _current_backoff: Cooldown used for the next 429 without Retry-After
        _blocked_until: Monotonic time before which no token is handed out
        _lock: Async lock for concurrent acquirers
    """

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)

    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default_factory=time.monotonic, init=False)
    _current_backoff: float = field(default=0.0, init=False)
    _blocked_until: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    _name: str = field(default="default", init=False)

    def __post_init__(self) -> None:
        """Initialize tokens to max capacity."""
        self._tokens = float(self.config.max_tokens)
        self._current_backoff = self.config.initial_backoff_seconds

    @classmethod
    def for_spotify(cls) -> "RateLimiter":
        """Create rate limiter for the Spotify Web API.

        Spotify allows roughly 180 requests/minute per app. We stay at 2 req/sec
        sustained with bursts of 10 so an export (me + create + add) never waits.
        """
        limiter = cls(
            config=RateLimiterConfig(
                max_tokens=10,
                refill_rate=2.0,
                max_backoff_seconds=60.0,
                initial_backoff_seconds=1.0,
            )
        )
        limiter._name = "spotify"
        return limiter

    @classmethod
    def for_itunes(cls) -> "RateLimiter":
        """Create rate limiter for the iTunes Search API.

        Hey future me - Apple documents ~20 calls/minute per IP for the Search API!
        The burst of 5 is exactly one fan-out recommendation (3 genres + 2 artists),
        after that we trickle at one request every three seconds.
        """
        limiter = cls(
            config=RateLimiterConfig(
                max_tokens=5,
                refill_rate=1.0 / 3.0,
                max_backoff_seconds=60.0,
                initial_backoff_seconds=3.0,
            )
        )
        limiter._name = "itunes"
        return limiter

    def _refill_tokens(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.monotonic()
        elapsed = now - self._last_refill

        new_tokens = elapsed * self.config.refill_rate
        self._tokens = min(self.config.max_tokens, self._tokens + new_tokens)
        self._last_refill = now

    async def acquire(self) -> None:
        """Acquire one token, waiting if necessary."""
        async with self._lock:
            cooldown = self._blocked_until - time.monotonic()
            if cooldown > 0:
                logger.debug(
                    f"RateLimiter[{self._name}]: cooling down for {cooldown:.2f}s"
                )
                await asyncio.sleep(cooldown)

            self._refill_tokens()

            while self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self.config.refill_rate
                logger.debug(
                    f"RateLimiter[{self._name}]: No tokens available, "
                    f"waiting {wait_time:.2f}s"
                )

                # Release lock while waiting
                self._lock.release()
                try:
                    await asyncio.sleep(wait_time)
                finally:
                    await self._lock.acquire()

                self._refill_tokens()

            self._tokens -= 1.0

    def handle_rate_limit_response(self, retry_after: int | None = None) -> float:
        """Remember a 429 so the next acquire() waits out the cooldown.

        Args:
            retry_after: Retry-After header from API response (seconds)

        Returns:
            The cooldown that will be applied
        """
        if retry_after is not None:
            wait_time = float(retry_after)
        else:
            wait_time = self._current_backoff
            self._current_backoff = min(
                self._current_backoff * self.config.backoff_multiplier,
                self.config.max_backoff_seconds,
            )

        wait_time = min(wait_time, self.config.max_backoff_seconds)
        self._blocked_until = time.monotonic() + wait_time
        self._tokens = 0.0

        logger.warning(
            f"RateLimiter[{self._name}]: 429 Rate Limited! "
            f"Next request waits {wait_time:.1f}s"
        )
        return wait_time

    def reset_backoff(self) -> None:
        """Reset backoff after a successful request."""
        self._current_backoff = self.config.initial_backoff_seconds

    async def __aenter__(self) -> "RateLimiter":
        """Enter async context - acquire token."""
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        if exc_type is None:
            self.reset_backoff()

    @property
    def available_tokens(self) -> float:
        """Get current available tokens (for debugging)."""
        self._refill_tokens()
        return self._tokens

    @property
    def name(self) -> str:
        """Get limiter name for logging."""
        return self._name


# Module-level rate limiters, one per provider, shared across all requests
_spotify_limiter: RateLimiter | None = None
_itunes_limiter: RateLimiter | None = None


def get_spotify_limiter() -> RateLimiter:
    """Get singleton Spotify rate limiter."""
    global _spotify_limiter
    if _spotify_limiter is None:
        _spotify_limiter = RateLimiter.for_spotify()
    return _spotify_limiter


def get_itunes_limiter() -> RateLimiter:
    """Get singleton iTunes rate limiter."""
    global _itunes_limiter
    if _itunes_limiter is None:
        _itunes_limiter = RateLimiter.for_itunes()
    return _itunes_limiter


__all__ = [
    "RateLimiter",
    "RateLimiterConfig",
    "get_itunes_limiter",
    "get_spotify_limiter",
]
