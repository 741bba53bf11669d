"""Shared pytest fixtures.

Hey future me - every test DB is an in-memory SQLite (StaticPool keeps it alive for the whole
test), and every outbound HTTP call goes through an httpx.MockTransport. Nothing here ever talks
to Spotify or Apple.
"""

from collections.abc import AsyncGenerator, Callable

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.config import Settings
from upbeat.config.settings import DatabaseSettings, SpotifySettings
from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider
from upbeat.infrastructure.persistence import Database
from upbeat.infrastructure.rate_limiter import RateLimiter, RateLimiterConfig

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def settings() -> Settings:
    """Settings with an in-memory database and dummy Spotify credentials."""
    return Settings(
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        spotify=SpotifySettings(
            client_id="test-client-id",
            client_secret="test-client-secret",
            redirect_uri="http://localhost:8000/api/spotify/callback",
        ),
    )


@pytest.fixture
async def db(settings: Settings) -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with all tables."""
    database = Database(settings)
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture
async def session(db: Database) -> AsyncGenerator[AsyncSession, None]:
    """Session that is rolled back after the test (commits inside the test still stick)."""
    async with db._session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fast_limiter() -> RateLimiter:
    """Rate limiter that never makes a test wait."""
    return RateLimiter(RateLimiterConfig(max_tokens=1000, refill_rate=1000.0))


@pytest.fixture
def mock_http() -> Callable[[Handler], httpx.AsyncClient]:
    """Factory for httpx clients answering through a handler function."""

    def _factory(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory


def _make_track(
    external_id: str,
    provider: Provider = Provider.SPOTIFY,
    title: str | None = None,
    artist: str = "Test Artist",
    genre: str | None = None,
) -> TrackDTO:
    """Build a TrackDTO with sensible defaults."""
    return TrackDTO(
        external_id=external_id,
        title=title or f"Track {external_id}",
        artist=artist,
        provider=provider,
        genre=genre,
    )


@pytest.fixture
def make_track() -> Callable[..., TrackDTO]:
    """Factory for TrackDTOs."""
    return _make_track


@pytest.fixture
def spotify_tracks() -> list[TrackDTO]:
    """Five Spotify tracks."""
    return [_make_track(f"sp{i}") for i in range(5)]


@pytest.fixture
def itunes_tracks() -> list[TrackDTO]:
    """Three iTunes tracks."""
    return [_make_track(str(100 + i), provider=Provider.ITUNES) for i in range(3)]
