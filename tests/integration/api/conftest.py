"""API test fixtures: the real app over an in-memory DB, with catalog calls faked."""

from collections.abc import Callable, Generator, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from upbeat.api.dependencies import get_provider_registry, get_spotify_client
from upbeat.config import Settings
from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import Provider
from upbeat.domain.ports import ITrackProvider
from upbeat.infrastructure.providers import TrackProviderRegistry
from upbeat.main import create_app


class FakeTrackProvider(ITrackProvider):
    """Adapter returning canned tracks (or raising a canned error)."""

    def __init__(self, provider: Provider, count: int = 20) -> None:
        self.provider = provider
        self.tracks = [
            TrackDTO(
                external_id=f"{provider.value}-{i}",
                title=f"Upbeat {i}",
                artist="Fake Artist",
                provider=provider,
            )
            for i in range(count)
        ]
        self.error: Exception | None = None
        self.seen_seeds: list[TrackDTO] = []

    async def search(self, query: str) -> list[TrackDTO]:
        if self.error:
            raise self.error
        return self.tracks[:10]

    async def recommend(self, seeds: Sequence[TrackDTO]) -> list[TrackDTO]:
        self.seen_seeds = list(seeds)
        if self.error:
            raise self.error
        return self.tracks


@pytest.fixture
def spotify_provider() -> FakeTrackProvider:
    return FakeTrackProvider(Provider.SPOTIFY)


@pytest.fixture
def itunes_provider() -> FakeTrackProvider:
    return FakeTrackProvider(Provider.ITUNES, count=7)


@pytest.fixture
def fake_spotify_client() -> MagicMock:
    client = MagicMock()
    client.get_tracks = AsyncMock(return_value=[])
    client.get_current_user = AsyncMock(return_value={"id": "spotify-user"})
    client.create_playlist = AsyncMock(
        return_value={
            "id": "ext1",
            "external_urls": {"spotify": "https://open.spotify.com/playlist/ext1"},
        }
    )
    client.add_tracks_to_playlist = AsyncMock()
    client.get_authorization_url = MagicMock(
        side_effect=lambda state: f"https://accounts.spotify.com/authorize?state={state}"
    )
    client.exchange_code = AsyncMock(
        return_value={"access_token": "at", "refresh_token": "rt", "expires_in": 3600}
    )
    return client


@pytest.fixture
def client(
    settings: Settings,
    spotify_provider: FakeTrackProvider,
    itunes_provider: FakeTrackProvider,
    fake_spotify_client: MagicMock,
) -> Generator[TestClient, None, None]:
    app = create_app(settings)

    registry = TrackProviderRegistry()
    registry.register(spotify_provider)
    registry.register(itunes_provider)
    app.dependency_overrides[get_provider_registry] = lambda: registry
    app.dependency_overrides[get_spotify_client] = lambda: fake_spotify_client

    with TestClient(app) as test_client:
        yield test_client


def _auth(user_id: str = "u1", name: str | None = None) -> dict[str, str]:
    headers = {"X-User-Id": user_id}
    if name:
        headers["X-User-Name"] = name
    return headers


def _seed_payload(provider: Provider, count: int = 3) -> list[dict]:
    return [
        {
            "external_id": f"seed-{i}",
            "title": f"Seed {i}",
            "artist": f"Seed Artist {i}",
            "provider": provider.value,
            "genre": "Pop",
        }
        for i in range(count)
    ]


@pytest.fixture
def auth() -> Callable[..., dict[str, str]]:
    """Identity headers as set by the auth gateway."""
    return _auth


@pytest.fixture
def seeds() -> Callable[..., list[dict]]:
    """Seed track payloads for generate requests."""
    return _seed_payload


@pytest.fixture
def create_playlist(
    client: TestClient, auth: Callable[..., dict[str, str]], seeds: Callable[..., list[dict]]
) -> Callable[..., str]:
    """Generate a Spotify playlist through the API and return its id."""

    def _create(user_id: str = "u1", name: str = "Mix", **extra: str) -> str:
        response = client.post(
            "/api/music/spotify/generate",
            json={"name": name, "seeds": seeds(Provider.SPOTIFY), **extra},
            headers=auth(user_id),
        )
        assert response.status_code == 201, response.text
        return str(response.json()["playlist_id"])

    return _create
