"""Dependency injection for API endpoints."""

import logging
from collections.abc import AsyncGenerator
from typing import cast

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.application.services import (
    PlaylistGenerationService,
    PlaylistService,
    RecommendationService,
    SpotifyAuthService,
    SpotifyExportService,
    TrackSearchService,
)
from upbeat.config import Settings, get_settings
from upbeat.domain.exceptions import AuthenticationError
from upbeat.infrastructure.integrations import SpotifyClient
from upbeat.infrastructure.persistence import (
    Database,
    PlaylistRepository,
    UserRepository,
)
from upbeat.infrastructure.providers import TrackProviderRegistry

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (falls back to environment settings)."""
    settings = getattr(request.app.state, "settings", None)
    return cast(Settings, settings) if settings is not None else get_settings()


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state.

    One session per request: committed when the endpoint returns, rolled back
    if it raises.
    """
    db: Database = request.app.state.db
    async with db.session_scope() as session:
        yield session


# Hey future me, identity comes from the X-User-Id header - real auth (cookies, sessions) lives in
# front of this service, not in it. If the gateway also sends X-User-Name we upsert it, that's how
# owner names end up on public listings and in community search.
async def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_name: str | None = Header(default=None, alias="X-User-Name"),
    session: AsyncSession = Depends(get_db_session),
) -> str:
    """Get the calling user's id.

    Raises:
        AuthenticationError: If no X-User-Id header was sent
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Missing X-User-Id header. Please log in.")

    user_id = x_user_id.strip()
    if x_user_name and x_user_name.strip():
        await UserRepository(session).upsert_name(user_id, x_user_name.strip())
    return user_id


def get_provider_registry(request: Request) -> TrackProviderRegistry:
    """Get the track provider registry built at startup."""
    return cast(TrackProviderRegistry, request.app.state.provider_registry)


def get_spotify_client(request: Request) -> SpotifyClient:
    """Get the shared Spotify client built at startup."""
    return cast(SpotifyClient, request.app.state.spotify_client)


def get_playlist_repository(
    session: AsyncSession = Depends(get_db_session),
) -> PlaylistRepository:
    """Get playlist repository for the request session."""
    return PlaylistRepository(session)


def get_recommendation_service(
    registry: TrackProviderRegistry = Depends(get_provider_registry),
) -> RecommendationService:
    """Get recommendation service."""
    return RecommendationService(registry)


def get_track_search_service(
    registry: TrackProviderRegistry = Depends(get_provider_registry),
) -> TrackSearchService:
    """Get track search service."""
    return TrackSearchService(registry)


def get_playlist_generation_service(
    session: AsyncSession = Depends(get_db_session),
    recommendation_service: RecommendationService = Depends(
        get_recommendation_service
    ),
) -> PlaylistGenerationService:
    """Get playlist generation service."""
    return PlaylistGenerationService(session, recommendation_service)


def get_playlist_service(
    session: AsyncSession = Depends(get_db_session),
    spotify_client: SpotifyClient = Depends(get_spotify_client),
) -> PlaylistService:
    """Get playlist read service."""
    return PlaylistService(session, spotify_client)


def get_spotify_auth_service(
    session: AsyncSession = Depends(get_db_session),
    spotify_client: SpotifyClient = Depends(get_spotify_client),
) -> SpotifyAuthService:
    """Get Spotify account connection service."""
    return SpotifyAuthService(session, spotify_client)


def get_spotify_export_service(
    session: AsyncSession = Depends(get_db_session),
    spotify_client: SpotifyClient = Depends(get_spotify_client),
    auth_service: SpotifyAuthService = Depends(get_spotify_auth_service),
) -> SpotifyExportService:
    """Get Spotify export service."""
    return SpotifyExportService(session, spotify_client, auth_service)
