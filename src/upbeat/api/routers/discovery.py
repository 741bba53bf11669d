"""Community discovery endpoints (public playlists only)."""

from fastapi import APIRouter, Depends, Query

from upbeat.api.dependencies import get_app_settings, get_playlist_repository
from upbeat.api.schemas.playlists import PublicPlaylistResponse
from upbeat.config import Settings
from upbeat.domain.entities import PlaylistFilter
from upbeat.infrastructure.persistence import PlaylistRepository

router = APIRouter()


def _clamp(limit: int | None, default: int, settings: Settings) -> int:
    return min(limit or default, settings.discovery.max_limit)


@router.get("/public", response_model=list[PublicPlaylistResponse])
async def list_public_playlists(
    limit: int | None = Query(default=None, ge=1),
    settings: Settings = Depends(get_app_settings),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> list[PublicPlaylistResponse]:
    """Public playlists, newest first."""
    playlists = await repository.get_public_playlists(
        _clamp(limit, settings.discovery.public_limit, settings)
    )
    return [PublicPlaylistResponse.from_entity(p) for p in playlists]


@router.get("/trending", response_model=list[PublicPlaylistResponse])
async def list_trending_playlists(
    limit: int | None = Query(default=None, ge=1),
    settings: Settings = Depends(get_app_settings),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> list[PublicPlaylistResponse]:
    """Public playlists by views, then likes."""
    playlists = await repository.get_trending_playlists(
        _clamp(limit, settings.discovery.trending_limit, settings)
    )
    return [PublicPlaylistResponse.from_entity(p) for p in playlists]


@router.get("/filtered", response_model=list[PublicPlaylistResponse])
async def list_filtered_playlists(
    genre: str | None = Query(default=None, max_length=100),
    mood: str | None = Query(default=None, max_length=100),
    search: str | None = Query(default=None, max_length=200),
    limit: int | None = Query(default=None, ge=1),
    settings: Settings = Depends(get_app_settings),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> list[PublicPlaylistResponse]:
    """Public playlists filtered by genre, mood and name/owner search.

    Filters apply to the top `limit` playlists by views, so fewer than
    `limit` results can come back even when more matches exist.
    """
    playlists = await repository.get_filtered_playlists(
        PlaylistFilter(
            genre=genre or None,
            mood=mood or None,
            search=search or None,
            limit=_clamp(limit, settings.discovery.public_limit, settings),
        )
    )
    return [PublicPlaylistResponse.from_entity(p) for p in playlists]
