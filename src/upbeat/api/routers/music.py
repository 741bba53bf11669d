"""Catalog search and playlist generation endpoints."""

import logging

from fastapi import APIRouter, Depends, Query, status

from upbeat.api.dependencies import (
    get_current_user_id,
    get_playlist_generation_service,
    get_track_search_service,
)
from upbeat.api.schemas.tracks import (
    GeneratePlaylistRequest,
    GeneratePlaylistResponse,
    SearchResponse,
    TrackSchema,
)
from upbeat.application.services import PlaylistGenerationService, TrackSearchService
from upbeat.domain.entities import Provider
from upbeat.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{provider}/search", response_model=SearchResponse)
async def search_tracks(
    provider: Provider,
    q: str = Query(..., min_length=1, max_length=200, description="Search query"),
    search_service: TrackSearchService = Depends(get_track_search_service),
) -> SearchResponse:
    """Search a provider's catalog for seed candidates (no login needed)."""
    tracks = await search_service.search(q, provider)
    return SearchResponse(
        provider=provider,
        query=q,
        tracks=[TrackSchema.from_dto(t) for t in tracks],
    )


# Hey future me, seeds must come from the SAME provider as the path - a Spotify id is meaningless
# to iTunes and vice versa. The UI sends its 20 picks, Spotify silently uses the first 5, iTunes
# looks at genres/artists across all of them.
@router.post(
    "/{provider}/generate",
    response_model=GeneratePlaylistResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_playlist(
    provider: Provider,
    request: GeneratePlaylistRequest,
    user_id: str = Depends(get_current_user_id),
    generation_service: PlaylistGenerationService = Depends(
        get_playlist_generation_service
    ),
) -> GeneratePlaylistResponse:
    """Generate an upbeat playlist from seed tracks and save it (private)."""
    foreign = [s for s in request.seeds if s.provider != provider]
    if foreign:
        raise ValidationError(
            f"All seed tracks must come from {provider.value}, "
            f"got {len(foreign)} from another provider"
        )

    result = await generation_service.generate_playlist(
        owner_id=user_id,
        name=request.name,
        provider=provider,
        seeds=[s.to_dto() for s in request.seeds],
        genre=request.genre,
        mood=request.mood,
    )
    return GeneratePlaylistResponse(
        playlist_id=result.playlist_id,
        track_count=len(result.tracks),
        tracks=[TrackSchema.from_dto(t) for t in result.tracks],
    )
