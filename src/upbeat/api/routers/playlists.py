"""Playlist management endpoints (owner-facing)."""

import logging

from fastapi import APIRouter, Depends, Response, status

from upbeat.api.dependencies import (
    get_current_user_id,
    get_playlist_repository,
    get_playlist_service,
)
from upbeat.api.schemas.playlists import (
    AllowDislikesRequest,
    ClonePlaylistRequest,
    ClonePlaylistResponse,
    PlaylistResponse,
    SongResponse,
    SongWithPopularityResponse,
    VisibilityRequest,
    VisibilityResponse,
)
from upbeat.application.services import PlaylistService
from upbeat.domain.entities import Playlist
from upbeat.domain.exceptions import AuthorizationError, EntityNotFoundException
from upbeat.infrastructure.persistence import PlaylistRepository

logger = logging.getLogger(__name__)

router = APIRouter()


# Hey future me - missing playlist and "someone else's private playlist" MUST look identical to
# the caller (same 403, same message), otherwise private playlist ids could be probed.
async def _get_readable_playlist(
    repository: PlaylistRepository, playlist_id: str, user_id: str
) -> Playlist:
    playlist = await repository.get_by_id(playlist_id)
    if playlist is None or not (playlist.is_owned_by(user_id) or playlist.is_public):
        raise AuthorizationError()
    return playlist


@router.get("", response_model=list[PlaylistResponse])
async def list_my_playlists(
    user_id: str = Depends(get_current_user_id),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> list[PlaylistResponse]:
    """List the caller's playlists, newest first."""
    playlists = await repository.get_user_playlists(user_id)
    return [PlaylistResponse.from_entity(p) for p in playlists]


@router.get("/{playlist_id}/songs", response_model=list[SongResponse])
async def list_playlist_songs(
    playlist_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> list[SongResponse]:
    """List songs of an own or public playlist (may be empty)."""
    await _get_readable_playlist(repository, playlist_id, user_id)
    songs = await repository.get_playlist_songs(playlist_id)
    return [SongResponse.from_entity(s) for s in songs]


@router.get(
    "/{playlist_id}/songs/popularity",
    response_model=list[SongWithPopularityResponse],
)
async def list_playlist_songs_with_popularity(
    playlist_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: PlaylistRepository = Depends(get_playlist_repository),
    playlist_service: PlaylistService = Depends(get_playlist_service),
) -> list[SongWithPopularityResponse]:
    """List songs with live Spotify popularity (0 for non-Spotify songs)."""
    await _get_readable_playlist(repository, playlist_id, user_id)
    items = await playlist_service.get_songs_with_popularity(playlist_id)
    return [SongWithPopularityResponse.from_result(i) for i in items]


# Listen up - the store's delete_playlist does NOT check ownership. This endpoint is the guard.
@router.delete("/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_playlist(
    playlist_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> Response:
    """Delete an owned playlist and all of its songs."""
    playlist = await repository.get_by_id(playlist_id)
    if playlist is None or not playlist.is_owned_by(user_id):
        raise AuthorizationError()

    await repository.delete_playlist(playlist_id)
    logger.info(f"Deleted playlist {playlist_id}", extra={"playlist_id": playlist_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{playlist_id}/visibility", response_model=VisibilityResponse)
async def set_visibility(
    playlist_id: str,
    request: VisibilityRequest,
    user_id: str = Depends(get_current_user_id),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> VisibilityResponse:
    """Make a playlist public (assigning its share link once) or private."""
    share_token = await repository.update_visibility(
        playlist_id, user_id, request.visibility
    )
    return VisibilityResponse(
        playlist_id=playlist_id,
        visibility=request.visibility,
        share_token=share_token,
    )


@router.put("/{playlist_id}/allow-dislikes", status_code=status.HTTP_204_NO_CONTENT)
async def set_allow_dislikes(
    playlist_id: str,
    request: AllowDislikesRequest,
    user_id: str = Depends(get_current_user_id),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> Response:
    """Enable or disable dislikes on an owned playlist."""
    await repository.update_dislike_setting(playlist_id, user_id, request.allow_dislikes)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Yo, cloning deliberately ignores visibility and ownership: whoever has the id (e.g. from a share
# link) may copy it. The copy starts private with fresh counters and no export state.
@router.post(
    "/{playlist_id}/clone",
    response_model=ClonePlaylistResponse,
    status_code=status.HTTP_201_CREATED,
)
async def clone_playlist(
    playlist_id: str,
    request: ClonePlaylistRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> ClonePlaylistResponse:
    """Copy a playlist and its songs into the caller's library."""
    name = request.name if request and request.name else None
    if name is None:
        source = await repository.get_by_id(playlist_id)
        if source is None:
            raise EntityNotFoundException("Playlist", playlist_id)
        name = f"{source.name} (Copy)"

    new_id = await repository.clone_playlist(playlist_id, user_id, name)
    return ClonePlaylistResponse(playlist_id=new_id)
