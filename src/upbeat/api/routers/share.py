"""Share link endpoint (no login needed)."""

from fastapi import APIRouter, Depends

from upbeat.api.dependencies import get_playlist_repository
from upbeat.api.schemas.playlists import (
    PublicPlaylistResponse,
    SharedPlaylistResponse,
    SongResponse,
)
from upbeat.domain.exceptions import EntityNotFoundException
from upbeat.infrastructure.persistence import PlaylistRepository

router = APIRouter()


# Hey future me - every hit counts as a view (no per-viewer dedup), and the token keeps working
# after the owner makes the playlist private again. Both are intended.
@router.get("/{share_token}", response_model=SharedPlaylistResponse)
async def get_shared_playlist(
    share_token: str,
    repository: PlaylistRepository = Depends(get_playlist_repository),
) -> SharedPlaylistResponse:
    """Resolve a share link to its playlist and songs, counting one view."""
    playlist = await repository.get_by_share_token(share_token)
    if playlist is None:
        raise EntityNotFoundException("Shared playlist", share_token)

    songs = await repository.get_playlist_songs(playlist.id)
    return SharedPlaylistResponse(
        playlist=PublicPlaylistResponse.from_entity(playlist),
        songs=[SongResponse.from_entity(s) for s in songs],
    )
