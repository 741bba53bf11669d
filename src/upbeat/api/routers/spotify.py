"""Spotify account connection and export endpoints."""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse, Response

from upbeat.api.dependencies import (
    get_current_user_id,
    get_spotify_auth_service,
    get_spotify_export_service,
)
from upbeat.api.schemas.spotify import (
    AuthorizationUrlResponse,
    ConnectionStatusResponse,
    ExportResponse,
)
from upbeat.application.services import SpotifyAuthService, SpotifyExportService
from upbeat.domain.exceptions import DomainException

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/export/{playlist_id}", response_model=ExportResponse)
async def export_to_spotify(
    playlist_id: str,
    user_id: str = Depends(get_current_user_id),
    export_service: SpotifyExportService = Depends(get_spotify_export_service),
) -> ExportResponse:
    """Create the playlist in the caller's Spotify account.

    Only Spotify-origin songs are exported; compare tracks_exported with
    total_tracks to show "N of M tracks exported".
    """
    result = await export_service.export(playlist_id, user_id)
    return ExportResponse.from_result(result)


@router.get("/status", response_model=ConnectionStatusResponse)
async def get_connection_status(
    user_id: str = Depends(get_current_user_id),
    auth_service: SpotifyAuthService = Depends(get_spotify_auth_service),
) -> ConnectionStatusResponse:
    """Check whether the caller linked a Spotify account."""
    return ConnectionStatusResponse(connected=await auth_service.is_connected(user_id))


@router.delete("/connection", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(
    user_id: str = Depends(get_current_user_id),
    auth_service: SpotifyAuthService = Depends(get_spotify_auth_service),
) -> Response:
    """Forget the caller's Spotify tokens."""
    await auth_service.disconnect(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/authorize", response_model=AuthorizationUrlResponse)
async def get_authorization_url(
    user_id: str = Depends(get_current_user_id),
    auth_service: SpotifyAuthService = Depends(get_spotify_auth_service),
) -> AuthorizationUrlResponse:
    """Get the Spotify consent URL to connect the caller's account."""
    return AuthorizationUrlResponse(url=auth_service.build_authorization_url(user_id))


# Hey future me, this is hit by the user's BROWSER coming back from Spotify, so it answers with
# redirects into the app (never JSON errors). The user comes from the state, not from headers.
@router.get("/callback")
async def oauth_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    error: str | None = Query(default=None),
    auth_service: SpotifyAuthService = Depends(get_spotify_auth_service),
) -> RedirectResponse:
    """Finish connecting a Spotify account and redirect back to the app."""
    if error:
        logger.info(f"Spotify authorization denied: {error}")
        return RedirectResponse("/?error=spotify_auth_denied", status_code=302)
    if not code or not state:
        return RedirectResponse("/?error=invalid_code", status_code=302)

    try:
        await auth_service.complete_authorization(state, code)
    except DomainException as e:
        logger.warning(f"Spotify OAuth callback failed: {e.message}")
        return RedirectResponse("/?error=spotify_auth_failed", status_code=302)

    return RedirectResponse("/?spotify_connected=true", status_code=302)
