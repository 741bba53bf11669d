"""API router initialization.

Collects all sub-routers; main.py mounts api_router under /api, so endpoints
become /api/music/..., /api/playlists/..., /api/spotify/... and so on.
"""

from fastapi import APIRouter

from upbeat.api.routers import discovery, music, playlists, share, spotify

api_router = APIRouter()

api_router.include_router(music.router, prefix="/music", tags=["Music"])
api_router.include_router(playlists.router, prefix="/playlists", tags=["Playlists"])
api_router.include_router(discovery.router, prefix="/discover", tags=["Discovery"])
api_router.include_router(share.router, prefix="/share", tags=["Sharing"])
api_router.include_router(spotify.router, prefix="/spotify", tags=["Spotify"])

__all__ = ["api_router"]
