"""Application services."""

from upbeat.application.services.playlist_generation_service import (
    GeneratedPlaylist,
    PlaylistGenerationService,
)
from upbeat.application.services.playlist_service import PlaylistService
from upbeat.application.services.recommendation_service import RecommendationService
from upbeat.application.services.spotify_auth_service import (
    AuthorizationStateStore,
    SpotifyAuthService,
    get_authorization_state_store,
)
from upbeat.application.services.spotify_export_service import SpotifyExportService
from upbeat.application.services.track_search_service import TrackSearchService

__all__ = [
    "AuthorizationStateStore",
    "GeneratedPlaylist",
    "PlaylistGenerationService",
    "PlaylistService",
    "RecommendationService",
    "SpotifyAuthService",
    "SpotifyExportService",
    "TrackSearchService",
    "get_authorization_state_store",
]
