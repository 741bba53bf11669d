"""External integration client implementations."""

from upbeat.infrastructure.integrations.itunes_client import ITunesClient
from upbeat.infrastructure.integrations.spotify_client import (
    ClientCredentialsCache,
    SpotifyClient,
    get_app_token_cache,
)

__all__ = [
    "ClientCredentialsCache",
    "ITunesClient",
    "SpotifyClient",
    "get_app_token_cache",
]
