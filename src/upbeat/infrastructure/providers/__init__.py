"""Track provider adapters.

Each adapter wraps one catalog client and owns the strict mapping from that
provider's raw JSON into TrackDTO:
    - SpotifyTrackProvider → native /recommendations with upbeat targets
    - ITunesTrackProvider → fan-out genre/artist search
    - TrackProviderRegistry → Provider → adapter lookup
"""

from upbeat.infrastructure.providers.itunes_provider import ITunesTrackProvider
from upbeat.infrastructure.providers.registry import TrackProviderRegistry
from upbeat.infrastructure.providers.spotify_provider import SpotifyTrackProvider

__all__ = [
    "ITunesTrackProvider",
    "SpotifyTrackProvider",
    "TrackProviderRegistry",
]
