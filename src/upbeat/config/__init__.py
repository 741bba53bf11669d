"""Configuration module for Upbeat."""

from .settings import (
    ApiSettings,
    DatabaseSettings,
    DiscoverySettings,
    ITunesSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "DatabaseSettings",
    "DiscoverySettings",
    "ITunesSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "get_settings",
]
