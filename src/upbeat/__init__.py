"""Upbeat - playlist discovery from Spotify and iTunes seed tracks."""

__version__ = "0.1.0"
