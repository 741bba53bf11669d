"""Persistence layer: ORM models, session management and repositories."""

from upbeat.infrastructure.persistence.database import Database
from upbeat.infrastructure.persistence.models import (
    Base,
    PlaylistModel,
    SongModel,
    SpotifyCredentialModel,
    UserModel,
)
from upbeat.infrastructure.persistence.repositories import (
    PlaylistRepository,
    SpotifyCredentialRepository,
    UserRepository,
)

__all__ = [
    "Base",
    "Database",
    "PlaylistModel",
    "PlaylistRepository",
    "SongModel",
    "SpotifyCredentialModel",
    "SpotifyCredentialRepository",
    "UserModel",
    "UserRepository",
]
