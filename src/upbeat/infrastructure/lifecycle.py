"""Application lifecycle management for startup and shutdown tasks."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from upbeat.config import Settings, get_settings
from upbeat.domain.exceptions import ConfigurationError
from upbeat.infrastructure.integrations import ITunesClient, SpotifyClient
from upbeat.infrastructure.observability import configure_logging
from upbeat.infrastructure.persistence import Database
from upbeat.infrastructure.providers import (
    ITunesTrackProvider,
    SpotifyTrackProvider,
    TrackProviderRegistry,
)

logger = logging.getLogger(__name__)


# Hey future me, this makes sure the SQLite file's directory exists and is writable BEFORE the
# engine is created. SQLite also needs to create -journal/-wal files next to the .db, so we probe
# with a real write. Fails startup with a clear ConfigurationError instead of a cryptic
# "unable to open database file" on the first request. No-op for PostgreSQL and :memory:.
def _validate_sqlite_path(settings: Settings) -> None:
    """Validate SQLite database path accessibility before engine creation."""
    db_path = settings._get_sqlite_db_path()
    if db_path is None:
        return

    try:
        if db_path.parent and str(db_path.parent) != ".":
            db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update DATABASE__URL or adjust directory permissions."
        ) from exc

    try:
        test_file = db_path.parent / f".{db_path.stem}_write_test"
        test_file.write_bytes(b"test")
        test_file.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to write files in database directory '{db_path.parent}': {exc}. "
            "SQLite requires write permissions to create database and journal files."
        ) from exc


def build_provider_registry(
    spotify_client: SpotifyClient, itunes_client: ITunesClient
) -> TrackProviderRegistry:
    """Register one adapter per provider."""
    registry = TrackProviderRegistry()
    registry.register(SpotifyTrackProvider(spotify_client))
    registry.register(ITunesTrackProvider(itunes_client))
    return registry


# Listen future me, everything before `yield` is STARTUP, everything after is SHUTDOWN. Shared
# resources live on app.state: the Database, one SpotifyClient and one ITunesClient (each owns a
# pooled httpx client) and the provider registry. Missing Spotify credentials do NOT stop startup,
# only Spotify operations fail later with ConfigurationError.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    _validate_sqlite_path(settings)

    db = Database(settings)
    app.state.db = db
    if settings.database.auto_create_tables:
        await db.create_tables()
    logger.info("Database initialized: %s", settings.database.url)

    spotify_client = SpotifyClient(settings.spotify)
    itunes_client = ITunesClient(settings.itunes)
    app.state.spotify_client = spotify_client
    app.state.itunes_client = itunes_client
    app.state.provider_registry = build_provider_registry(spotify_client, itunes_client)

    if not settings.spotify.is_configured:
        logger.warning(
            "Spotify client credentials not configured - Spotify search, "
            "generation and export are unavailable"
        )

    try:
        yield
    finally:
        logger.info("Shutting down application")
        await spotify_client.close()
        await itunes_client.close()
        await db.close()
