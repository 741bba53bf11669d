"""Application settings loaded from environment variables and .env."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///./data/upbeat.db"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600
    pool_pre_ping: bool = True
    # Create missing tables at startup (Alembic stays the source of truth for upgrades)
    auto_create_tables: bool = True


# Hey future me - client_id/client_secret default to EMPTY on purpose! A missing Spotify app
# must not stop the server from booting: iTunes search/generation keeps working and only the
# Spotify operations raise ConfigurationError on first use (see ClientCredentialsCache).
class SpotifySettings(BaseModel):
    """Spotify app credentials and OAuth settings."""

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://localhost:8000/api/spotify/callback"
    # Client-credentials token is treated as expired this many seconds early
    token_refresh_margin_seconds: int = 60
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        """Check whether both client credentials are set."""
        return bool(self.client_id.strip() and self.client_secret.strip())


class ITunesSettings(BaseModel):
    """iTunes Search API settings (public, no credentials)."""

    base_url: str = "https://itunes.apple.com"
    timeout: float = 15.0


class DiscoverySettings(BaseModel):
    """Default page sizes for community listings."""

    public_limit: int = 50
    trending_limit: int = 20
    max_limit: int = 100


class ObservabilitySettings(BaseModel):
    """Logging output settings."""

    log_json_format: bool = False


class ApiSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"  # nosec B104 - container deployment
    port: int = 8000


class Settings(BaseSettings):
    """Root settings object.

    Nested sections are read with a double underscore delimiter, e.g.
    ``SPOTIFY__CLIENT_ID`` or ``DATABASE__URL``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "Upbeat"
    app_env: str = "development"
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    itunes: ITunesSettings = Field(default_factory=ITunesSettings)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

    def _get_sqlite_db_path(self) -> Path | None:
        """Return the SQLite file path, or None for in-memory/non-SQLite URLs."""
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, path = url.partition(":///")
        if not path or path == ":memory:":
            return None
        return Path(path)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
