"""Tests for application settings."""

from pathlib import Path

import pytest

from upbeat.config import Settings
from upbeat.config.settings import DatabaseSettings, SpotifySettings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SPOTIFY__CLIENT_ID", raising=False)
        monkeypatch.delenv("SPOTIFY__CLIENT_SECRET", raising=False)

        settings = Settings(_env_file=None)

        assert settings.app_name == "Upbeat"
        assert settings.database.url.startswith("sqlite+aiosqlite")
        assert settings.spotify.token_refresh_margin_seconds == 60
        assert settings.itunes.base_url == "https://itunes.apple.com"
        assert not settings.spotify.is_configured

    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPOTIFY__CLIENT_ID", "abc")
        monkeypatch.setenv("SPOTIFY__CLIENT_SECRET", "def")
        monkeypatch.setenv("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
        monkeypatch.setenv("DISCOVERY__MAX_LIMIT", "10")

        settings = Settings(_env_file=None)

        assert settings.spotify.is_configured
        assert settings.database.url == "sqlite+aiosqlite:///:memory:"
        assert settings.discovery.max_limit == 10

    def test_blank_credentials_are_not_configured(self) -> None:
        assert not SpotifySettings(client_id="  ", client_secret="x").is_configured


class TestSqlitePath:
    def test_file_database(self) -> None:
        settings = Settings(
            _env_file=None,
            database=DatabaseSettings(url="sqlite+aiosqlite:///./data/upbeat.db"),
        )
        assert settings._get_sqlite_db_path() == Path("./data/upbeat.db")

    @pytest.mark.parametrize(
        "url",
        [
            "sqlite+aiosqlite:///:memory:",
            "postgresql+asyncpg://user:pw@localhost/upbeat",
        ],
    )
    def test_no_file_path(self, url: str) -> None:
        settings = Settings(_env_file=None, database=DatabaseSettings(url=url))
        assert settings._get_sqlite_db_path() is None
