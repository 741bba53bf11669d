"""SQLAlchemy ORM models for Upbeat."""

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! UTC datetimes come back "naive". Use this
# before comparing a DB datetime with datetime.now(UTC), or you get the "can't compare offset-naive
# and offset-aware datetimes" TypeError.
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Yo, users is owned by the auth layer, not by us! We only keep id + display name so public
# listings can show "by <name>" and the community search can match owner names. Playlists do NOT
# carry a foreign key to it: a caller may own playlists before we ever saw their display name.
class UserModel(Base):
    """Minimal user record (display name only)."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )


# Listen up, PlaylistModel is the heart of the store. Invariants enforced by PlaylistRepository:
# - share_token: NULL until first made public, then set ONCE and never regenerated (unique index,
#   so no two playlists ever share one)
# - exported_at / external_playlist_id / external_playlist_url: written together in one UPDATE
# - views / likes / dislikes: only incremented
class PlaylistModel(Base):
    """SQLAlchemy model for Playlist entity."""

    __tablename__ = "playlists"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 'spotify' or 'itunes' (Provider enum values)
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    # 'private' or 'public' (Visibility enum values)
    visibility: Mapped[str] = mapped_column(
        String(20), nullable=False, default="private", index=True
    )
    share_token: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    allow_dislikes: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    genre: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mood: Mapped[str | None] = mapped_column(String(100), nullable=True)
    exported_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    external_playlist_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    external_playlist_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )

    songs: Mapped[list["SongModel"]] = relationship(
        "SongModel",
        back_populates="playlist",
        passive_deletes=True,
        order_by="SongModel.position",
    )

    __table_args__ = (Index("ix_playlists_views_likes", "views", "likes"),)


class SongModel(Base):
    """SQLAlchemy model for Song entity."""

    __tablename__ = "songs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    playlist_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("playlists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Insertion order inside the playlist (recommendation order)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    artist: Mapped[str] = mapped_column(String(500), nullable=False)
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    preview_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    album_art_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )

    playlist: Mapped["PlaylistModel"] = relationship(
        "PlaylistModel", back_populates="songs"
    )


# Hey future me - one row per user (user_id is UNIQUE). Tokens are stored in plain text, same as
# the access token would sit in a session cookie. Deleting the row = disconnecting the account.
class SpotifyCredentialModel(Base):
    """Linked Spotify account tokens for playlist export."""

    __tablename__ = "spotify_credentials"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )
