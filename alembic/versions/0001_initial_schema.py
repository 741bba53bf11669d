"""initial schema: users, playlists, songs, spotify_credentials

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

Hey future me - this is the whole schema in one go:

- users: id + display name only (identity itself lives in the auth gateway)
- playlists: share_token has a UNIQUE index (token lookup + global uniqueness),
  owner_id/visibility are indexed for "my playlists" and community listings
- songs: playlist_id indexed, FK with ON DELETE CASCADE as a backstop for
  the explicit songs-then-playlist delete in the repository
- spotify_credentials: one row per user (UNIQUE user_id)

Idempotent: tables that already exist (e.g. created by auto_create_tables on
a dev box) are skipped.
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all tables (skips tables that already exist)."""
    conn = op.get_bind()
    existing = set(sa.inspect(conn).get_table_names())

    if "users" not in existing:
        op.create_table(
            "users",
            sa.Column("id", sa.String(64), primary_key=True),
            sa.Column("name", sa.String(255), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )

    if "playlists" not in existing:
        op.create_table(
            "playlists",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("owner_id", sa.String(64), nullable=False),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("provider", sa.String(20), nullable=False),
            sa.Column(
                "visibility", sa.String(20), nullable=False, server_default="private"
            ),
            sa.Column("share_token", sa.String(64), nullable=True),
            sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("dislikes", sa.Integer(), nullable=False, server_default="0"),
            sa.Column(
                "allow_dislikes",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            ),
            sa.Column("genre", sa.String(100), nullable=True),
            sa.Column("mood", sa.String(100), nullable=True),
            sa.Column("exported_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("external_playlist_id", sa.String(255), nullable=True),
            sa.Column("external_playlist_url", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_playlists_owner_id", "playlists", ["owner_id"])
        op.create_index("ix_playlists_visibility", "playlists", ["visibility"])
        op.create_index(
            "ix_playlists_share_token", "playlists", ["share_token"], unique=True
        )
        op.create_index("ix_playlists_views_likes", "playlists", ["views", "likes"])

    if "songs" not in existing:
        op.create_table(
            "songs",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column(
                "playlist_id",
                sa.String(36),
                sa.ForeignKey("playlists.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("title", sa.String(500), nullable=False),
            sa.Column("artist", sa.String(500), nullable=False),
            sa.Column("provider", sa.String(20), nullable=False),
            sa.Column("external_id", sa.String(255), nullable=True),
            sa.Column("preview_url", sa.Text(), nullable=True),
            sa.Column("album_art_url", sa.Text(), nullable=True),
            sa.Column(
                "is_generated", sa.Boolean(), nullable=False, server_default=sa.false()
            ),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_songs_playlist_id", "songs", ["playlist_id"])

    if "spotify_credentials" not in existing:
        op.create_table(
            "spotify_credentials",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("user_id", sa.String(64), nullable=False),
            sa.Column("access_token", sa.Text(), nullable=False),
            sa.Column("refresh_token", sa.Text(), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index(
            "ix_spotify_credentials_user_id",
            "spotify_credentials",
            ["user_id"],
            unique=True,
        )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("spotify_credentials")
    op.drop_index("ix_songs_playlist_id", table_name="songs")
    op.drop_table("songs")
    op.drop_index("ix_playlists_views_likes", table_name="playlists")
    op.drop_index("ix_playlists_share_token", table_name="playlists")
    op.drop_index("ix_playlists_visibility", table_name="playlists")
    op.drop_index("ix_playlists_owner_id", table_name="playlists")
    op.drop_table("playlists")
    op.drop_table("users")
