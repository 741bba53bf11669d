"""Repository implementations for domain entities."""

import logging
import secrets
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import Select, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from upbeat.domain.dtos import TrackDTO
from upbeat.domain.entities import (
    Playlist,
    PlaylistFilter,
    Provider,
    Song,
    SpotifyCredential,
    Visibility,
)
from upbeat.domain.exceptions import AuthorizationError, EntityNotFoundException
from upbeat.domain.ports import IPlaylistRepository, ISpotifyCredentialRepository

from .models import (
    PlaylistModel,
    SongModel,
    SpotifyCredentialModel,
    UserModel,
    ensure_utc_aware,
)

logger = logging.getLogger(__name__)

# secrets.token_urlsafe(24) -> 32 URL-safe characters (24 bytes of entropy)
SHARE_TOKEN_BYTES = 24


def generate_share_token() -> str:
    """Generate an unguessable 32-character share token."""
    return secrets.token_urlsafe(SHARE_TOKEN_BYTES)


def _to_playlist(model: PlaylistModel, owner_name: str | None = None) -> Playlist:
    return Playlist(
        id=model.id,
        owner_id=model.owner_id,
        name=model.name,
        provider=Provider(model.provider),
        created_at=ensure_utc_aware(model.created_at),
        visibility=Visibility(model.visibility),
        share_token=model.share_token,
        views=model.views,
        likes=model.likes,
        dislikes=model.dislikes,
        allow_dislikes=model.allow_dislikes,
        genre=model.genre,
        mood=model.mood,
        exported_at=ensure_utc_aware(model.exported_at) if model.exported_at else None,
        external_playlist_id=model.external_playlist_id,
        external_playlist_url=model.external_playlist_url,
        owner_name=owner_name,
    )


def _to_song(model: SongModel) -> Song:
    return Song(
        id=model.id,
        playlist_id=model.playlist_id,
        title=model.title,
        artist=model.artist,
        provider=Provider(model.provider),
        external_id=model.external_id,
        preview_url=model.preview_url,
        album_art_url=model.album_art_url,
        is_generated=model.is_generated,
        created_at=ensure_utc_aware(model.created_at),
    )


# Hey future me, this is THE Playlist Persistence Store. It only flushes - committing is the job of
# whoever owns the session (session_scope / get_db_session, or PlaylistGenerationService which
# commits BETWEEN create_playlist and add_songs on purpose). Ownership rules:
# - update_visibility / update_dislike_setting check the caller themselves (AuthorizationError)
# - delete_playlist does NOT check anything, callers must verify ownership first!
# - clone_playlist does NOT check visibility or ownership, cloning is a public action
class PlaylistRepository(IPlaylistRepository):
    """SQLAlchemy implementation of the playlist store."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    def _with_owner_name(self) -> Select[tuple[PlaylistModel, str | None]]:
        return select(PlaylistModel, UserModel.name).outerjoin(
            UserModel, UserModel.id == PlaylistModel.owner_id
        )

    async def _get_model(self, playlist_id: str) -> PlaylistModel | None:
        stmt = select(PlaylistModel).where(PlaylistModel.id == playlist_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_playlist(
        self,
        owner_id: str,
        name: str,
        provider: Provider,
        genre: str | None = None,
        mood: str | None = None,
    ) -> str:
        """Insert a private playlist with zero counters."""
        model = PlaylistModel(
            owner_id=owner_id,
            name=name,
            provider=provider.value,
            visibility=Visibility.PRIVATE.value,
            views=0,
            likes=0,
            dislikes=0,
            allow_dislikes=False,
            genre=genre,
            mood=mood,
        )
        self.session.add(model)
        await self.session.flush()
        return model.id

    async def add_songs(self, playlist_id: str, tracks: Sequence[TrackDTO]) -> int:
        """Bulk insert generated songs, keeping the given order."""
        for position, track in enumerate(tracks):
            self.session.add(
                SongModel(
                    playlist_id=playlist_id,
                    position=position,
                    title=track.title,
                    artist=track.artist,
                    provider=track.provider.value,
                    external_id=track.external_id,
                    preview_url=track.preview_url,
                    album_art_url=track.album_art_url,
                    is_generated=True,
                )
            )
        await self.session.flush()
        return len(tracks)

    async def get_by_id(self, playlist_id: str) -> Playlist | None:
        """Get a playlist by id (with owner name)."""
        stmt = self._with_owner_name().where(PlaylistModel.id == playlist_id)
        row = (await self.session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return _to_playlist(row[0], row[1])

    async def get_user_playlists(self, owner_id: str) -> list[Playlist]:
        """List a user's playlists, newest first."""
        stmt = (
            self._with_owner_name()
            .where(PlaylistModel.owner_id == owner_id)
            .order_by(PlaylistModel.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [_to_playlist(model, name) for model, name in result.all()]

    async def get_playlist_songs(self, playlist_id: str) -> list[Song]:
        """List songs of a playlist in insertion order."""
        stmt = (
            select(SongModel)
            .where(SongModel.playlist_id == playlist_id)
            .order_by(SongModel.position, SongModel.created_at)
        )
        result = await self.session.execute(stmt)
        return [_to_song(model) for model in result.scalars().all()]

    async def delete_playlist(self, playlist_id: str) -> None:
        """Delete a playlist's songs, then the playlist itself.

        Raises:
            EntityNotFoundException: If the playlist does not exist
        """
        await self.session.execute(
            delete(SongModel).where(SongModel.playlist_id == playlist_id)
        )
        result = await self.session.execute(
            delete(PlaylistModel).where(PlaylistModel.id == playlist_id)
        )
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise EntityNotFoundException("Playlist", playlist_id)

    # Listen up - a playlist keeps its share token FOREVER once it has one. Going private doesn't
    # clear it, so going public again brings back the same link (and an old link keeps resolving
    # via get_by_share_token). That's the intended behavior, don't "fix" it here.
    async def update_visibility(
        self, playlist_id: str, caller_id: str, visibility: Visibility
    ) -> str | None:
        """Change visibility of an owned playlist.

        Returns:
            The share token (None if the playlist was never public)

        Raises:
            AuthorizationError: If the playlist is missing or not owned by caller_id
        """
        model = await self._get_model(playlist_id)
        if model is None or model.owner_id != caller_id:
            raise AuthorizationError()

        if visibility == Visibility.PUBLIC and model.share_token is None:
            # Two first publishes can race. Only the one that still sees NULL in the
            # database writes, the other picks up the stored token on refresh below.
            result = await self.session.execute(
                update(PlaylistModel)
                .where(
                    PlaylistModel.id == playlist_id,
                    PlaylistModel.share_token.is_(None),
                )
                .values(share_token=generate_share_token())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:  # type: ignore[attr-defined]
                logger.debug(f"Assigned share token to playlist {playlist_id}")

        model.visibility = visibility.value
        await self.session.flush()
        await self.session.refresh(model)
        return model.share_token

    async def update_dislike_setting(
        self, playlist_id: str, caller_id: str, allow: bool
    ) -> None:
        """Enable or disable dislikes on an owned playlist.

        Raises:
            AuthorizationError: If the playlist is missing or not owned by caller_id
        """
        model = await self._get_model(playlist_id)
        if model is None or model.owner_id != caller_id:
            raise AuthorizationError()

        model.allow_dislikes = allow
        await self.session.flush()

    async def get_public_playlists(self, limit: int = 50) -> list[Playlist]:
        """List public playlists, newest first."""
        stmt = (
            self._with_owner_name()
            .where(PlaylistModel.visibility == Visibility.PUBLIC.value)
            .order_by(PlaylistModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_to_playlist(model, name) for model, name in result.all()]

    # Hey future me - the filters run IN MEMORY over the top-`limit` public playlists by views.
    # So `limit` caps the candidates BEFORE filtering: you can get fewer than `limit` results even
    # though more matching playlists exist further down. Known limitation, callers rely on the
    # "top N by views, then filtered" semantics - don't push the WHERE into SQL without telling them.
    async def get_filtered_playlists(self, filters: PlaylistFilter) -> list[Playlist]:
        """List public playlists matching genre, mood and search."""
        stmt = (
            self._with_owner_name()
            .where(PlaylistModel.visibility == Visibility.PUBLIC.value)
            .order_by(PlaylistModel.views.desc())
            .limit(filters.limit)
        )
        result = await self.session.execute(stmt)
        candidates = [_to_playlist(model, name) for model, name in result.all()]

        genre = filters.genre.lower() if filters.genre else None
        mood = filters.mood.lower() if filters.mood else None
        search = filters.search.lower() if filters.search else None

        matches: list[Playlist] = []
        for playlist in candidates:
            if genre and (playlist.genre or "").lower() != genre:
                continue
            if mood and (playlist.mood or "").lower() != mood:
                continue
            if search and not (
                search in playlist.name.lower()
                or search in (playlist.owner_name or "").lower()
            ):
                continue
            matches.append(playlist)
        return matches

    async def get_trending_playlists(self, limit: int = 20) -> list[Playlist]:
        """List public playlists by views, then likes."""
        stmt = (
            self._with_owner_name()
            .where(PlaylistModel.visibility == Visibility.PUBLIC.value)
            .order_by(PlaylistModel.views.desc(), PlaylistModel.likes.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_to_playlist(model, name) for model, name in result.all()]

    # Yo, the view counter is bumped with a single UPDATE ... SET views = views + 1 so concurrent
    # viewers never lose increments. Every resolve counts, repeat viewers included. Visibility is NOT
    # checked: anyone holding the token may view.
    async def get_by_share_token(self, share_token: str) -> Playlist | None:
        """Resolve a share token and count one view.

        Returns:
            The playlist with its incremented view count, or None for unknown tokens
        """
        result = await self.session.execute(
            update(PlaylistModel)
            .where(PlaylistModel.share_token == share_token)
            .values(views=PlaylistModel.views + 1)
        )
        if result.rowcount == 0:  # type: ignore[attr-defined]
            return None

        stmt = (
            self._with_owner_name()
            .where(PlaylistModel.share_token == share_token)
            .execution_options(populate_existing=True)
        )
        row = (await self.session.execute(stmt)).one()
        return _to_playlist(row[0], row[1])

    async def clone_playlist(
        self, source_playlist_id: str, new_owner_id: str, new_name: str
    ) -> str:
        """Copy a playlist and its songs to a new owner.

        Copies provider, genre and mood only; the clone starts private with zero
        counters and no export state. Copied songs have is_generated=False.

        Raises:
            EntityNotFoundException: If the source playlist does not exist
        """
        source = await self._get_model(source_playlist_id)
        if source is None:
            raise EntityNotFoundException("Playlist", source_playlist_id)

        new_id = await self.create_playlist(
            owner_id=new_owner_id,
            name=new_name,
            provider=Provider(source.provider),
            genre=source.genre,
            mood=source.mood,
        )

        stmt = (
            select(SongModel)
            .where(SongModel.playlist_id == source_playlist_id)
            .order_by(SongModel.position, SongModel.created_at)
        )
        songs = (await self.session.execute(stmt)).scalars().all()
        for position, song in enumerate(songs):
            self.session.add(
                SongModel(
                    playlist_id=new_id,
                    position=position,
                    title=song.title,
                    artist=song.artist,
                    provider=song.provider,
                    external_id=song.external_id,
                    preview_url=song.preview_url,
                    album_art_url=song.album_art_url,
                    is_generated=False,
                )
            )
        await self.session.flush()
        return new_id

    async def record_export(
        self,
        playlist_id: str,
        exported_at: datetime,
        external_playlist_id: str,
        external_playlist_url: str,
    ) -> None:
        """Store export provenance (all three fields in one UPDATE)."""
        await self.session.execute(
            update(PlaylistModel)
            .where(PlaylistModel.id == playlist_id)
            .values(
                exported_at=exported_at,
                external_playlist_id=external_playlist_id,
                external_playlist_url=external_playlist_url,
            )
        )


class SpotifyCredentialRepository(ISpotifyCredentialRepository):
    """Repository for users' linked Spotify account tokens."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def _get_model(self, user_id: str) -> SpotifyCredentialModel | None:
        stmt = select(SpotifyCredentialModel).where(
            SpotifyCredentialModel.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, user_id: str) -> SpotifyCredential | None:
        """Get the credential of a user (None if never connected)."""
        model = await self._get_model(user_id)
        if model is None:
            return None
        return SpotifyCredential(
            user_id=model.user_id,
            access_token=model.access_token,
            refresh_token=model.refresh_token,
            expires_at=ensure_utc_aware(model.expires_at),
        )

    # Listen up - UPSERT pattern: connect and refresh both land here.
    async def upsert(self, credential: SpotifyCredential) -> None:
        """Insert or replace the credential of a user."""
        model = await self._get_model(credential.user_id)
        if model:
            model.access_token = credential.access_token
            model.refresh_token = credential.refresh_token
            model.expires_at = credential.expires_at
            model.updated_at = datetime.now(UTC)
        else:
            self.session.add(
                SpotifyCredentialModel(
                    user_id=credential.user_id,
                    access_token=credential.access_token,
                    refresh_token=credential.refresh_token,
                    expires_at=credential.expires_at,
                )
            )
        await self.session.flush()

    async def delete(self, user_id: str) -> bool:
        """Remove the credential of a user.

        Returns:
            True if a credential was deleted
        """
        result = await self.session.execute(
            delete(SpotifyCredentialModel).where(
                SpotifyCredentialModel.user_id == user_id
            )
        )
        return bool(result.rowcount)  # type: ignore[attr-defined]


class UserRepository:
    """Repository for the minimal user records (display names)."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def upsert_name(self, user_id: str, name: str) -> None:
        """Create the user or update their display name."""
        model = await self.session.get(UserModel, user_id)
        if model is None:
            self.session.add(UserModel(id=user_id, name=name))
        elif model.name != name:
            model.name = name
        await self.session.flush()
