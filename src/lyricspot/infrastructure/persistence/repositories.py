"""SQLAlchemy repository implementations."""

import logging
from dataclasses import fields

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from lyricspot.domain.entities import ArtistAvatar, LibraryItem, utc_now
from lyricspot.domain.exceptions import PersistenceError
from lyricspot.domain.ports import IArtistAvatarRepository, ILibraryItemRepository, ItemMutator
from lyricspot.infrastructure.persistence.database import Database
from lyricspot.infrastructure.persistence.models import (
    ArtistAvatarModel,
    LibraryItemModel,
    ensure_utc_aware,
)

logger = logging.getLogger(__name__)

_ITEM_FIELDS = tuple(f.name for f in fields(LibraryItem))
_ITEM_TIMESTAMPS = (
    "last_enriched_at",
    "last_metadata_attempt_at",
    "last_lyrics_fetched_at",
    "last_lyrics_attempt_at",
)


def _item_from_model(model: LibraryItemModel) -> LibraryItem:
    item = LibraryItem(**{name: getattr(model, name) for name in _ITEM_FIELDS})
    for name in _ITEM_TIMESTAMPS:
        setattr(item, name, ensure_utc_aware(getattr(item, name)))
    return item


def _copy_item_to_model(item: LibraryItem, model: LibraryItemModel) -> None:
    for name in _ITEM_FIELDS:
        if name == "id":
            continue
        setattr(model, name, getattr(item, name))


def _avatar_from_model(model: ArtistAvatarModel) -> ArtistAvatar:
    return ArtistAvatar(
        artist_key=model.artist_key,
        artist_name=model.artist_name,
        image_data=model.image_data,
        source=model.source,
        is_locked=model.is_locked,
        source_id=model.source_id,
        updated_at=ensure_utc_aware(model.updated_at) or utc_now(),
    )


class LibraryItemRepository(ILibraryItemRepository):
    """SQLAlchemy implementation of the LibraryItem repository.

    Hey future me - unlike a request-scoped repo, this one is long-lived (engines run in the
    background), so every call opens its OWN transaction via Database.session_scope().
    update() loads, mutates and commits inside ONE transaction - that's the "atomic from the
    engine's perspective" guarantee. Any SQLAlchemy error is wrapped in PersistenceError so
    the engines only have to know about domain exceptions.
    """

    def __init__(self, db: Database) -> None:
        """Initialize repository with database."""
        self._db = db

    async def add(self, item: LibraryItem) -> None:
        """Add a new library item."""
        try:
            async with self._db.session_scope() as session:
                model = LibraryItemModel(id=item.id)
                _copy_item_to_model(item, model)
                session.add(model)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not add library item {item.id}: {e}") from e

    async def get_by_id(self, item_id: str) -> LibraryItem | None:
        """Get a library item by ID."""
        try:
            async with self._db.session_scope() as session:
                model = await session.get(LibraryItemModel, item_id)
                return _item_from_model(model) if model else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load library item {item_id}: {e}") from e

    async def update(self, item_id: str, mutator: ItemMutator) -> LibraryItem | None:
        """Apply a field mutation atomically."""
        try:
            async with self._db.session_scope() as session:
                stmt = select(LibraryItemModel).where(LibraryItemModel.id == item_id)
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
                if model is None:
                    return None
                item = _item_from_model(model)
                mutator(item)
                _copy_item_to_model(item, model)
                return item
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not update library item {item_id}: {e}") from e

    async def list_ids(self, limit: int = 1000, offset: int = 0) -> list[str]:
        """List item IDs in insertion order."""
        try:
            async with self._db.session_scope() as session:
                stmt = (
                    select(LibraryItemModel.id)
                    .order_by(LibraryItemModel.created_at, LibraryItemModel.id)
                    .limit(limit)
                    .offset(offset)
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not list library items: {e}") from e


class ArtistAvatarRepository(IArtistAvatarRepository):
    """SQLAlchemy implementation of the ArtistAvatar repository."""

    def __init__(self, db: Database) -> None:
        """Initialize repository with database."""
        self._db = db

    async def get_by_key(self, artist_key: str) -> ArtistAvatar | None:
        """Get an avatar by its normalized key."""
        try:
            async with self._db.session_scope() as session:
                model = await session.get(ArtistAvatarModel, artist_key)
                return _avatar_from_model(model) if model else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load avatar {artist_key}: {e}") from e

    async def get_by_keys(self, artist_keys: list[str]) -> dict[str, ArtistAvatar]:
        """Get avatars for many keys at once."""
        if not artist_keys:
            return {}
        try:
            async with self._db.session_scope() as session:
                stmt = select(ArtistAvatarModel).where(
                    ArtistAvatarModel.artist_key.in_(artist_keys)
                )
                result = await session.execute(stmt)
                return {m.artist_key: _avatar_from_model(m) for m in result.scalars().all()}
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load avatars: {e}") from e

    # Hey future me, upsert = "get, then update or insert" inside one transaction. SQLite's
    # INSERT ... ON CONFLICT would be one statement, but session.merge() keeps us portable.
    async def upsert(self, avatar: ArtistAvatar) -> None:
        """Insert or replace an avatar."""
        try:
            async with self._db.session_scope() as session:
                await session.merge(
                    ArtistAvatarModel(
                        artist_key=avatar.artist_key,
                        artist_name=avatar.artist_name,
                        image_data=avatar.image_data,
                        source=avatar.source,
                        is_locked=avatar.is_locked,
                        source_id=avatar.source_id,
                        updated_at=avatar.updated_at,
                    )
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not save avatar {avatar.artist_key}: {e}") from e

    async def set_lock(self, artist_key: str, locked: bool) -> None:
        """Lock or unlock an avatar (no-op if missing)."""
        try:
            async with self._db.session_scope() as session:
                model = await session.get(ArtistAvatarModel, artist_key)
                if model is not None:
                    model.is_locked = locked
                    model.updated_at = utc_now()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not lock avatar {artist_key}: {e}") from e

    async def clear_image(self, artist_key: str) -> None:
        """Drop the image bytes but keep the row."""
        try:
            async with self._db.session_scope() as session:
                model = await session.get(ArtistAvatarModel, artist_key)
                if model is not None:
                    model.image_data = None
                    model.source_id = None
                    model.updated_at = utc_now()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not clear avatar {artist_key}: {e}") from e

    async def delete_by_key(self, artist_key: str) -> None:
        """Delete an avatar."""
        await self.delete_by_keys([artist_key])

    async def delete_by_keys(self, artist_keys: list[str]) -> None:
        """Delete many avatars."""
        if not artist_keys:
            return
        try:
            async with self._db.session_scope() as session:
                await session.execute(
                    delete(ArtistAvatarModel).where(ArtistAvatarModel.artist_key.in_(artist_keys))
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not delete avatars: {e}") from e
