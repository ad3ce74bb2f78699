"""In-memory repositories (tests, embedding without a database).

Hey future me - these hand out COPIES. An engine holding a LibraryItem snapshot must never
see it change behind its back just because another task called update(). The DB-backed repo
behaves the same way (fresh entity per load), so tests against these stay honest.
"""

import copy

from lyricspot.domain.entities import ArtistAvatar, LibraryItem, utc_now
from lyricspot.domain.ports import IArtistAvatarRepository, ILibraryItemRepository, ItemMutator


class InMemoryLibraryItemRepository(ILibraryItemRepository):
    """Dict-backed LibraryItem repository."""

    def __init__(self, items: list[LibraryItem] | None = None) -> None:
        self._items: dict[str, LibraryItem] = {}
        for item in items or []:
            self._items[item.id] = copy.deepcopy(item)

    async def add(self, item: LibraryItem) -> None:
        self._items[item.id] = copy.deepcopy(item)

    async def get_by_id(self, item_id: str) -> LibraryItem | None:
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item else None

    async def update(self, item_id: str, mutator: ItemMutator) -> LibraryItem | None:
        current = self._items.get(item_id)
        if current is None:
            return None
        # Mutate a copy and swap it in, so a raising mutator leaves the stored item untouched.
        updated = copy.deepcopy(current)
        mutator(updated)
        self._items[item_id] = updated
        return copy.deepcopy(updated)

    async def list_ids(self, limit: int = 1000, offset: int = 0) -> list[str]:
        return list(self._items)[offset : offset + limit]

    def remove(self, item_id: str) -> None:
        """Drop an item (simulates deletion by the import side)."""
        self._items.pop(item_id, None)


class InMemoryArtistAvatarRepository(IArtistAvatarRepository):
    """Dict-backed ArtistAvatar repository."""

    def __init__(self) -> None:
        self._avatars: dict[str, ArtistAvatar] = {}

    async def get_by_key(self, artist_key: str) -> ArtistAvatar | None:
        avatar = self._avatars.get(artist_key)
        return copy.deepcopy(avatar) if avatar else None

    async def get_by_keys(self, artist_keys: list[str]) -> dict[str, ArtistAvatar]:
        return {
            key: copy.deepcopy(self._avatars[key]) for key in artist_keys if key in self._avatars
        }

    async def upsert(self, avatar: ArtistAvatar) -> None:
        self._avatars[avatar.artist_key] = copy.deepcopy(avatar)

    async def set_lock(self, artist_key: str, locked: bool) -> None:
        avatar = self._avatars.get(artist_key)
        if avatar is not None:
            avatar.is_locked = locked
            avatar.updated_at = utc_now()

    async def clear_image(self, artist_key: str) -> None:
        avatar = self._avatars.get(artist_key)
        if avatar is not None:
            avatar.image_data = None
            avatar.source_id = None
            avatar.updated_at = utc_now()

    async def delete_by_key(self, artist_key: str) -> None:
        self._avatars.pop(artist_key, None)

    async def delete_by_keys(self, artist_keys: list[str]) -> None:
        for key in artist_keys:
            self._avatars.pop(key, None)
