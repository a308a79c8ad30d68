"""
Two-tier favorites: a per-user local cache in front of the durable store.

The durable store is the source of truth. The local cache is rehydrated
from it when a session starts and flipped optimistically on toggle, so
observers update before the network round trip completes.

Redis keys (via LocalStore):
- {prefix}:{kind}:{user_id} -> JSON array of favorited content ids
"""

import json
import logging
from collections.abc import Callable

from core.exceptions import ExternalServiceError

from .content_models import ContentKind
from .data_store import DataStore, LocalStore

logger = logging.getLogger(__name__)

FavoritesListener = Callable[[str, bool], None]


class FavoritesStore:
    """Favorites of one user for one content kind."""

    def __init__(
        self,
        data_store: DataStore,
        local_store: LocalStore,
        user_id: str,
        kind: ContentKind,
        key_prefix: str = "favorites",
    ):
        self._store = data_store
        self._local = local_store
        self.user_id = user_id
        self.kind = ContentKind(kind)
        self._key = f"{key_prefix}:{self.kind.value}:{user_id}"
        self._favorites: set[str] = set()
        self._listeners: list[FavoritesListener] = []
        # Toggle generation per content id; a failed write only reverts
        # if no newer toggle on the same id has been issued since.
        self._generations: dict[str, int] = {}

    @property
    def cache_key(self) -> str:
        return self._key

    @property
    def favorites(self) -> frozenset[str]:
        """Current local membership."""
        return frozenset(self._favorites)

    def is_favorite(self, content_id: str) -> bool:
        return content_id in self._favorites

    def subscribe(self, listener: FavoritesListener) -> Callable[[], None]:
        """
        Register a listener called with (content_id, is_favorite) on every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self) -> frozenset[str]:
        """
        Rehydrate the local cache from the durable store.

        Falls back to the last cached snapshot when the durable list is
        unreachable.
        """
        try:
            content_ids = await self._store.list_favorites(self.user_id, self.kind)
        except ExternalServiceError as e:
            logger.warning(
                f"Failed to load {self.kind.value} favorites for {self.user_id}, "
                f"using cached snapshot: {e.message}"
            )
            self._favorites = await self._read_snapshot()
            return self.favorites

        self._favorites = set(content_ids)
        await self._write_snapshot()
        return self.favorites

    async def toggle(self, content_id: str) -> bool:
        """
        Flip membership of one item.

        The local cache flips and listeners fire immediately; if the durable
        write fails the flip is reverted and listeners fire again.

        Returns:
            Membership after the durable write resolved
        """
        was_favorite = content_id in self._favorites
        generation = self._generations.get(content_id, 0) + 1
        self._generations[content_id] = generation

        self._apply(content_id, not was_favorite)

        try:
            if was_favorite:
                await self._store.remove_favorite(self.user_id, self.kind, content_id)
            else:
                await self._store.add_favorite(self.user_id, self.kind, content_id)
        except ExternalServiceError as e:
            logger.warning(
                f"Favorite {'remove' if was_favorite else 'add'} failed for "
                f"{self.kind.value}/{content_id}: {e.message}"
            )
            if self._generations.get(content_id) == generation:
                self._apply(content_id, was_favorite)
            else:
                logger.info(f"Skipping rollback of {content_id}, a newer toggle superseded it")
            return self.is_favorite(content_id)

        await self._write_snapshot()
        return self.is_favorite(content_id)

    def _apply(self, content_id: str, favorite: bool) -> None:
        if favorite:
            self._favorites.add(content_id)
        else:
            self._favorites.discard(content_id)

        for listener in list(self._listeners):
            listener(content_id, favorite)

    async def _read_snapshot(self) -> set[str]:
        raw = await self._local.get(self._key)
        if not raw:
            return set()
        try:
            content_ids = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding corrupt favorites cache at {self._key}")
            return set()
        if not isinstance(content_ids, list):
            return set()
        return {str(content_id) for content_id in content_ids}

    async def _write_snapshot(self) -> None:
        await self._local.set(self._key, json.dumps(sorted(self._favorites)))
