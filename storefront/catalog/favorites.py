"""Favorites / wishlist membership persisted through a key/value storage."""
import json
from typing import Dict, List, Optional, Protocol
from storefront.config import settings
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueStorage(Protocol):
    """Durable string storage scoped to one browsing client."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class InMemoryStorage:
    """KeyValueStorage kept in a dict (tests and single-process use)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class FavoritesStore:
    """
    Set of favorited product ids.

    Loaded once from storage when created; every mutation writes the full
    list back synchronously. Insertion order is preserved.
    """

    def __init__(self, storage: KeyValueStorage, key: Optional[str] = None):
        """
        Initialize the store and load persisted favorites.

        Args:
            storage: Storage capability to load from and persist to
            key: Storage key (defaults to the configured favorites key)
        """
        self.storage = storage
        self.key = key or settings.favorites_storage_key
        self._favorites: List[str] = self._load()

    def _load(self) -> List[str]:
        stored = self.storage.get_item(self.key)
        if not stored:
            return []
        try:
            data = json.loads(stored)
        except ValueError as e:
            logger.warning(f"Error loading favorites, starting empty: {e}")
            return []
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            logger.warning("Error loading favorites, starting empty: stored value is not a list of ids")
            return []
        # Drop duplicates while keeping the first occurrence
        return list(dict.fromkeys(data))

    def _save(self) -> None:
        self.storage.set_item(self.key, json.dumps(self._favorites))

    @property
    def favorites(self) -> List[str]:
        return list(self._favorites)

    def is_favorite(self, product_id: str) -> bool:
        return product_id in self._favorites

    def add(self, product_id: str) -> List[str]:
        if product_id not in self._favorites:
            self._favorites.append(product_id)
        self._save()
        return self.favorites

    def remove(self, product_id: str) -> List[str]:
        self._favorites = [fid for fid in self._favorites if fid != product_id]
        self._save()
        return self.favorites

    def toggle(self, product_id: str) -> bool:
        """
        Flip membership of product_id.

        Returns:
            Whether the product is a favorite afterwards
        """
        if product_id in self._favorites:
            self.remove(product_id)
            return False
        self.add(product_id)
        return True

    def __len__(self) -> int:
        return len(self._favorites)

    def __contains__(self, product_id: str) -> bool:
        return self.is_favorite(product_id)
