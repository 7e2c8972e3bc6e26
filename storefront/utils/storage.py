"""Client-scoped key/value storage backed by the database."""
from typing import Optional
from sqlalchemy.orm import Session
from storefront.data.database.storage_model import ClientStorageEntry


class SqlStorage:
    """
    KeyValueStorage for one browsing client, stored in the client_storage table.
    
    Every write is committed immediately so that a value set during a
    request survives the request.
    """
    
    def __init__(self, db: Session, client_id: str):
        """
        Initialize the storage.
        
        Args:
            db: Database session
            client_id: Identifier of the browsing client
        """
        self.db = db
        self.client_id = client_id
    
    def _entry(self, key: str) -> Optional[ClientStorageEntry]:
        return self.db.query(ClientStorageEntry).filter(
            ClientStorageEntry.client_id == self.client_id,
            ClientStorageEntry.key == key
        ).first()
    
    def get_item(self, key: str) -> Optional[str]:
        entry = self._entry(key)
        return entry.value if entry else None
    
    def set_item(self, key: str, value: str) -> None:
        entry = self._entry(key)
        if entry is None:
            entry = ClientStorageEntry(client_id=self.client_id, key=key, value=value)
            self.db.add(entry)
        else:
            entry.value = value
        self.db.commit()
    
    def remove_item(self, key: str) -> None:
        entry = self._entry(key)
        if entry is not None:
            self.db.delete(entry)
            self.db.commit()
