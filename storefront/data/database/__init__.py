"""Database data layer package."""
from .connection import engine, SessionLocal, get_db, Base
from .storage_model import ClientStorageEntry

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "Base",
    "ClientStorageEntry"
]
