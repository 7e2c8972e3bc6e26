"""Tests for the favorites store and its storage backends."""
import json
import pytest
from storefront.catalog.favorites import FavoritesStore, InMemoryStorage
from storefront.data.database.connection import Base, SessionLocal, engine
from storefront.utils.storage import SqlStorage

KEY = "product-favorites"


def test_starts_empty_without_stored_value():
    store = FavoritesStore(InMemoryStorage())
    assert store.favorites == []
    assert len(store) == 0


def test_loads_persisted_favorites():
    storage = InMemoryStorage({KEY: json.dumps(["p1", "p2"])})
    store = FavoritesStore(storage)
    assert store.favorites == ["p1", "p2"]
    assert store.is_favorite("p1")
    assert "p2" in store


def test_add_persists_and_is_idempotent():
    storage = InMemoryStorage()
    store = FavoritesStore(storage)

    store.add("p1")
    store.add("p1")

    assert store.favorites == ["p1"]
    assert json.loads(storage.get_item(KEY)) == ["p1"]


def test_remove_persists():
    storage = InMemoryStorage({KEY: json.dumps(["p1", "p2"])})
    store = FavoritesStore(storage)

    assert store.remove("p1") == ["p2"]
    assert store.remove("missing") == ["p2"]
    assert json.loads(storage.get_item(KEY)) == ["p2"]


def test_toggle_twice_restores_membership():
    storage = InMemoryStorage({KEY: json.dumps(["p2"])})
    store = FavoritesStore(storage)

    assert store.toggle("p1") is True
    assert store.favorites == ["p2", "p1"]
    assert store.toggle("p1") is False
    assert store.favorites == ["p2"]
    assert json.loads(storage.get_item(KEY)) == ["p2"]


def test_favorites_survive_reload():
    storage = InMemoryStorage()
    FavoritesStore(storage).toggle("p1")
    assert FavoritesStore(storage).favorites == ["p1"]


def test_returned_list_is_a_copy():
    store = FavoritesStore(InMemoryStorage())
    store.add("p1")
    store.favorites.append("p2")
    assert store.favorites == ["p1"]


@pytest.mark.parametrize("stored", [
    "not json",
    '{"p1": true}',
    '["p1", 2]',
    "42",
])
def test_malformed_value_loads_empty(stored, caplog):
    store = FavoritesStore(InMemoryStorage({KEY: stored}))

    assert store.favorites == []
    assert any("Error loading favorites" in r.getMessage() for r in caplog.records)


def test_duplicate_ids_collapse():
    store = FavoritesStore(InMemoryStorage({KEY: json.dumps(["p1", "p2", "p1"])}))
    assert store.favorites == ["p1", "p2"]


def test_custom_key():
    storage = InMemoryStorage()
    FavoritesStore(storage, key="wishlist").add("p1")
    assert storage.get_item("wishlist") == '["p1"]'
    assert storage.get_item(KEY) is None


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def test_sql_storage_round_trip(db):
    storage = SqlStorage(db, "client_a")

    assert storage.get_item(KEY) is None
    storage.set_item(KEY, '["p1"]')
    storage.set_item(KEY, '["p1", "p2"]')
    assert storage.get_item(KEY) == '["p1", "p2"]'

    storage.remove_item(KEY)
    assert storage.get_item(KEY) is None


def test_sql_storage_is_scoped_per_client(db):
    FavoritesStore(SqlStorage(db, "client_a")).add("p1")
    FavoritesStore(SqlStorage(db, "client_b")).add("p2")

    assert FavoritesStore(SqlStorage(db, "client_a")).favorites == ["p1"]
    assert FavoritesStore(SqlStorage(db, "client_b")).favorites == ["p2"]
