from datetime import datetime, timedelta, timezone

import pytest

from regiosync.data_collection.registry import InMemorySyncRegistry, SyncRegistry
from regiosync.database.manager import DatabaseManager
from regiosync.database.services.sync_registrations import SqlSyncRegistry
from regiosync.domain.models import ClubSyncRegistration

T0 = datetime(2025, 9, 1, 6, 0, tzinfo=timezone.utc)
URL = "https://regiowyniki.pl/druzyna/Pilka_Nozna/malopolskie/Wisla_Krakow/"


@pytest.fixture
def db():
    manager = DatabaseManager("sqlite://")
    manager.initialize()
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture(params=["memory", "sql"])
def registry(request, db):
    if request.param == "memory":
        return InMemorySyncRegistry()
    return SqlSyncRegistry(db)


def _reg(club_id, **kwargs):
    return ClubSyncRegistration(club_id=club_id, external_url=kwargs.pop("url", URL), **kwargs)


def test_implements_protocol(registry):
    assert isinstance(registry, SyncRegistry)


def test_register_and_get_status(registry):
    registry.register(_reg(1))
    status = registry.get_status(1)
    assert status.club_id == 1
    assert status.external_url == URL
    assert status.sync_enabled is True
    assert status.last_sync_at is None
    assert registry.get_status(2) is None


def test_register_is_upsert(registry):
    registry.register(_reg(1))
    registry.register(_reg(2))
    registry.register(_reg(1, url="https://regiowyniki.pl/nowy/", sync_enabled=False))
    items = registry.list_all()
    assert [r.club_id for r in items] == [1, 2]
    assert items[0].external_url == "https://regiowyniki.pl/nowy/"
    assert items[0].sync_enabled is False


def test_unregister(registry):
    registry.register(_reg(1))
    registry.unregister(1)
    assert registry.get_status(1) is None
    # Unknown id is a no-op
    registry.unregister(99)
    assert registry.list_all() == []


def test_list_all_in_registration_order(registry):
    for club_id in (5, 3, 9):
        registry.register(_reg(club_id))
    assert [r.club_id for r in registry.list_all()] == [5, 3, 9]


def test_returned_values_are_copies(registry):
    registry.register(_reg(1))
    status = registry.get_status(1)
    status.sync_enabled = False
    assert registry.get_status(1).sync_enabled is True


def test_mark_synced_only_moves_forward(registry):
    registry.register(_reg(1))
    assert registry.mark_synced(1, T0) is True
    assert registry.get_status(1).last_sync_at == T0

    assert registry.mark_synced(1, T0 - timedelta(hours=1)) is False
    assert registry.mark_synced(1, T0) is False
    assert registry.get_status(1).last_sync_at == T0

    later = T0 + timedelta(days=1)
    assert registry.mark_synced(1, later) is True
    assert registry.get_status(1).last_sync_at == later


def test_mark_synced_unknown_club(registry):
    assert registry.mark_synced(42, T0) is False
    assert registry.get_status(42) is None


def test_last_sync_at_is_utc_aware(registry):
    warsaw = timezone(timedelta(hours=2))
    registry.register(_reg(1, last_sync_at=T0.astimezone(warsaw)))
    stored = registry.get_status(1).last_sync_at
    assert stored.tzinfo is not None
    assert stored == T0


def test_memory_registry_register_is_upsert():
    registry = InMemorySyncRegistry()
    registry.register(_reg(1))
    registry.register(_reg(1))
    assert [r.club_id for r in registry.list_all()] == [1]


def test_database_requires_initialize():
    manager = DatabaseManager("sqlite://")
    with pytest.raises(RuntimeError):
        manager.get_session()
    with pytest.raises(RuntimeError):
        manager.create_tables()
