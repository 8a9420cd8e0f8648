"""
Sync registry: club id -> registration.

The orchestrator only talks to the :class:`SyncRegistry` protocol. Two stores
implement it: the volatile :class:`InMemorySyncRegistry` below and the durable
``SqlSyncRegistry`` in :mod:`regiosync.database.services.sync_registrations`.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from ..domain.models import ClubSyncRegistration


@runtime_checkable
class SyncRegistry(Protocol):
    def register(self, registration: ClubSyncRegistration) -> None: ...

    def unregister(self, club_id: int) -> None: ...

    def get_status(self, club_id: int) -> Optional[ClubSyncRegistration]: ...

    def list_all(self) -> list[ClubSyncRegistration]: ...

    def mark_synced(self, club_id: int, at: datetime) -> bool: ...


class InMemorySyncRegistry:
    """Process-local registry. Writes are serialized; reads return copies."""

    def __init__(self):
        self._items: dict[int, ClubSyncRegistration] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger("sync_registry.memory")

    def register(self, registration: ClubSyncRegistration) -> None:
        """Insert or replace (upsert). A replaced entry keeps its insertion slot."""
        with self._lock:
            self._items[registration.club_id] = registration.model_copy()
        self.logger.info(f"Registered club {registration.club_id} for sync")

    def unregister(self, club_id: int) -> None:
        with self._lock:
            removed = self._items.pop(club_id, None)
        if removed is not None:
            self.logger.info(f"Unregistered club {club_id} from sync")

    def get_status(self, club_id: int) -> Optional[ClubSyncRegistration]:
        with self._lock:
            item = self._items.get(club_id)
            return item.model_copy() if item is not None else None

    def list_all(self) -> list[ClubSyncRegistration]:
        with self._lock:
            return [item.model_copy() for item in self._items.values()]

    def mark_synced(self, club_id: int, at: datetime) -> bool:
        """Advance last_sync_at to *at*. Older timestamps and unknown ids are ignored."""
        with self._lock:
            item = self._items.get(club_id)
            if item is None:
                return False
            if item.last_sync_at is not None and at <= item.last_sync_at:
                return False
            self._items[club_id] = item.model_copy(update={"last_sync_at": at})
            return True
