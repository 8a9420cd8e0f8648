"""
Database service for club sync registrations.

Durable implementation of the ``SyncRegistry`` protocol on SQLAlchemy. Every
operation runs in its own transaction, so writes are serialized by the
database rather than by the caller.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select

from ..manager import DatabaseManager
from ..schema import ClubSyncRegistrationRecord
from regiosync.domain.models import ClubSyncRegistration


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; stored values are always UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_model(record: ClubSyncRegistrationRecord) -> ClubSyncRegistration:
    return ClubSyncRegistration(
        club_id=record.club_id,
        external_url=record.external_url,
        last_sync_at=_as_utc(record.last_sync_at),
        sync_enabled=bool(record.sync_enabled),
    )


class SqlSyncRegistry:
    """SyncRegistry backed by the ``club_sync_registrations`` table."""

    def __init__(self, db: DatabaseManager):
        self.db = db
        # Read-modify-write sequences within this process
        self._lock = threading.Lock()
        self.logger = logging.getLogger("sync_registry.sql")

    def register(self, registration: ClubSyncRegistration) -> None:
        with self._lock, self.db.session_scope() as session:
            record = session.execute(
                select(ClubSyncRegistrationRecord).where(
                    ClubSyncRegistrationRecord.club_id == registration.club_id
                )
            ).scalar_one_or_none()
            if record is None:
                record = ClubSyncRegistrationRecord(club_id=registration.club_id)
                session.add(record)
            record.external_url = registration.external_url
            record.sync_enabled = registration.sync_enabled
            record.last_sync_at = _as_utc(registration.last_sync_at)
        self.logger.info(f"Registered club {registration.club_id} for sync")

    def unregister(self, club_id: int) -> None:
        with self._lock, self.db.session_scope() as session:
            record = session.execute(
                select(ClubSyncRegistrationRecord).where(ClubSyncRegistrationRecord.club_id == club_id)
            ).scalar_one_or_none()
            if record is None:
                return
            session.delete(record)
        self.logger.info(f"Unregistered club {club_id} from sync")

    def get_status(self, club_id: int) -> Optional[ClubSyncRegistration]:
        with self.db.session_scope() as session:
            record = session.execute(
                select(ClubSyncRegistrationRecord).where(ClubSyncRegistrationRecord.club_id == club_id)
            ).scalar_one_or_none()
            return _to_model(record) if record is not None else None

    def list_all(self) -> list[ClubSyncRegistration]:
        with self.db.session_scope() as session:
            records = session.execute(
                select(ClubSyncRegistrationRecord).order_by(ClubSyncRegistrationRecord.id)
            ).scalars()
            return [_to_model(r) for r in records]

    def mark_synced(self, club_id: int, at: datetime) -> bool:
        at = _as_utc(at)
        with self._lock, self.db.session_scope() as session:
            record = session.execute(
                select(ClubSyncRegistrationRecord).where(ClubSyncRegistrationRecord.club_id == club_id)
            ).scalar_one_or_none()
            if record is None:
                return False
            current = _as_utc(record.last_sync_at)
            if current is not None and at <= current:
                return False
            record.last_sync_at = at
            return True
