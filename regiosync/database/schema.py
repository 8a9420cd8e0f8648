"""
Database Schema
SQLAlchemy Models für die Sync-Registrierungen
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ClubSyncRegistrationRecord(Base):
    __tablename__ = "club_sync_registrations"

    # Surrogate key keeps insertion order for list_all()
    id = Column(Integer, primary_key=True, autoincrement=True)
    club_id = Column(Integer, nullable=False, unique=True, index=True)
    external_url = Column(Text, nullable=False)
    sync_enabled = Column(Boolean, nullable=False, default=True)
    last_sync_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())
