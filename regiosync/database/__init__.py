"""
Database Module
SQLAlchemy Schema und Database Manager
"""

from .manager import DatabaseManager
from .schema import Base, ClubSyncRegistrationRecord

__all__ = [
    "DatabaseManager",
    "Base",
    "ClubSyncRegistrationRecord",
]
