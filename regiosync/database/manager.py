"""
Database Manager
Datenbankoperationen mit SQLAlchemy (synchron)
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from regiosync.core.config import settings
from regiosync.database.schema import Base


class DatabaseManager:
    """Datenbankverwaltung mit SQLAlchemy"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.registry_database_url
        self.engine = None
        self.SessionLocal = None
        self.logger = logging.getLogger(__name__)

    def initialize(self):
        """Initialisiert Engine und SessionFactory"""
        try:
            kwargs: dict[str, Any] = {"future": True}
            if self.database_url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False}
                # In-Memory SQLite: eine Verbindung für alle Sessions
                if ":memory:" in self.database_url or self.database_url == "sqlite://":
                    kwargs["poolclass"] = StaticPool
            self.engine = create_engine(self.database_url, **kwargs)
            self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
            # Leichter Verbindungscheck
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self.logger.info("Database engine initialized (SQLAlchemy)")
        except Exception as e:
            self.logger.error(f"Failed to initialize database: {e}")
            # Engine/SessionLocal auf None setzen, damit Aufrufer damit umgehen können
            self.engine = None
            self.SessionLocal = None
            raise

    def get_session(self) -> Session:
        """Gibt eine neue SQLAlchemy Session zurück"""
        if not self.SessionLocal:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session mit Commit bei Erfolg und Rollback bei Fehler"""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self):
        """Erstellt alle Tabellen"""
        if not self.engine:
            raise RuntimeError("Database not initialized")

        Base.metadata.create_all(bind=self.engine)
        self.logger.info("Database tables created")

    def close(self):
        """Schließt alle Datenbankverbindungen"""
        if self.engine:
            self.engine.dispose()
            self.logger.info("Database engine disposed")
