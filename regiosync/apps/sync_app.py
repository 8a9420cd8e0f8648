"""
Club Sync App - Hauptanwendungsklasse für die RegioWyniki-Synchronisation

Verdrahtet Registry, Rate Limiter, Scraper, Orchestrator und Scheduler aus den
Settings und bietet die Lebenszyklus-Schnittstelle für den Dienst.
"""

import asyncio
import logging
import signal
from typing import Optional

from ..core.config import Settings
from ..data_collection.rate_limiter import RateLimiter
from ..data_collection.registry import InMemorySyncRegistry, SyncRegistry
from ..data_collection.scrapers.regiowyniki_scraper import RegioWynikiScraper
from ..data_collection.sync_orchestrator import ClubSyncOrchestrator, ClubSyncScheduler
from ..database.manager import DatabaseManager
from ..database.services.sync_registrations import SqlSyncRegistry
from ..monitoring.prometheus_metrics import SyncMetrics


class ClubSyncApp:
    """Hauptanwendung für die Vereins-Synchronisation"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        registry: Optional[SyncRegistry] = None,
        scraper: Optional[RegioWynikiScraper] = None,
    ):
        self.settings = settings or Settings()
        self.logger = logging.getLogger("club_sync_app")

        self.db_manager: Optional[DatabaseManager] = None
        self.registry = registry or self._build_registry()

        self.metrics = SyncMetrics(self.settings) if self.settings.enable_metrics else None
        self.rate_limiter = RateLimiter(
            self.settings.sync_rate_limit_requests,
            self.settings.sync_rate_limit_window_seconds,
        )
        self.scraper = scraper or RegioWynikiScraper.from_settings(
            self.settings, rate_limiter=self.rate_limiter, metrics=self.metrics
        )
        self.orchestrator = ClubSyncOrchestrator(
            self.scraper, self.registry, self.rate_limiter, metrics=self.metrics
        )
        self.scheduler = ClubSyncScheduler(self.orchestrator, self.settings.sync_interval_seconds)
        self.shutdown_event = asyncio.Event()

    def _build_registry(self) -> SyncRegistry:
        if self.settings.registry_backend == "sql":
            self.db_manager = DatabaseManager(self.settings.registry_database_url)
            return SqlSyncRegistry(self.db_manager)
        return InMemorySyncRegistry()

    async def initialize(self):
        """Initialisiert die Anwendung"""
        try:
            self.logger.info("Initializing Club Sync App...")

            if self.db_manager is not None:
                self.db_manager.initialize()
                self.db_manager.create_tables()

            await self.scraper.initialize()

            if self.metrics is not None:
                self.metrics.start_metrics_server(self.settings.metrics_port)

            self.logger.info("Club Sync App initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize Club Sync App: {e}")
            raise

    def start_sync_cron(self, interval_seconds: Optional[float] = None) -> bool:
        return self.scheduler.start(interval_seconds)

    def stop_sync_cron(self) -> bool:
        return self.scheduler.stop()

    def request_shutdown(self):
        self.logger.info("Shutdown requested")
        self.shutdown_event.set()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                # Windows: no loop signal handlers
                signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(self.request_shutdown))

    async def run_service(self, interval_seconds: Optional[float] = None):
        """Startet den Sync-Dienst und läuft bis SIGINT/SIGTERM"""
        await self.initialize()
        try:
            self._install_signal_handlers()
            self.start_sync_cron(interval_seconds)
            await self.shutdown_event.wait()
        finally:
            self.stop_sync_cron()
            # Ein laufender Batch darf zu Ende laufen
            await self.scheduler.drain()
            await self.cleanup()

    async def cleanup(self):
        """Räumt Ressourcen auf"""
        try:
            self.logger.info("Cleaning up Club Sync App...")
            self.stop_sync_cron()
            await self.scraper.cleanup()
            if self.db_manager is not None:
                self.db_manager.close()
            self.logger.info("Club Sync App cleanup completed")
        except Exception as e:
            self.logger.error(f"Cleanup failed: {e}")
