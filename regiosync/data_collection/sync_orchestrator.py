"""
Sync Orchestrator für RegioSync

Koordiniert Einzel- und Batch-Synchronisation registrierter Vereine sowie den
wiederkehrenden Sync-Job.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ..domain.contracts import NOT_REGISTERED, SYNC_DISABLED, BatchSyncResult, ClubSyncResult
from ..domain.models import ClubSnapshot
from .matching import find_table_position
from .rate_limiter import RateLimiter
from .registry import SyncRegistry
from .scrapers.regiowyniki_scraper import RegioWynikiScraper


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClubSyncOrchestrator:
    """Orchestriert die Synchronisation registrierter Vereine"""

    def __init__(
        self,
        scraper: RegioWynikiScraper,
        registry: SyncRegistry,
        rate_limiter: RateLimiter,
        metrics=None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.scraper = scraper
        self.registry = registry
        self.rate_limiter = rate_limiter
        self.metrics = metrics
        self._now = clock or _utcnow
        self.logger = logging.getLogger("club_sync_orchestrator")

    def _record(self, result: ClubSyncResult) -> ClubSyncResult:
        if self.metrics is not None:
            self.metrics.record_club_sync("success" if result.success else result.error_kind or "unexpected")
        return result

    def _success(self, club_id: int, snapshot: ClubSnapshot, synced_at: datetime) -> ClubSyncResult:
        club_name = snapshot.details.name if snapshot.details else None
        return ClubSyncResult(
            club_id=club_id,
            success=True,
            matches_count=len(snapshot.schedule),
            table_position=find_table_position(club_name, snapshot.table),
            synced_at=synced_at,
            snapshot=snapshot,
        )

    @staticmethod
    def _transport_failure(club_id: int, snapshot: ClubSnapshot) -> ClubSyncResult:
        # All parts failed; the details error is representative
        message = snapshot.fetch_errors.get("details") or next(iter(snapshot.fetch_errors.values()))
        result = ClubSyncResult.failure(club_id, message, "transport")
        result.snapshot = snapshot
        return result

    async def sync_club(self, club_id: int) -> ClubSyncResult:
        """Synchronisiert einen registrierten Verein.

        Nicht registrierte oder deaktivierte Vereine schlagen ohne Netzwerkzugriff
        fehl. Fehler werden als Ergebnis zurückgegeben, nie als Exception.
        """
        try:
            registration = await asyncio.to_thread(self.registry.get_status, club_id)
            if registration is None:
                self.logger.warning(f"Club {club_id} is not registered for sync")
                return self._record(ClubSyncResult.failure(club_id, NOT_REGISTERED, "registration"))
            if not registration.sync_enabled:
                self.logger.info(f"Sync disabled for club {club_id}")
                return self._record(ClubSyncResult.failure(club_id, SYNC_DISABLED, "registration"))

            self.logger.info(f"Starting sync for club {club_id}")
            snapshot = await self.scraper.get_full_club_data(registration.external_url)
            if snapshot.unreachable:
                result = self._transport_failure(club_id, snapshot)
                self.logger.error(f"Sync failed for club {club_id}: {result.error}")
                return self._record(result)

            synced_at = self._now()
            await asyncio.to_thread(self.registry.mark_synced, club_id, synced_at)
            result = self._success(club_id, snapshot, synced_at)
            self.logger.info(
                f"Completed sync for club {club_id}: {result.matches_count} matches, "
                f"position {result.table_position}"
            )
            return self._record(result)

        except Exception as e:
            self.logger.error(f"Error syncing club {club_id}: {e}")
            return self._record(
                ClubSyncResult.failure(club_id, str(e) or type(e).__name__, "unexpected")
            )

    async def sync_club_data(self, club_id: int, url: str) -> ClubSyncResult:
        """Sync-now ohne Registrierung: liefert den Snapshot zur Persistierung durch den Aufrufer."""
        try:
            snapshot = await self.scraper.get_full_club_data(url)
        except Exception as e:
            self.logger.error(f"Sync club data failed for club {club_id}: {e}")
            return self._record(
                ClubSyncResult.failure(club_id, str(e) or type(e).__name__, "unexpected")
            )
        if snapshot.unreachable:
            return self._record(self._transport_failure(club_id, snapshot))
        return self._record(self._success(club_id, snapshot, self._now()))

    async def sync_all_clubs(self) -> BatchSyncResult:
        """Synchronisiert alle aktiven Registrierungen nacheinander.

        Vor jedem Verein wird ein Token des Rate Limiters abgewartet, nach jedem
        Verein beginnt dessen Pause neu;
        deaktivierte Registrierungen werden ohne Wartezeit übersprungen.
        Ein Fehler bricht den Lauf nicht ab.
        """
        registrations = await asyncio.to_thread(self.registry.list_all)
        batch = BatchSyncResult(total=len(registrations), started_at=self._now())
        enabled = sum(1 for r in registrations if r.sync_enabled)
        self.logger.info(f"Starting batch sync for {len(registrations)} clubs ({enabled} enabled)")

        for registration in registrations:
            if not registration.sync_enabled:
                batch.skipped += 1
                continue
            await self.rate_limiter.acquire()
            try:
                batch.add(await self.sync_club(registration.club_id))
            finally:
                self.rate_limiter.release()

        batch.ended_at = self._now()
        if self.metrics is not None:
            self.metrics.record_batch(batch.duration_s or 0.0)
            self.metrics.set_registered_clubs(enabled, len(registrations) - enabled)
        self.logger.info(
            f"Batch sync completed: {batch.successful} successful, {batch.failed} failed, "
            f"{batch.skipped} skipped"
        )
        return batch

    async def process_daily_sync(self) -> Optional[BatchSyncResult]:
        """Ein Lauf des wiederkehrenden Jobs; Fehler werden geloggt, nicht geworfen"""
        self.logger.info("Running daily sync job...")
        try:
            result = await self.sync_all_clubs()
        except Exception:
            self.logger.exception("Daily sync job failed")
            return None
        self.logger.info(f"Daily sync result: {result.to_dict()}")
        return result


class ClubSyncScheduler:
    """Scheduler für den wiederkehrenden Sync-Job.

    Ein einzelner Timer-Task besitzt den Zeitplan. Jeder Lauf startet den
    Batch als eigenen Task, damit ``stop()`` nur den Timer abbricht und ein
    laufender Batch zu Ende läuft.
    """

    def __init__(self, orchestrator: ClubSyncOrchestrator, interval_seconds: float = 24 * 60 * 60):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds
        self.logger = logging.getLogger("club_sync_scheduler")
        self._timer: Optional[asyncio.Task] = None
        self._batch: Optional[asyncio.Task] = None
        self.runs_started = 0
        self.runs_skipped = 0

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def batch_in_flight(self) -> bool:
        return self._batch is not None and not self._batch.done()

    def start(self, interval_seconds: Optional[float] = None) -> bool:
        """Startet den Timer; der erste Lauf erfolgt sofort. No-op, falls er schon läuft."""
        if self.running:
            self.logger.info("Sync cron already running")
            return False
        if interval_seconds is not None:
            if interval_seconds <= 0:
                raise ValueError("interval_seconds must be > 0")
            self.interval_seconds = interval_seconds

        self.logger.info(f"Starting sync cron with interval {self.interval_seconds}s")
        self._fire()
        self._timer = asyncio.create_task(self._timer_loop(), name="club-sync-timer")
        return True

    def stop(self) -> bool:
        """Stoppt den Timer. Ein laufender Batch wird nicht abgebrochen."""
        if not self.running:
            return False
        self._timer.cancel()
        self._timer = None
        self.logger.info("Sync cron stopped")
        return True

    async def drain(self) -> None:
        """Wartet auf einen laufenden Batch"""
        if self.batch_in_flight:
            await self._batch

    async def _timer_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self._fire()

    def _fire(self) -> None:
        if self.batch_in_flight:
            self.runs_skipped += 1
            self.logger.warning("Previous batch sync still running; skipping this run")
            return
        self.runs_started += 1
        self._batch = asyncio.create_task(
            self.orchestrator.process_daily_sync(), name="club-sync-batch"
        )
