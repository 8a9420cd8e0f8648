"""
Prometheus Metrics für RegioSync

Implementiert Metriken-Sammlung und -Export für Monitoring.
"""

import logging
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
    start_http_server,
)

from ..core.config import Settings


class SyncMetrics:
    """Prometheus Metriken für Abruf und Synchronisation"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings
        self.logger = logging.getLogger("prometheus_metrics")

        # Custom Registry für bessere Kontrolle
        self.registry = CollectorRegistry()

        # Fetch Metriken
        self.fetch_requests_total = Counter(
            "regiowyniki_fetch_requests_total",
            "Total number of page fetches against the results site",
            ["page", "status"],
            registry=self.registry,
        )

        self.fetch_duration = Histogram(
            "regiowyniki_fetch_duration_seconds",
            "Page fetch duration in seconds",
            ["page"],
            registry=self.registry,
        )

        self.extraction_gaps_total = Counter(
            "regiowyniki_extraction_gaps_total",
            "Fields that could not be extracted and fell back to a default",
            ["page", "field"],
            registry=self.registry,
        )

        # Sync Metriken
        self.club_syncs_total = Counter(
            "club_syncs_total",
            "Total number of single club syncs",
            ["status"],
            registry=self.registry,
        )

        self.batch_sync_duration = Histogram(
            "batch_sync_duration_seconds",
            "Full batch sync duration in seconds",
            buckets=(1, 5, 15, 30, 60, 120, 300, 600, 1800, 3600),
            registry=self.registry,
        )

        self.registered_clubs = Gauge(
            "registered_clubs",
            "Number of club sync registrations",
            ["enabled"],
            registry=self.registry,
        )

        # Application Info
        self.app_info = Info(
            "regiosync_info",
            "RegioSync application info",
            registry=self.registry,
        )
        self.app_info.info(
            {
                "version": "1.0.0",
                "environment": settings.environment if settings else "unknown",
                "season": settings.season_label if settings else "unknown",
            }
        )

    def start_metrics_server(self, port: int = 8008):
        """Startet Prometheus Metrics HTTP Server"""
        try:
            start_http_server(port, registry=self.registry)
            self.logger.info(f"Prometheus metrics server started on port {port}")
        except Exception as e:
            self.logger.error(f"Failed to start metrics server: {e}")
            raise

    def record_fetch(self, page: str, status: str, duration: float):
        """Zeichnet einen Seitenabruf auf"""
        self.fetch_requests_total.labels(page=page, status=status).inc()
        self.fetch_duration.labels(page=page).observe(duration)

    def record_extraction_gap(self, page: str, field: str):
        self.extraction_gaps_total.labels(page=page, field=field).inc()

    def record_club_sync(self, status: str):
        """Zeichnet einen Vereins-Sync auf (success, transport, registration, unexpected)"""
        self.club_syncs_total.labels(status=status).inc()

    def record_batch(self, duration: float):
        self.batch_sync_duration.observe(duration)

    def set_registered_clubs(self, enabled: int, disabled: int):
        self.registered_clubs.labels(enabled="true").set(enabled)
        self.registered_clubs.labels(enabled="false").set(disabled)

    def export_metrics(self) -> str:
        """Exportiert Metriken im Prometheus Format"""
        try:
            return generate_latest(self.registry).decode("utf-8")
        except Exception as e:
            self.logger.error(f"Failed to export metrics: {e}")
            return f"# Error exporting metrics: {e}\n"
