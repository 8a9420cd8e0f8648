"""
Monitoring Package für RegioSync

Enthält die Prometheus Metriken.
"""

from .prometheus_metrics import SyncMetrics

__all__ = ["SyncMetrics"]
