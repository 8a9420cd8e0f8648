"""
Applications Package für RegioSync

Enthält die Hauptanwendungsklasse des Sync-Dienstes und die CLI.
"""

from .sync_app import ClubSyncApp

__all__ = ["ClubSyncApp"]
