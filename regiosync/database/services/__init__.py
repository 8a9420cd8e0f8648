from .sync_registrations import SqlSyncRegistry

__all__ = ["SqlSyncRegistry"]
