"""Sync API."""

from web.api.sync.views import clear_local, clear_remote, full_resync, get_status, sync_date, sync_today

__all__ = [
    "full_resync",
    "sync_date",
    "sync_today",
    "clear_local",
    "clear_remote",
    "get_status",
]
