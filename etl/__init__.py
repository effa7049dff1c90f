"""ETL package - upstream ingestion and remote/local sync."""

from etl.ingest import UpstreamResult, check_sources, fetch_upstream
from etl.sync import SyncReconciler, today_key

__all__ = [
    "SyncReconciler",
    "UpstreamResult",
    "check_sources",
    "fetch_upstream",
    "today_key",
]
