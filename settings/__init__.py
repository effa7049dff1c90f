"""Application settings."""

import json
import os
from pathlib import Path

# Local cache
DB_PATH = os.getenv("DEMAND_DB_PATH", "demand.duckdb")

# Logging
LOG_DIR = Path(os.getenv("DEMAND_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("DEMAND_LOG_LEVEL", "INFO")
LOG_RETENTION = os.getenv("DEMAND_LOG_RETENTION", "30 days")

# Remote store (Firestore)
FIRESTORE_PROJECT = os.getenv("FIRESTORE_PROJECT")
FIRESTORE_CREDENTIALS = os.getenv("FIRESTORE_CREDENTIALS")
FIRESTORE_COLLECTION = os.getenv("FIRESTORE_COLLECTION", "demandRecords")

# Firestore rejects batches above 500 writes
BATCH_OPERATION_CEILING = int(os.getenv("BATCH_OPERATION_CEILING", "490"))

# Read caps
BROAD_QUERY_CAP = 150
ANALYSIS_QUERY_CAP = 750
MAX_RESULTS = 500
MAX_CONCURRENT_READS = 20

# Upstream sheets
SHEET_TIMEOUT = 60
DEFAULT_SHEET_URLS = {
    "Blinkit": "https://docs.google.com/spreadsheets/d/16wAvZeJxMJBY2uzlisQYNPVeEWcOD1eKohQatPKvD8U/gviz/tq?tqx=out:csv",
    "SwiggyFood": "https://docs.google.com/spreadsheets/d/160jz7oIaRpXyIbGdzY3yH5EzEPizrxQ0GUhdylJuAV4/gviz/tq?tqx=out:csv",
    "SwiggyIM": "https://docs.google.com/spreadsheets/d/1__vqRu9WBTnv8Ptp1vlRUVBDvKCIfrR-Rq-eU5iKEa4/gviz/tq?tqx=out:csv",
    "Zepto": "https://docs.google.com/spreadsheets/d/1VrHYofM707-7lC7cglbGzArKsJVYqjZN303weUEmGo8/gviz/tq?tqx=out:csv",
}
SHEET_URLS = {
    client: os.getenv(f"SHEET_URL_{client.upper()}", url) for client, url in DEFAULT_SHEET_URLS.items()
}

# City cleanup applied at ingestion
CITY_NAME_MAP: dict[str, str] = json.loads(os.getenv("CITY_NAME_MAP", "{}"))
BLACKLISTED_CITIES: list[str] = json.loads(os.getenv("BLACKLISTED_CITIES", "[]"))

# Timestamps and "today" are resolved in this zone
TIMEZONE = os.getenv("DEMAND_TIMEZONE", "UTC")

# Sync
SYNC_RETRY_ATTEMPTS = 3
SYNC_RETRY_WAIT = 1.0
