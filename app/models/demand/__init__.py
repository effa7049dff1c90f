"""Demand domain models - records, keys, tables and aggregate entities."""

from app.models.demand.client import ALL_CLIENTS, ClientName
from app.models.demand.entities import (
    AreaDemand,
    CityActivityRow,
    CityDemand,
    ClientDemand,
    MultiClientHotspot,
    SyncMeta,
)
from app.models.demand.record import (
    DATE_KEY_FORMAT,
    SYNC_META_ID,
    DemandRecord,
    date_key,
    parse_date_key,
    shard_key,
    start_of_day,
)
from app.models.demand.tables import (
    DEMAND_RECORD_COLUMNS,
    DEMAND_RECORD_DDL,
    DEMAND_RECORD_INDEXES,
    SYNC_META_DDL,
)

__all__ = [
    # Record
    "DemandRecord",
    "DATE_KEY_FORMAT",
    "SYNC_META_ID",
    "date_key",
    "parse_date_key",
    "shard_key",
    "start_of_day",
    # Clients
    "ClientName",
    "ALL_CLIENTS",
    # Tables
    "DEMAND_RECORD_DDL",
    "DEMAND_RECORD_INDEXES",
    "DEMAND_RECORD_COLUMNS",
    "SYNC_META_DDL",
    # Entities
    "CityDemand",
    "ClientDemand",
    "AreaDemand",
    "MultiClientHotspot",
    "CityActivityRow",
    "SyncMeta",
]
