"""Models package - DDL and entities."""

from app.models.common import BaseEntity
from app.models.demand import (
    DEMAND_RECORD_DDL,
    DEMAND_RECORD_INDEXES,
    SYNC_META_DDL,
    DemandRecord,
)

ALL_DDL = [
    DEMAND_RECORD_DDL,
    SYNC_META_DDL,
    *DEMAND_RECORD_INDEXES,
]

__all__ = [
    "BaseEntity",
    "DemandRecord",
    "DEMAND_RECORD_DDL",
    "SYNC_META_DDL",
    # All DDL
    "ALL_DDL",
]
