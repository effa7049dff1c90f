"""Demand aggregate entities - recomputed on demand, never stored."""

from dataclasses import dataclass, field
from datetime import datetime

from app.models.common import BaseEntity


@dataclass
class CityDemand(BaseEntity):
    """Total demand in one city."""

    city: str
    total_demand: int


@dataclass
class ClientDemand(BaseEntity):
    """Total demand for one client."""

    client: str
    total_demand: int


@dataclass
class AreaDemand(BaseEntity):
    """Total demand in one area of a city, with contributing clients."""

    city: str
    area: str
    total_demand: int
    clients: list[str] = field(default_factory=list)


@dataclass
class MultiClientHotspot(BaseEntity):
    """City where several clients each reach a demand threshold."""

    city: str
    active_clients: list[str]
    total_demand: int
    client_count: int


@dataclass
class CityActivityRow(BaseEntity):
    """Presence and top area of each selected client in one city."""

    city: str
    presence: dict[str, bool]
    top_area: dict[str, str]
    active_count: int


@dataclass
class SyncMeta(BaseEntity):
    """When the local cache was last reconciled."""

    last_synced_at: datetime | None = None
