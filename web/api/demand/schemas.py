"""Demand API response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class RecordItem(BaseModel):
    """Single demand record."""

    id: str
    client: str
    city: str
    area: str
    demand_score: int = Field(alias="demandScore")
    timestamp: datetime
    date: str

    class Config:
        populate_by_name = True


class RecordsResponse(BaseModel):
    """Demand records for a date or range."""

    start: str
    end: str
    source: str
    items: list[RecordItem]


class CityItem(BaseModel):
    city: str
    total_demand: int


class ClientItem(BaseModel):
    client: str
    total_demand: int


class AreaItem(BaseModel):
    city: str
    area: str
    total_demand: int
    clients: list[str]


class SummaryResponse(BaseModel):
    """Demand totals by city, client and area."""

    start: str
    end: str
    source: str
    record_count: int
    total_demand: int
    cities: list[CityItem]
    clients: list[ClientItem]
    areas: list[AreaItem]


class HotspotItem(BaseModel):
    """Multi-client hotspot city."""

    city: str
    active_clients: list[str]
    total_demand: int
    client_count: int


class HotspotsResponse(BaseModel):
    start: str
    end: str
    min_clients: int
    min_demand_per_client: int
    items: list[HotspotItem]


class CityActivityItem(BaseModel):
    """One row of the city x client activity matrix."""

    city: str
    presence: dict[str, bool]
    top_area: dict[str, str]
    active_count: int


class CityActivityResponse(BaseModel):
    start: str
    end: str
    clients: list[str]
    rows: list[CityActivityItem]
