"""Demand API views - thin layer over services."""

from app.container import container
from app.services.demand import LOCAL
from web.api.errors import validate_clients, validate_range, validate_source

from .schemas import (
    AreaItem,
    CityActivityItem,
    CityActivityResponse,
    CityItem,
    ClientItem,
    HotspotItem,
    HotspotsResponse,
    RecordItem,
    RecordsResponse,
    SummaryResponse,
)


async def get_records(
    start: str,
    end: str | None = None,
    source: str = LOCAL,
    client: str | None = None,
    city: str | None = None,
) -> RecordsResponse:
    """Get demand records, optionally filtered by client and city."""
    validate_range(start, end)
    validate_source(source)
    validate_clients([client] if client else None)
    data = await container.reports.records(start, end, source, client=client, city=city)

    items = [
        RecordItem(
            id=r.id,
            client=r.client,
            city=r.city,
            area=r.area,
            demand_score=r.demand_score,
            timestamp=r.timestamp,
            date=r.date,
        )
        for r in data
    ]

    return RecordsResponse(start=start, end=end or start, source=source, items=items)


async def get_summary(start: str, end: str | None = None, source: str = LOCAL) -> SummaryResponse:
    """Get demand totals by city, client and area."""
    validate_range(start, end)
    validate_source(source)
    data = await container.reports.get_summary(start, end, source)

    return SummaryResponse(
        start=data["start"],
        end=data["end"],
        source=data["source"],
        record_count=data["record_count"],
        total_demand=data["total_demand"],
        cities=[CityItem(**c) for c in data["cities"]],
        clients=[ClientItem(**c) for c in data["clients"]],
        areas=[AreaItem(**a) for a in data["areas"]],
    )


async def get_hotspots(
    start: str,
    end: str | None = None,
    source: str = LOCAL,
    min_clients: int = 2,
    min_demand_per_client: int = 1,
) -> HotspotsResponse:
    """Get cities served by several clients."""
    validate_range(start, end)
    validate_source(source)
    data = await container.reports.get_hotspots(start, end, source, min_clients, min_demand_per_client)

    return HotspotsResponse(
        start=start,
        end=end or start,
        min_clients=min_clients,
        min_demand_per_client=min_demand_per_client,
        items=[HotspotItem(**h) for h in data],
    )


async def get_city_activity(
    start: str,
    end: str | None = None,
    source: str = LOCAL,
    clients: list[str] | None = None,
) -> CityActivityResponse:
    """Get the city x client activity matrix."""
    validate_range(start, end)
    validate_source(source)
    validate_clients(clients)
    data = await container.reports.get_city_activity(start, end, source, clients)

    return CityActivityResponse(
        start=start,
        end=end or start,
        clients=data["clients"],
        rows=[CityActivityItem(**row) for row in data["rows"]],
    )
