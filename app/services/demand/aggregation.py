"""Demand aggregation - pure functions over in-memory record sets.

Every function accepts any iterable of records (remote query results or
local cache rows) and never performs I/O. Records with a missing or
malformed score contribute zero instead of failing the computation.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from app.models.demand import (
    AreaDemand,
    CityActivityRow,
    CityDemand,
    ClientDemand,
    MultiClientHotspot,
)


def _field(record: Any, name: str) -> str:
    if isinstance(record, dict):
        value = record.get(name)
    else:
        value = getattr(record, name, None)
    return "" if value is None else str(value)


def _score(record: Any) -> int:
    if isinstance(record, dict):
        value = record.get("demand_score", record.get("demandScore"))
    else:
        value = getattr(record, "demand_score", None)
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _ranked(totals: dict[str, int]) -> list[tuple[str, int]]:
    """Highest total first, name ascending on ties."""
    return sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))


def city_demand(records: Iterable) -> list[CityDemand]:
    totals: dict[str, int] = defaultdict(int)
    for r in records:
        totals[_field(r, "city")] += _score(r)
    return [CityDemand(city=c, total_demand=t) for c, t in _ranked(totals)]


def client_demand(records: Iterable) -> list[ClientDemand]:
    totals: dict[str, int] = defaultdict(int)
    for r in records:
        totals[_field(r, "client")] += _score(r)
    return [ClientDemand(client=c, total_demand=t) for c, t in _ranked(totals)]


def area_demand(records: Iterable) -> list[AreaDemand]:
    """Demand per (city, area) with the clients that contributed to it."""
    totals: dict[tuple[str, str], int] = defaultdict(int)
    clients: dict[tuple[str, str], set[str]] = defaultdict(set)
    for r in records:
        key = (_field(r, "city"), _field(r, "area"))
        totals[key] += _score(r)
        clients[key].add(_field(r, "client"))

    rows = [
        AreaDemand(city=city, area=area, total_demand=total, clients=sorted(clients[(city, area)]))
        for (city, area), total in totals.items()
    ]
    return sorted(rows, key=lambda a: (-a.total_demand, a.city, a.area))


def _per_city_client(records: Iterable) -> dict[str, dict[str, int]]:
    result: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for r in records:
        result[_field(r, "city")][_field(r, "client")] += _score(r)
    return result


def multi_client_hotspots(
    records: Iterable,
    min_clients: int = 2,
    min_demand_per_client: int = 1,
) -> list[MultiClientHotspot]:
    """Cities where at least ``min_clients`` clients each reach ``min_demand_per_client``.

    ``total_demand`` only counts the active clients of the city.
    """
    hotspots = []
    for city, by_client in _per_city_client(records).items():
        active = sorted(c for c, total in by_client.items() if total >= min_demand_per_client)
        if len(active) < min_clients:
            continue
        hotspots.append(
            MultiClientHotspot(
                city=city,
                active_clients=active,
                total_demand=sum(by_client[c] for c in active),
                client_count=len(active),
            )
        )
    return sorted(hotspots, key=lambda h: (-h.client_count, -h.total_demand, h.city))


def top_area(area_totals: dict[str, int]) -> str | None:
    """Area with the highest total, alphabetically first on ties."""
    ranked = _ranked(area_totals)
    return ranked[0][0] if ranked else None


def city_activity_matrix(records: Iterable, selected_clients: Iterable[str]) -> list[CityActivityRow]:
    """Presence and top area of each selected client, one row per city."""
    selected = [str(c) for c in selected_clients]

    # city -> client -> area -> total
    areas: dict[str, dict[str, dict[str, int]]] = defaultdict(lambda: defaultdict(lambda: defaultdict(int)))
    for r in records:
        areas[_field(r, "city")][_field(r, "client")][_field(r, "area")] += _score(r)

    rows = []
    for city, by_client in areas.items():
        presence = {c: c in by_client for c in selected}
        top = {c: top_area(by_client[c]) for c in selected if presence[c]}
        rows.append(
            CityActivityRow(
                city=city,
                presence=presence,
                top_area=top,
                active_count=sum(presence.values()),
            )
        )
    return sorted(rows, key=lambda row: (-row.active_count, row.city))
