"""Demand report service - loads records and runs the aggregation engine."""

from collections.abc import Iterable

from app.models.demand import ALL_CLIENTS, DemandRecord, parse_date_key
from app.repositories.local import LocalCacheRepository
from app.repositories.remote import RemoteShardedStore
from app.services.demand import aggregation

LOCAL = "local"
REMOTE = "remote"
SOURCES = (LOCAL, REMOTE)


class DemandReportService:
    """Demand report business logic over either the local cache or the remote store."""

    def __init__(self, store: RemoteShardedStore, cache: LocalCacheRepository):
        self._store = store
        self._cache = cache

    async def records(
        self,
        start: str,
        end: str | None = None,
        source: str = LOCAL,
        client: str | None = None,
        city: str | None = None,
    ) -> list[DemandRecord]:
        """Records for one date, or for start..end when ``end`` is given.

        Raises ValueError for a malformed date or unknown source and
        ShardEnumerationError when the remote store cannot be listed.
        """
        if source not in SOURCES:
            raise ValueError(f"Unknown source: {source}. Must be one of {', '.join(SOURCES)}")
        parse_date_key(start)
        if end is not None:
            parse_date_key(end)

        if source == REMOTE:
            if end is None:
                return await self._store.read_point(start, client=client, city=city)
            return await self._store.read_range(start, end, client=client, city=city)

        if end is None:
            rows = self._cache.query_by_date(start)
        else:
            rows = self._cache.query_range(start, end)

        city = city.strip() if city else None
        return [r for r in rows if (not client or r.client == client) and (not city or r.city == city)]

    async def get_summary(self, start: str, end: str | None = None, source: str = LOCAL) -> dict:
        """City, client and area totals for a date or range."""
        recs = await self.records(start, end, source)
        return {
            "start": start,
            "end": end or start,
            "source": source,
            "record_count": len(recs),
            "total_demand": sum(r.demand_score for r in recs),
            "cities": [c.to_dict() for c in aggregation.city_demand(recs)],
            "clients": [c.to_dict() for c in aggregation.client_demand(recs)],
            "areas": [a.to_dict() for a in aggregation.area_demand(recs)],
        }

    async def get_hotspots(
        self,
        start: str,
        end: str | None = None,
        source: str = LOCAL,
        min_clients: int = 2,
        min_demand_per_client: int = 1,
    ) -> list[dict]:
        """Cities served by several clients with meaningful demand."""
        recs = await self.records(start, end, source)
        hotspots = aggregation.multi_client_hotspots(recs, min_clients, min_demand_per_client)
        return [h.to_dict() for h in hotspots]

    async def get_city_activity(
        self,
        start: str,
        end: str | None = None,
        source: str = LOCAL,
        clients: Iterable[str] | None = None,
    ) -> dict:
        """Client presence matrix per city."""
        selected = [str(c) for c in clients] if clients else [c.value for c in ALL_CLIENTS]
        recs = await self.records(start, end, source)
        rows = aggregation.city_activity_matrix(recs, selected)
        return {
            "clients": selected,
            "rows": [row.to_dict() for row in rows],
        }
