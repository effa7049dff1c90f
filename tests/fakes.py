"""Test doubles: in-memory document backend with failure injection, record factory."""

from datetime import datetime, timezone

from app.errors import ConnectivityError
from app.models.demand import DemandRecord, parse_date_key
from app.repositories.remote.backend import DailyDoc, ShardDoc


class InMemoryBatch:
    def __init__(self, backend: "InMemoryBackend"):
        self._backend = backend
        self._ops: list[tuple] = []

    def upsert_shard(self, shard_id: str, data: dict) -> None:
        self._ops.append(("upsert_shard", shard_id, data))

    def set_daily(self, shard_id: str, date: str, data: dict) -> None:
        self._ops.append(("set_daily", shard_id, date, data))

    def delete_daily(self, shard_id: str, date: str) -> None:
        self._ops.append(("delete_daily", shard_id, date))

    def delete_shard(self, shard_id: str) -> None:
        self._ops.append(("delete_shard", shard_id))

    async def commit(self) -> None:
        self._backend.commit_attempts += 1
        if self._backend.commit_attempts == self._backend.fail_commit_at:
            raise ConnectivityError("injected commit failure")
        self._backend.commits.append(len(self._ops))
        for op in self._ops:
            self._backend.apply(op)


class InMemoryBackend:
    """Dict-backed DocumentBackend.

    ``fail_commit_at`` fails the n-th commit (1-based), ``fail_list_shards``
    fails shard enumeration and ``failing_shards`` fails reads of those shards.
    """

    def __init__(self):
        self.shards: dict[str, dict] = {}
        self.daily: dict[str, dict[str, dict]] = {}
        self.commits: list[int] = []
        self.commit_attempts = 0
        self.fail_commit_at: int | None = None
        self.fail_list_shards = 0
        self.failing_shards: set[str] = set()
        self.list_calls: list[int | None] = []

    def apply(self, op: tuple) -> None:
        kind, shard_id = op[0], op[1]
        if kind == "upsert_shard":
            self.shards.setdefault(shard_id, {}).update(op[2])
        elif kind == "set_daily":
            self.daily.setdefault(shard_id, {})[op[2]] = dict(op[3])
        elif kind == "delete_daily":
            self.daily.get(shard_id, {}).pop(op[2], None)
        elif kind == "delete_shard":
            self.shards.pop(shard_id, None)

    def batch(self) -> InMemoryBatch:
        return InMemoryBatch(self)

    async def list_shards(self, client=None, city=None, limit=None) -> list[ShardDoc]:
        self.list_calls.append(limit)
        if self.fail_list_shards:
            self.fail_list_shards -= 1
            raise ConnectivityError("injected listing failure")
        docs = [
            ShardDoc(shard_id, dict(data))
            for shard_id, data in sorted(self.shards.items())
            if (not client or data.get("client") == client) and (not city or data.get("city") == city)
        ]
        return docs[:limit] if limit else docs

    async def list_daily(self, shard_id: str) -> list[DailyDoc]:
        return [DailyDoc(d, dict(v)) for d, v in sorted(self.daily.get(shard_id, {}).items())]

    async def get_daily(self, shard_id: str, date: str) -> dict | None:
        if shard_id in self.failing_shards:
            raise ConnectivityError(f"injected read failure for {shard_id}")
        entry = self.daily.get(shard_id, {}).get(date)
        return dict(entry) if entry is not None else None

    async def query_daily_range(self, shard_id: str, start: str, end: str) -> list[DailyDoc]:
        if shard_id in self.failing_shards:
            raise ConnectivityError(f"injected read failure for {shard_id}")
        return [
            DailyDoc(d, dict(v))
            for d, v in sorted(self.daily.get(shard_id, {}).items())
            if start <= d <= end
        ]

    def daily_count(self) -> int:
        return sum(len(v) for v in self.daily.values())


def make_record(
    client: str = "Blinkit",
    city: str = "Mumbai",
    area: str = "Andheri",
    score: int = 10,
    date: str = "2024-01-05",
    id: str | None = None,
    hour: int = 9,
):
    """DemandRecord stamped at ``hour`` UTC on ``date``."""
    day = parse_date_key(date)
    return DemandRecord(
        id=id or f"{client}-{city}-{area}-{date}",
        client=client,
        city=city,
        area=area,
        demand_score=score,
        timestamp=datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc),
    )
