"""Document backend contract for the remote sharded store.

Layout: one shard document per ``client_city_area`` holding
``{client, city, area}``, each owning a ``daily`` child collection keyed by
``YYYY-MM-DD`` with ``{demandScore, timestamp, sourceRecordId}``.

Implementations raise ``ConnectivityError`` for any backend failure.
"""

from typing import NamedTuple, Protocol


class ShardDoc(NamedTuple):
    shard_id: str
    data: dict


class DailyDoc(NamedTuple):
    date: str
    data: dict


class BackendBatch(Protocol):
    """Write batch committed atomically by the backend."""

    def upsert_shard(self, shard_id: str, data: dict) -> None:
        """Merge fields into the shard document."""

    def set_daily(self, shard_id: str, date: str, data: dict) -> None:
        """Overwrite the daily entry for a date."""

    def delete_daily(self, shard_id: str, date: str) -> None: ...

    def delete_shard(self, shard_id: str) -> None: ...

    async def commit(self) -> None: ...


class DocumentBackend(Protocol):
    """Capacity-limited, batched document store."""

    def batch(self) -> BackendBatch: ...

    async def list_shards(
        self,
        client: str | None = None,
        city: str | None = None,
        limit: int | None = None,
    ) -> list[ShardDoc]: ...

    async def list_daily(self, shard_id: str) -> list[DailyDoc]: ...

    async def get_daily(self, shard_id: str, date: str) -> dict | None: ...

    async def query_daily_range(self, shard_id: str, start: str, end: str) -> list[DailyDoc]:
        """Daily entries with start <= id <= end, ascending by id."""
