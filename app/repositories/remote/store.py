"""Remote sharded store - batched writes and capped reads over a document backend."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime

from loguru import logger

from app.errors import ConnectivityError, PartialWriteError, QuotaExceededError, ShardEnumerationError
from app.models.common import ClearResult, WriteResult
from app.models.demand import DemandRecord, parse_date_key, start_of_day
from app.repositories.remote.backend import BackendBatch, DocumentBackend, ShardDoc
from settings import (
    ANALYSIS_QUERY_CAP,
    BATCH_OPERATION_CEILING,
    BROAD_QUERY_CAP,
    MAX_CONCURRENT_READS,
    MAX_RESULTS,
)

# shard upsert + daily upsert
OPS_PER_RECORD = 2


class CappedBatch:
    """Backend batch that refuses to grow past the operation ceiling."""

    def __init__(self, batch: BackendBatch, ceiling: int):
        self.batch = batch
        self.ceiling = ceiling
        self.ops = 0

    def reserve(self, ops: int) -> None:
        if self.ops + ops > self.ceiling:
            raise QuotaExceededError(f"Batch would hold {self.ops + ops} operations (ceiling {self.ceiling})")
        self.ops += ops


class BatchChain:
    """Strictly sequential chain of capped batches.

    Units (records or deletions) count as committed only once the batch
    holding them commits. A failed commit raises PartialWriteError carrying
    the units committed by earlier batches; those are not rolled back.
    """

    def __init__(self, backend: DocumentBackend, ceiling: int):
        self._backend = backend
        self._ceiling = ceiling
        self._current = CappedBatch(backend.batch(), ceiling)
        self._pending = 0
        self.committed = 0
        self.batches = 0

    async def stage(self, ops: int, apply: Callable[[BackendBatch], None]) -> None:
        try:
            self._current.reserve(ops)
        except QuotaExceededError:
            await self.flush()
            self._current.reserve(ops)
        apply(self._current.batch)
        self._pending += 1

    async def flush(self) -> None:
        """Commit the current batch if it holds anything."""
        if not self._current.ops:
            return

        logger.debug("Committing batch #{} ({} ops)", self.batches + 1, self._current.ops)
        try:
            await self._current.batch.commit()
        except ConnectivityError as e:
            raise PartialWriteError(
                f"Batch #{self.batches + 1} commit failed: {e.message}",
                committed=self.committed,
            ) from e

        self.batches += 1
        self.committed += self._pending
        self._pending = 0
        self._current = CappedBatch(self._backend.batch(), self._ceiling)


class RemoteShardedStore:
    """Demand records sharded by (client, city, area) with one entry per day."""

    def __init__(
        self,
        backend: DocumentBackend,
        ceiling: int = BATCH_OPERATION_CEILING,
        broad_cap: int = BROAD_QUERY_CAP,
        analysis_cap: int = ANALYSIS_QUERY_CAP,
        max_results: int = MAX_RESULTS,
        max_concurrent: int = MAX_CONCURRENT_READS,
    ):
        if ceiling < OPS_PER_RECORD:
            raise ValueError(f"Operation ceiling must be at least {OPS_PER_RECORD}, got {ceiling}")
        self._backend = backend
        self._ceiling = ceiling
        self._broad_cap = broad_cap
        self._analysis_cap = analysis_cap
        self._max_results = max_results
        self._max_concurrent = max_concurrent
        logger.debug("RemoteShardedStore: ceiling={}, caps={}/{}", ceiling, broad_cap, analysis_cap)

    # --- Writes ---

    async def write(self, records: Iterable[DemandRecord]) -> WriteResult:
        """Persist records; batches commit in order and are not rolled back on failure."""
        records = list(records)
        if not records:
            return WriteResult(success=True, message="No records to write.")

        logger.info("Writing {} records (ceiling {} ops/batch)", len(records), self._ceiling)
        chain = BatchChain(self._backend, self._ceiling)
        try:
            for record in records:
                await chain.stage(OPS_PER_RECORD, lambda batch, r=record: self._stage_record(batch, r))
            await chain.flush()
        except PartialWriteError as e:
            logger.error("Write aborted: {} ({} records committed)", e.message, e.committed)
            return WriteResult(
                success=False,
                message=f"Failed to save data: {e.message}. {e.committed} records saved before error.",
                partial_count=e.committed,
                records_written=e.committed,
                batches_committed=chain.batches,
            )

        logger.info("Write complete: {} records in {} batches", chain.committed, chain.batches)
        return WriteResult(
            success=True,
            message=f"Successfully saved {chain.committed} demand records.",
            records_written=chain.committed,
            batches_committed=chain.batches,
        )

    @staticmethod
    def _stage_record(batch: BackendBatch, record: DemandRecord) -> None:
        shard_id = record.shard_id
        batch.upsert_shard(shard_id, {"client": record.client, "city": record.city, "area": record.area})
        batch.set_daily(
            shard_id,
            record.date,
            {
                "demandScore": record.demand_score,
                "timestamp": record.timestamp,
                "sourceRecordId": record.id,
            },
        )

    async def clear_all(self) -> ClearResult:
        """Delete every daily entry, then every shard document."""
        try:
            shards = await self._backend.list_shards()
        except ConnectivityError as e:
            logger.error("Clear failed listing shards: {}", e.message)
            return ClearResult(success=False, message=f"Failed to clear data: {e.message}")

        if not shards:
            return ClearResult(success=True, message="Remote store is already empty.")

        daily_chain = BatchChain(self._backend, self._ceiling)
        shard_chain = BatchChain(self._backend, self._ceiling)
        try:
            for shard in shards:
                for entry in await self._backend.list_daily(shard.shard_id):
                    await daily_chain.stage(
                        1, lambda batch, s=shard.shard_id, d=entry.date: batch.delete_daily(s, d)
                    )
            await daily_chain.flush()

            for shard in await self._backend.list_shards():
                await shard_chain.stage(1, lambda batch, s=shard.shard_id: batch.delete_shard(s))
            await shard_chain.flush()
        except (PartialWriteError, ConnectivityError) as e:
            deleted = daily_chain.committed + shard_chain.committed
            logger.error("Clear aborted: {} ({} deletions committed)", e.message, deleted)
            return ClearResult(
                success=False,
                message=f"Failed to clear data: {e.message}",
                partial_count=deleted,
                shards_deleted=shard_chain.committed,
                daily_entries_deleted=daily_chain.committed,
            )

        logger.info("Cleared {} shards, {} daily entries", shard_chain.committed, daily_chain.committed)
        return ClearResult(
            success=True,
            message=(
                f"Successfully cleared all data ({shard_chain.committed} entities, "
                f"{daily_chain.committed} daily records)."
            ),
            shards_deleted=shard_chain.committed,
            daily_entries_deleted=daily_chain.committed,
        )

    # --- Reads ---

    async def read_point(
        self,
        date: str,
        client: str | None = None,
        city: str | None = None,
        bypass_limits: bool = False,
    ) -> list[DemandRecord]:
        """Records for one date, highest demand first."""
        parse_date_key(date)
        city = city.strip() if city else None
        broad = not client and not city
        cap = self._analysis_cap if bypass_limits else self._broad_cap

        shards = await self._list_shards(client, city, limit=cap if broad else None)
        if broad and len(shards) >= cap:
            logger.warning("Broad query for {} hit the shard limit of {}. Results may be partial.", date, cap)
        elif not broad and len(shards) > cap:
            logger.warning(
                "Query (client={}, city={}) for {} matched {} shards, capping to {}",
                client,
                city,
                date,
                len(shards),
                cap,
            )
            shards = shards[:cap]

        sem = asyncio.Semaphore(self._max_concurrent)

        async def read(shard: ShardDoc) -> list[DemandRecord]:
            data = await self._backend.get_daily(shard.shard_id, date)
            return [self._to_record(shard, date, data)] if data is not None else []

        records = await self._gather(shards, read, sem)
        records.sort(key=lambda r: r.demand_score, reverse=True)

        if not bypass_limits and len(records) > self._max_results:
            logger.warning("Query for {} returned {} records, slicing to {}", date, len(records), self._max_results)
            return records[: self._max_results]
        return records

    async def read_range(
        self,
        start: str,
        end: str,
        client: str | None = None,
        city: str | None = None,
    ) -> list[DemandRecord]:
        """Records with start <= date <= end, ordered by date then demand."""
        parse_date_key(start)
        parse_date_key(end)
        if start > end:
            logger.warning("Empty date range {}..{}", start, end)
            return []

        city = city.strip() if city else None
        shards = await self._list_shards(client, city, limit=self._analysis_cap)
        if len(shards) >= self._analysis_cap:
            logger.warning("Range query hit the shard limit of {}. Results may be partial.", self._analysis_cap)

        sem = asyncio.Semaphore(self._max_concurrent)

        async def read(shard: ShardDoc) -> list[DemandRecord]:
            entries = await self._backend.query_daily_range(shard.shard_id, start, end)
            return [self._to_record(shard, e.date, e.data) for e in entries]

        records = await self._gather(shards, read, sem)
        records.sort(key=lambda r: (r.date, -r.demand_score))

        if len(records) > self._max_results:
            logger.warning("Range query returned {} records, slicing to {}", len(records), self._max_results)
            return records[: self._max_results]
        return records

    async def _list_shards(self, client: str | None, city: str | None, limit: int | None) -> list[ShardDoc]:
        try:
            return await self._backend.list_shards(client=client, city=city, limit=limit)
        except ConnectivityError as e:
            logger.error("Shard enumeration failed: {}", e.message)
            raise ShardEnumerationError(f"Could not list shards: {e.message}") from e

    @staticmethod
    async def _gather(
        shards: list[ShardDoc],
        read: Callable[[ShardDoc], Awaitable[list[DemandRecord]]],
        sem: asyncio.Semaphore,
    ) -> list[DemandRecord]:
        """Run per-shard reads; failed shards are logged and skipped."""

        async def guarded(shard: ShardDoc) -> list[DemandRecord]:
            async with sem:
                try:
                    return await read(shard)
                except (ConnectivityError, ValueError) as e:
                    logger.warning("Skipping shard {}: {}", shard.shard_id, e)
                    return []

        results = await asyncio.gather(*[guarded(s) for s in shards])
        return [r for batch in results for r in batch]

    @staticmethod
    def _to_record(shard: ShardDoc, date: str, data: dict) -> DemandRecord:
        timestamp = data.get("timestamp")
        if not isinstance(timestamp, datetime):
            timestamp = start_of_day(date)
        return DemandRecord(
            id=data.get("sourceRecordId") or f"{shard.shard_id}_{date}",
            client=shard.data.get("client", ""),
            city=shard.data.get("city", ""),
            area=shard.data.get("area", ""),
            demand_score=int(data.get("demandScore") or 0),
            timestamp=timestamp,
            date=date,
        )
