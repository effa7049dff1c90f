"""Sync orchestration between upstream sheets, the remote store and the local cache."""

from collections import defaultdict
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import duckdb
from loguru import logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.errors import ShardEnumerationError
from app.models.common import OperationResult, SyncResult
from app.models.demand import ClientName, DemandRecord, date_key, parse_date_key
from app.repositories.local import LocalCacheRepository
from app.repositories.remote import RemoteShardedStore
from etl.guard import DateScopeGuard
from etl.ingest import UpstreamResult, fetch_upstream
from settings import (
    BLACKLISTED_CITIES,
    CITY_NAME_MAP,
    SHEET_URLS,
    SYNC_RETRY_ATTEMPTS,
    SYNC_RETRY_WAIT,
    TIMEZONE,
)

UpstreamFetcher = Callable[..., Awaitable[UpstreamResult]]


def today_key(tz: str = TIMEZONE) -> str:
    return date_key(datetime.now(ZoneInfo(tz)))


class SyncReconciler:
    """Keeps the remote store and the local cache in step.

    Full resync replaces remote content with fresh upstream data. Date sync
    mirrors one remote day into the local cache by deleting the cached day
    first and inserting the fetched records after; an interruption in between
    leaves the day empty until the next sync, never duplicated.
    """

    def __init__(
        self,
        store: RemoteShardedStore,
        cache: LocalCacheRepository,
        fetch: UpstreamFetcher = fetch_upstream,
        sheet_urls: Mapping[str, str] = SHEET_URLS,
        city_map: Mapping[str, str] | None = None,
        blacklist: Iterable[str] | None = None,
        retry_attempts: int = SYNC_RETRY_ATTEMPTS,
        retry_wait: float = SYNC_RETRY_WAIT,
    ):
        self._store = store
        self._cache = cache
        self._fetch = fetch
        self._sheet_urls = sheet_urls
        self._city_map = CITY_NAME_MAP if city_map is None else city_map
        self._blacklist = BLACKLISTED_CITIES if blacklist is None else list(blacklist)
        self._retry_attempts = max(1, retry_attempts)
        self._retry_wait = retry_wait
        self._guard = DateScopeGuard()
        logger.debug("SyncReconciler: retry_attempts={}, retry_wait={}", self._retry_attempts, retry_wait)

    # --- Remote ---

    async def full_resync(self, clients: Iterable[ClientName] | None = None) -> SyncResult:
        """Clear the remote store, then write fresh upstream data into it."""
        logger.info("Full resync: clearing remote store")
        clear = await self._store.clear_all()
        if clear.success:
            logger.info(clear.message)
        else:
            logger.error("Failed to clear remote store: {}", clear.message)

        try:
            upstream = await self._fetch(
                self._sheet_urls,
                clients=clients,
                city_map=self._city_map,
                blacklist=self._blacklist,
            )
        except Exception as e:
            logger.exception("Upstream fetch failed during full resync")
            message = f"Upstream fetch failed: {e}"
            if not clear.success:
                message = f"Clearing old data failed ({clear.message}). {message}"
            return SyncResult(success=False, message=message)
        for s in upstream.client_statuses:
            logger.info("Client: {}, Status: {}, Rows: {}, Message: {}", s.client, s.status, s.row_count, s.message or "")

        summary = upstream.summary()
        if not clear.success:
            summary = f"Clearing old data failed ({clear.message}). {summary}"

        if not upstream.records:
            if upstream.failed:
                summary += " No data was retrieved due to errors in all sources or empty sources."
            else:
                summary += " No data was found in any successfully processed source."
            logger.warning(summary)
            return SyncResult(
                success=upstream.failed == 0,
                message=summary,
                client_statuses=upstream.client_statuses,
            )

        write = await self._store.write(upstream.records)
        return SyncResult(
            success=write.success,
            message=f"{summary} {write.message}",
            partial_count=write.partial_count,
            records_synced=write.records_written,
            client_statuses=upstream.client_statuses,
        )

    async def clear_remote(self) -> OperationResult:
        return await self._store.clear_all()

    # --- Local ---

    async def _read_remote_day(self, date: str) -> list[DemandRecord]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_wait, max=30),
            retry=retry_if_exception_type(ShardEnumerationError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("Retrying remote read for {} (attempt {})", date, attempt.retry_state.attempt_number)
                return await self._store.read_point(date, bypass_limits=True)
        return []

    def _replace_day(self, date: str, records: list[DemandRecord]) -> int:
        # Delete before insert: readers may see the day empty, never doubled
        deleted = self._cache.delete_by_date(date)
        logger.debug("Cleared {} cached records for {}", deleted, date)
        return self._cache.upsert(records)

    async def sync_date(self, date: str) -> SyncResult:
        """Mirror one remote day into the local cache and stamp the sync time."""
        try:
            parse_date_key(date)
        except ValueError as e:
            return SyncResult(success=False, message=str(e))

        async with self._guard.date(date):
            try:
                records = await self._read_remote_day(date)
            except ShardEnumerationError as e:
                logger.error("Local sync for {} failed reading remote: {}", date, e.message)
                return SyncResult(success=False, message=f"Could not sync {date} from cloud: {e.message}")

            stray = [r for r in records if r.date != date]
            if stray:
                logger.warning("Dropping {} remote records not dated {}", len(stray), date)
                records = [r for r in records if r.date == date]

            try:
                saved = self._replace_day(date, records)
                self._cache.set_sync_meta(datetime.now(timezone.utc))
            except duckdb.Error as e:
                logger.error("Local sync for {} interrupted: {}", date, e)
                return SyncResult(success=False, message=f"Local sync for {date} failed: {e}")

        logger.info("Local sync for {}: {} records", date, saved)
        return SyncResult(
            success=True,
            message=f"{saved} records for {date} saved to local cache.",
            records_synced=saved,
        )

    async def sync_today(self) -> SyncResult:
        return await self.sync_date(today_key())

    async def cache_batch(self, records: Iterable[DemandRecord]) -> SyncResult:
        """Save freshly ingested records locally, replacing each day they cover."""
        by_date: dict[str, list[DemandRecord]] = defaultdict(list)
        for r in records:
            by_date[r.date].append(r)

        if not by_date:
            return SyncResult(success=True, message="No records to cache.")

        saved = 0
        for date in sorted(by_date):
            async with self._guard.date(date):
                try:
                    saved += self._replace_day(date, by_date[date])
                except duckdb.Error as e:
                    logger.error("Caching records for {} failed: {}", date, e)
                    return SyncResult(
                        success=False,
                        message=f"Local save failed for {date}: {e}",
                        partial_count=saved,
                        records_synced=saved,
                    )

        logger.info("Cached {} records across {} dates", saved, len(by_date))
        return SyncResult(success=True, message=f"Cached {saved} records.", records_synced=saved)

    async def clear_local(self) -> OperationResult:
        """Wipe the local cache once no date sync is in flight."""
        async with self._guard.everything():
            try:
                self._cache.clear_all()
            except duckdb.Error as e:
                logger.error("Error clearing local cache: {}", e)
                return OperationResult(success=False, message=f"Failed to clear local data: {e}")
        return OperationResult(success=True, message="Successfully cleared all local demand data.")

    def status(self) -> dict:
        """Local cache status."""
        meta = self._cache.get_sync_meta()
        return {
            "last_synced_at": meta.last_synced_at,
            "total_records": self._cache.total_count(),
            "dates": self._cache.dates(),
        }
