"""Local cache repository - mirrored demand records and sync metadata."""

from collections.abc import Iterable
from datetime import datetime

import duckdb
import polars as pl
from loguru import logger

from app.models.demand import (
    DEMAND_RECORD_COLUMNS,
    SYNC_META_ID,
    DemandRecord,
    SyncMeta,
    parse_date_key,
)
from app.repositories.base import BaseRepository

_SELECT = f"SELECT {', '.join(DEMAND_RECORD_COLUMNS)} FROM demand_record"


class LocalCacheRepository(BaseRepository):
    """Embedded record store plus the singleton sync-metadata row."""

    def _to_records(self, rows: list) -> list[DemandRecord]:
        return [DemandRecord.from_row(dict(zip(DEMAND_RECORD_COLUMNS, r))) for r in rows]

    def upsert(self, records: Iterable[DemandRecord]) -> int:
        """Insert or replace records by (id, date); later duplicates win."""
        rows = [r.to_row() for r in records]
        if not rows:
            return 0

        df = (
            pl.DataFrame(rows, schema={c: pl.Int64 if c == "demand_score" else pl.Utf8 for c in DEMAND_RECORD_COLUMNS})
            .select(DEMAND_RECORD_COLUMNS)
            .unique(subset=["id", "date"], keep="last", maintain_order=True)
        )
        self._db.register("records_df", df)
        self.execute("BEGIN TRANSACTION")
        try:
            self.execute(
                """
                DELETE FROM demand_record USING records_df
                WHERE demand_record.id = records_df.id AND demand_record.date = records_df.date
                """
            )
            self.execute("INSERT INTO demand_record SELECT * FROM records_df")
            self.execute("COMMIT")
        except duckdb.Error:
            self.execute("ROLLBACK")
            raise
        finally:
            self._db.unregister("records_df")
        logger.debug("Local upsert: {} records", df.height)
        return df.height

    def delete_by_date(self, date: str) -> int:
        """Remove every cached record for a date."""
        parse_date_key(date)
        count = self.fetchone("SELECT COUNT(*) FROM demand_record WHERE date = ?", [date])[0]
        self.execute("DELETE FROM demand_record WHERE date = ?", [date])
        logger.debug("Local delete for {}: {} records", date, count)
        return count

    def clear_all(self) -> None:
        """Remove every cached record and reset sync metadata."""
        self.execute("DELETE FROM demand_record")
        self.execute("DELETE FROM sync_meta")
        logger.info("Local cache cleared")

    def query_by_date(self, date: str) -> list[DemandRecord]:
        parse_date_key(date)
        rows = self.fetchall(f"{_SELECT} WHERE date = ? ORDER BY demand_score DESC, id", [date])
        return self._to_records(rows)

    def query_range(self, start: str, end: str) -> list[DemandRecord]:
        """Cached records with start <= date <= end."""
        parse_date_key(start)
        parse_date_key(end)
        rows = self.fetchall(
            f"{_SELECT} WHERE date BETWEEN ? AND ? ORDER BY date, demand_score DESC, id",
            [start, end],
        )
        return self._to_records(rows)

    def dates(self) -> list[str]:
        """Distinct cached dates, newest first."""
        return [r[0] for r in self.fetchall("SELECT DISTINCT date FROM demand_record ORDER BY date DESC")]

    def total_count(self) -> int:
        return self.fetchone("SELECT COUNT(*) FROM demand_record")[0]

    def get_sync_meta(self) -> SyncMeta:
        row = self.fetchone("SELECT synced_at FROM sync_meta WHERE id = ?", [SYNC_META_ID])
        if row is None or row[0] is None:
            return SyncMeta()
        return SyncMeta(last_synced_at=datetime.fromisoformat(row[0]))

    def set_sync_meta(self, synced_at: datetime) -> None:
        self.execute(
            "INSERT OR REPLACE INTO sync_meta (id, synced_at) VALUES (?, ?)",
            [SYNC_META_ID, synced_at.isoformat()],
        )
        logger.debug("Sync meta set: {}", synced_at)
