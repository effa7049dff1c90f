"""Tests for the local cache repository."""

from datetime import datetime, timezone

import duckdb
import pytest

from app.models.demand import DEMAND_RECORD_DDL, SYNC_META_DDL
from app.repositories.db import close_db, get_db
from app.repositories.local import LocalCacheRepository
from etl.validation import validate_date
from tests.fakes import make_record


@pytest.fixture
def cache():
    conn = duckdb.connect(":memory:")
    yield LocalCacheRepository(conn)
    conn.close()


class TestUpsert:
    def test_insert_and_query(self, cache):
        records = [make_record(area="a", score=2), make_record(area="b", score=8)]
        assert cache.upsert(records) == 2

        result = cache.query_by_date("2024-01-05")
        assert [r.area for r in result] == ["b", "a"]
        assert result[1] == records[0]

    def test_empty(self, cache):
        assert cache.upsert([]) == 0
        assert cache.total_count() == 0

    def test_replace_by_identity(self, cache):
        cache.upsert([make_record(id="x", score=1)])
        cache.upsert([make_record(id="x", score=9)])

        result = cache.query_by_date("2024-01-05")
        assert [(r.id, r.demand_score) for r in result] == [("x", 9)]

    def test_duplicates_in_one_call_keep_last(self, cache):
        assert cache.upsert([make_record(id="x", score=1), make_record(id="x", score=4)]) == 1
        assert cache.query_by_date("2024-01-05")[0].demand_score == 4

    def test_same_id_on_different_dates_kept(self, cache):
        cache.upsert([make_record(id="x", date="2024-01-05"), make_record(id="x", date="2024-01-06")])
        assert cache.total_count() == 2

    def test_large_score(self, cache):
        cache.upsert([make_record(id="x", score=5)])
        cache.upsert([make_record(id="x", score=3_000_000_000)])
        assert [r.demand_score for r in cache.query_by_date("2024-01-05")] == [3_000_000_000]

    def test_failed_insert_keeps_existing_row(self):
        conn = duckdb.connect(":memory:")
        conn.execute(DEMAND_RECORD_DDL.replace("BIGINT", "INTEGER"))
        conn.execute(SYNC_META_DDL)
        cache = LocalCacheRepository(conn)
        cache.upsert([make_record(id="x", score=5)])

        with pytest.raises(duckdb.Error):
            cache.upsert([make_record(id="x", score=3_000_000_000)])

        assert [(r.id, r.demand_score) for r in cache.query_by_date("2024-01-05")] == [("x", 5)]
        conn.close()


class TestDelete:
    def test_delete_by_date(self, cache):
        cache.upsert([make_record(area="a"), make_record(area="b"), make_record(area="c", date="2024-01-06")])

        assert cache.delete_by_date("2024-01-05") == 2
        assert cache.query_by_date("2024-01-05") == []
        assert len(cache.query_by_date("2024-01-06")) == 1

    def test_delete_missing_date(self, cache):
        assert cache.delete_by_date("2024-01-05") == 0

    def test_clear_all(self, cache):
        cache.upsert([make_record(), make_record(date="2024-01-06")])
        cache.set_sync_meta(datetime(2024, 1, 6, tzinfo=timezone.utc))

        cache.clear_all()
        assert cache.total_count() == 0
        assert cache.get_sync_meta().last_synced_at is None


class TestQueries:
    def test_range(self, cache):
        cache.upsert([make_record(date=d) for d in ["2024-01-04", "2024-01-05", "2024-01-10", "2024-01-11"]])
        assert [r.date for r in cache.query_range("2024-01-05", "2024-01-10")] == ["2024-01-05", "2024-01-10"]

    def test_dates_newest_first(self, cache):
        cache.upsert([make_record(date="2024-01-04"), make_record(date="2024-01-06"), make_record(area="b")])
        assert cache.dates() == ["2024-01-06", "2024-01-05", "2024-01-04"]

    def test_invalid_date(self, cache):
        with pytest.raises(ValueError):
            cache.query_by_date("5/1/2024")


class TestSyncMeta:
    def test_default_empty(self, cache):
        assert cache.get_sync_meta().last_synced_at is None

    def test_set_and_overwrite(self, cache):
        first = datetime(2024, 1, 5, 10, tzinfo=timezone.utc)
        second = datetime(2024, 1, 6, 11, tzinfo=timezone.utc)
        cache.set_sync_meta(first)
        cache.set_sync_meta(second)
        assert cache.get_sync_meta().last_synced_at == second


class TestValidation:
    def test_valid_date(self, cache):
        cache.upsert([make_record("Zepto", area="a", score=3), make_record("Blinkit", area="a", score=4)])
        result = validate_date(cache._db, "2024-01-05")
        assert result["valid"]
        assert result["stats"]["records"] == 2
        assert result["stats"]["total_demand"] == 7

    def test_empty_date(self, cache):
        result = validate_date(cache._db, "2024-01-05")
        assert not result["valid"]
        assert result["stats"]["records"] == 0

    def test_duplicate_shard_rows(self, cache):
        cache.upsert([make_record(id="1"), make_record(id="2")])
        result = validate_date(cache._db, "2024-01-05")
        assert not result["valid"]
        assert result["stats"]["duplicate_shards"] == 1


class TestConnection:
    def test_close_db_resets_thread_connection(self):
        first = get_db(":memory:")
        assert get_db(":memory:") is first

        close_db()
        second = get_db(":memory:")
        assert second is not first
        close_db()

    def test_close_db_without_connection(self):
        close_db()
        close_db()
