"""Tests for the remote sharded store."""

import asyncio
from datetime import datetime

import pytest

from app.errors import ShardEnumerationError
from app.repositories.remote import RemoteShardedStore
from tests.fakes import InMemoryBackend, make_record


def _store(backend=None, **kwargs) -> RemoteShardedStore:
    return RemoteShardedStore(backend or InMemoryBackend(), **kwargs)


def _many(n: int, date: str = "2024-01-05"):
    return [make_record("Zepto", "Pune", f"area{i:04d}", i % 50, date) for i in range(n)]


class TestWrite:
    def test_round_trip(self):
        store = _store()
        record = make_record("Blinkit", "Mumbai", "Andheri", 12, "2024-01-05")
        assert asyncio.run(store.write([record])).success

        result = asyncio.run(store.read_point("2024-01-05"))
        assert len(result) == 1
        got = result[0]
        assert (got.client, got.city, got.area, got.demand_score, got.date) == (
            "Blinkit",
            "Mumbai",
            "Andheri",
            12,
            "2024-01-05",
        )
        assert got.id == record.id
        assert got.timestamp == record.timestamp

    def test_empty_input(self):
        backend = InMemoryBackend()
        result = asyncio.run(_store(backend).write([]))
        assert result.success
        assert backend.commits == []

    def test_same_shard_and_date_overwrites(self):
        store = _store()
        asyncio.run(store.write([make_record(score=5, id="a")]))
        asyncio.run(store.write([make_record(score=9, id="b")]))

        result = asyncio.run(store.read_point("2024-01-05"))
        assert [(r.id, r.demand_score) for r in result] == [("b", 9)]

    def test_shard_fields_merged(self):
        backend = InMemoryBackend()
        store = _store(backend)
        record = make_record(score=5)
        asyncio.run(store.write([record]))
        backend.shards[record.shard_id]["region"] = "West"

        asyncio.run(store.write([make_record(score=8, date="2024-01-06")]))

        assert backend.shards[record.shard_id] == {
            "client": "Blinkit",
            "city": "Mumbai",
            "area": "Andheri",
            "region": "West",
        }
        assert len(backend.daily[record.shard_id]) == 2

    def test_batches_respect_ceiling(self):
        backend = InMemoryBackend()
        result = asyncio.run(_store(backend, ceiling=490).write(_many(1000)))

        assert result.success
        assert result.records_written == 1000
        assert len(backend.commits) == 5
        assert all(ops <= 490 for ops in backend.commits)
        assert sum(backend.commits) == 2000
        assert result.batches_committed == 5

    def test_small_ceiling(self):
        backend = InMemoryBackend()
        asyncio.run(_store(backend, ceiling=3).write(_many(4)))
        assert backend.commits == [2, 2, 2, 2]

    def test_ceiling_below_one_record_rejected(self):
        with pytest.raises(ValueError):
            _store(ceiling=1)

    def test_partial_write(self):
        backend = InMemoryBackend()
        backend.fail_commit_at = 3
        result = asyncio.run(_store(backend, ceiling=490).write(_many(1000)))

        assert not result.success
        assert result.partial_count == 490
        assert result.records_written == 490
        assert backend.daily_count() == 490


class TestClear:
    def test_clear_removes_everything(self):
        backend = InMemoryBackend()
        store = _store(backend, ceiling=10)
        asyncio.run(store.write(_many(30, "2024-01-05") + _many(30, "2024-01-06")))

        result = asyncio.run(store.clear_all())
        assert result.success
        assert result.shards_deleted == 30
        assert result.daily_entries_deleted == 60
        assert backend.shards == {}
        assert backend.daily_count() == 0
        assert asyncio.run(store.read_point("2024-01-05")) == []
        assert all(ops <= 10 for ops in backend.commits)

    def test_full_range_empty_after_clear(self):
        store = _store()
        asyncio.run(store.write(_many(5, "2024-01-05") + _many(5, "2024-02-01")))
        asyncio.run(store.clear_all())
        assert asyncio.run(store.read_range("0001-01-01", "9999-12-31")) == []

    def test_clear_empty_store(self):
        result = asyncio.run(_store().clear_all())
        assert result.success

    def test_clear_listing_failure(self):
        backend = InMemoryBackend()
        backend.fail_list_shards = 1
        result = asyncio.run(_store(backend).clear_all())
        assert not result.success

    def test_clear_commit_failure_reports_progress(self):
        backend = InMemoryBackend()
        store = _store(backend, ceiling=10)
        asyncio.run(store.write(_many(30)))
        backend.fail_commit_at = backend.commit_attempts + 2

        result = asyncio.run(store.clear_all())
        assert not result.success
        assert result.daily_entries_deleted == 10
        assert result.partial_count == 10


class TestReadPoint:
    def test_sorted_by_score_desc(self):
        store = _store()
        asyncio.run(
            store.write(
                [
                    make_record(area="a", score=3),
                    make_record(area="b", score=9),
                    make_record(area="c", score=5),
                ]
            )
        )
        result = asyncio.run(store.read_point("2024-01-05"))
        assert [r.demand_score for r in result] == [9, 5, 3]

    def test_filters(self):
        store = _store()
        asyncio.run(
            store.write(
                [
                    make_record("Zepto", "Pune", "a"),
                    make_record("Blinkit", "Pune", "a"),
                    make_record("Zepto", "Goa", "a"),
                ]
            )
        )
        assert len(asyncio.run(store.read_point("2024-01-05", client="Zepto"))) == 2
        assert len(asyncio.run(store.read_point("2024-01-05", city=" Pune "))) == 2
        assert len(asyncio.run(store.read_point("2024-01-05", client="Zepto", city="Goa"))) == 1

    def test_other_dates_excluded(self):
        store = _store()
        asyncio.run(store.write([make_record(date="2024-01-05"), make_record(area="b", date="2024-01-06")]))
        assert len(asyncio.run(store.read_point("2024-01-06"))) == 1

    def test_broad_query_limited(self):
        backend = InMemoryBackend()
        store = _store(backend, broad_cap=5, analysis_cap=8)
        asyncio.run(store.write(_many(10)))

        assert len(asyncio.run(store.read_point("2024-01-05"))) == 5
        assert len(asyncio.run(store.read_point("2024-01-05", bypass_limits=True))) == 8
        assert backend.list_calls[-2:] == [5, 8]

    def test_narrow_query_truncated(self):
        backend = InMemoryBackend()
        store = _store(backend, broad_cap=5)
        asyncio.run(store.write(_many(10)))

        assert len(asyncio.run(store.read_point("2024-01-05", client="Zepto"))) == 5
        assert backend.list_calls[-1] is None

    def test_max_results(self):
        store = _store(broad_cap=100, max_results=4)
        asyncio.run(store.write(_many(10)))
        assert len(asyncio.run(store.read_point("2024-01-05"))) == 4
        assert len(asyncio.run(store.read_point("2024-01-05", bypass_limits=True))) == 10

    def test_failed_shard_skipped(self):
        backend = InMemoryBackend()
        store = _store(backend)
        asyncio.run(store.write([make_record(area="a"), make_record(area="b")]))
        backend.failing_shards.add("Blinkit_Mumbai_a")

        result = asyncio.run(store.read_point("2024-01-05"))
        assert [r.area for r in result] == ["b"]

    def test_enumeration_failure_raises(self):
        backend = InMemoryBackend()
        backend.fail_list_shards = 1
        with pytest.raises(ShardEnumerationError):
            asyncio.run(_store(backend).read_point("2024-01-05"))

    def test_invalid_date(self):
        with pytest.raises(ValueError):
            asyncio.run(_store().read_point("2024-1-5"))

    def test_missing_fields_fallback(self):
        backend = InMemoryBackend()
        backend.shards["s1"] = {"client": "Zepto", "city": "Pune", "area": "a"}
        backend.daily["s1"] = {"2024-01-05": {"demandScore": 4}}

        result = asyncio.run(_store(backend).read_point("2024-01-05"))
        assert result[0].id == "s1_2024-01-05"
        assert result[0].timestamp == datetime.fromisoformat("2024-01-05T00:00:00+00:00")


class TestReadRange:
    def test_range_bounds(self):
        store = _store()
        days = ["2024-01-04", "2024-01-05", "2024-01-08", "2024-01-10", "2024-01-11"]
        asyncio.run(store.write([make_record(date=d, score=i) for i, d in enumerate(days)]))

        result = asyncio.run(store.read_range("2024-01-05", "2024-01-10"))
        assert [r.date for r in result] == ["2024-01-05", "2024-01-08", "2024-01-10"]

    def test_sorted_by_date_then_score(self):
        store = _store()
        asyncio.run(
            store.write(
                [
                    make_record(area="a", score=1, date="2024-01-06"),
                    make_record(area="b", score=7, date="2024-01-05"),
                    make_record(area="c", score=3, date="2024-01-05"),
                ]
            )
        )
        result = asyncio.run(store.read_range("2024-01-05", "2024-01-06"))
        assert [(r.date, r.demand_score) for r in result] == [("2024-01-05", 7), ("2024-01-05", 3), ("2024-01-06", 1)]

    def test_inverted_range_empty(self):
        store = _store()
        asyncio.run(store.write([make_record()]))
        assert asyncio.run(store.read_range("2024-01-10", "2024-01-01")) == []

    def test_range_capped(self):
        store = _store(max_results=3)
        asyncio.run(store.write(_many(6)))
        assert len(asyncio.run(store.read_range("2024-01-01", "2024-01-31"))) == 3
