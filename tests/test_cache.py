from datetime import timedelta

import pytest

from currency_localizer.models import LocationRecord, RateRecord
from currency_localizer.services.cache import MemoryRecordCache, PersistentRecordCache
from currency_localizer.services.storage import MemoryKeyValueStore, SqliteKeyValueStore

from conftest import FakeClock


def _rate(clock, target="EUR"):
    return RateRecord(
        base_currency="USD", target_currency=target, rate=0.92, resolved_at=clock()
    )


def test_memory_cache_expires_after_ttl(clock):
    cache = MemoryRecordCache(timedelta(hours=1), clock)
    cache.put("rate:USD:EUR", _rate(clock))
    clock.advance(minutes=59)
    assert cache.get("rate:USD:EUR") is not None
    clock.advance(minutes=1)
    assert cache.get("rate:USD:EUR") is None
    assert len(cache) == 0


def test_memory_cache_rejects_non_positive_ttl(clock):
    with pytest.raises(ValueError):
        MemoryRecordCache(timedelta(0), clock)


def test_persistent_cache_roundtrips_location(store, clock):
    cache = PersistentRecordCache(store, LocationRecord, timedelta(hours=24), clock)
    record = LocationRecord(currency_code="EUR", resolved_at=clock(), country_code="DE")
    cache.put("loc", record)
    assert cache.get("loc") == record


def test_persistent_cache_treats_corruption_as_miss(clock):
    store = MemoryKeyValueStore({"loc": "{not json"})
    cache = PersistentRecordCache(store, LocationRecord, timedelta(hours=24), clock)
    assert cache.get("loc") is None
    assert store.get("loc") is None


def test_persistent_cache_discards_invalid_currency(clock):
    store = MemoryKeyValueStore(
        {"loc": '{"currency_code": "eur", "resolved_at": "2026-01-01T12:00:00Z"}'}
    )
    cache = PersistentRecordCache(store, LocationRecord, timedelta(hours=24), clock)
    assert cache.get("loc") is None


def test_persistent_cache_discards_naive_timestamp(clock):
    store = MemoryKeyValueStore(
        {"loc": '{"currency_code": "EUR", "resolved_at": "2026-01-01T12:00:00"}'}
    )
    cache = PersistentRecordCache(store, LocationRecord, timedelta(hours=24), clock)
    assert cache.get("loc") is None
    assert store.get("loc") is None


def test_sqlite_store_survives_new_instance(tmp_path):
    db_path = tmp_path / "cache.sqlite3"
    clock = FakeClock()
    first = PersistentRecordCache(
        SqliteKeyValueStore(db_path), LocationRecord, timedelta(hours=24), clock
    )
    first.put("loc", LocationRecord(currency_code="JPY", resolved_at=clock()))

    second = PersistentRecordCache(
        SqliteKeyValueStore(db_path), LocationRecord, timedelta(hours=24), clock
    )
    record = second.get("loc")
    assert record is not None
    assert record.currency_code == "JPY"


def test_sqlite_store_overwrites_and_deletes(tmp_path):
    store = SqliteKeyValueStore(tmp_path / "kv.sqlite3")
    store.set("k", "1")
    store.set("k", "2")
    assert store.get("k") == "2"
    store.delete("k")
    assert store.get("k") is None


def test_corrupt_sqlite_file_degrades_to_misses(tmp_path, clock):
    db_path = tmp_path / "cache.sqlite3"
    db_path.write_bytes(b"garbage" * 200)
    store = SqliteKeyValueStore(db_path)
    assert store.get("loc") is None
    store.set("loc", "value")
    store.delete("loc")

    cache = PersistentRecordCache(store, LocationRecord, timedelta(hours=24), clock)
    assert cache.get("loc") is None
    record = LocationRecord(currency_code="EUR", resolved_at=clock())
    cache.put("loc", record)
    assert cache.get("loc") == record


class CountingStore(MemoryKeyValueStore):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.reads = 0

    def get(self, key):
        self.reads += 1
        return super().get(key)


def test_persistent_cache_reads_store_once(clock):
    record = LocationRecord(currency_code="EUR", resolved_at=clock())
    store = CountingStore({"loc": record.model_dump_json()})
    cache = PersistentRecordCache(store, LocationRecord, timedelta(hours=24), clock)
    for _ in range(3):
        assert cache.get("loc") == record
    assert store.reads == 1

    clock.advance(hours=24)
    assert cache.get("loc") is None
    assert store.get("loc") is None
