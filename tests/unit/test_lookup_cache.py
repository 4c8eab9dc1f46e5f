from __future__ import annotations

import asyncio
import threading
from pathlib import Path

from tariff_refdata.db.bundled_provider import BundledDatasetProvider
from tariff_refdata.db.reference_store import ReferenceStore
from tariff_refdata.db.snapshot_provider import SnapshotDatasetProvider
from tariff_refdata.models.dataset_kind import DatasetKind
from tariff_refdata.models.records import VocProduct
from tariff_refdata.services.lookup_cache import LookupCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _voc(code: str) -> VocProduct:
    return VocProduct(code_sh=code, designation=f"product {code}")


def test_fresh_entry_served_without_store_read(memory_provider, memory_store):
    memory_provider.save(DatasetKind.VOC, [_voc("1")])
    clock = FakeClock()
    cache = LookupCache(memory_store, ttl_seconds=300, clock=clock)

    assert cache.get_records(DatasetKind.VOC) == [_voc("1")]
    clock.now += 299
    assert cache.get_records(DatasetKind.VOC) == [_voc("1")]
    assert memory_provider.get_calls == 1


def test_stale_entry_is_refetched(memory_provider, memory_store):
    memory_provider.save(DatasetKind.VOC, [_voc("1")])
    clock = FakeClock()
    cache = LookupCache(memory_store, ttl_seconds=300, clock=clock)
    cache.get_records(DatasetKind.VOC)

    memory_provider.save(DatasetKind.VOC, [_voc("2")])
    clock.now += 301
    assert cache.get_records(DatasetKind.VOC) == [_voc("2")]
    assert memory_provider.get_calls == 2


def test_record_saved_invalidates_entry(memory_provider, memory_store):
    memory_provider.save(DatasetKind.VOC, [_voc("1")])
    cache = LookupCache(memory_store, clock=FakeClock())
    cache.get_records(DatasetKind.VOC)

    dataset = memory_store.save(DatasetKind.VOC, [_voc("2")])
    cache.record_saved(dataset)

    assert cache.peek(DatasetKind.VOC) is None
    assert asyncio.run(cache.get_async(DatasetKind.VOC)) == [_voc("2")]


def test_get_async_fresh_or_fallback(memory_provider, tmp_path: Path):
    snapshot = SnapshotDatasetProvider(tmp_path)
    store = ReferenceStore([memory_provider, snapshot, BundledDatasetProvider()])
    cache = LookupCache(store, snapshot=snapshot, clock=FakeClock())
    memory_provider.fail = True

    records = asyncio.run(cache.get_async(DatasetKind.TARIFPORT))

    assert records
    assert cache.peek(DatasetKind.TARIFPORT).source == "bundled"
    # Bundled data is not copied into the snapshot
    assert not snapshot.path_for(DatasetKind.TARIFPORT).exists()


def test_remote_read_refreshes_snapshot(memory_provider, tmp_path: Path):
    snapshot = SnapshotDatasetProvider(tmp_path)
    store = ReferenceStore([memory_provider, snapshot])
    memory_provider.save(DatasetKind.VOC, [_voc("1")])
    cache = LookupCache(store, snapshot=snapshot, clock=FakeClock())

    cache.get_records(DatasetKind.VOC)
    memory_provider.fail = True
    cache.invalidate()

    assert cache.get_records(DatasetKind.VOC) == [_voc("1")]
    assert cache.peek(DatasetKind.VOC).source == "snapshot"


def test_stale_entry_served_when_remote_fails(memory_provider, memory_store):
    memory_provider.save(DatasetKind.VOC, [_voc("1")])
    clock = FakeClock()
    cache = LookupCache(memory_store, clock=clock)
    cache.get_records(DatasetKind.VOC)

    memory_provider.fail = True
    clock.now += 1000
    assert cache.get_records(DatasetKind.VOC) == [_voc("1")]


def test_get_sync_never_reads_remote(memory_provider, memory_store, tmp_path: Path):
    memory_provider.save(DatasetKind.VOC, [_voc("1")])
    snapshot = SnapshotDatasetProvider(tmp_path)
    cache = LookupCache(memory_store, snapshot=snapshot, clock=FakeClock())

    assert cache.get_sync(DatasetKind.VOC) == []
    assert memory_provider.get_calls == 0

    cache.record_saved(memory_store.get(DatasetKind.VOC))
    assert cache.get_sync(DatasetKind.VOC) == [_voc("1")]

    cache.record_deleted(DatasetKind.VOC)
    assert cache.get_sync(DatasetKind.VOC) == []


def test_remote_outage_serves_last_known_entry_before_bundled(memory_provider):
    store = ReferenceStore([memory_provider, BundledDatasetProvider()])
    clock = FakeClock()
    cache = LookupCache(store, clock=clock)
    memory_provider.save(DatasetKind.VOC, [_voc("REAL")])
    assert asyncio.run(cache.get_async(DatasetKind.VOC)) == [_voc("REAL")]

    memory_provider.fail = True
    clock.now += 301

    assert asyncio.run(cache.get_async(DatasetKind.VOC)) == [_voc("REAL")]
    assert cache.peek(DatasetKind.VOC).source == "cache"


def test_bundled_entry_is_never_served_as_last_known(memory_provider):
    store = ReferenceStore([memory_provider, BundledDatasetProvider()])
    clock = FakeClock()
    cache = LookupCache(store, clock=clock)
    memory_provider.fail = True
    cache.get_records(DatasetKind.TARIFPORT)
    clock.now += 301

    cache.get_records(DatasetKind.TARIFPORT)

    assert cache.peek(DatasetKind.TARIFPORT).source == "bundled"


def test_read_overtaken_by_save_is_not_cached(memory_provider, memory_store, tmp_path: Path):
    snapshot = SnapshotDatasetProvider(tmp_path)
    cache = LookupCache(memory_store, snapshot=snapshot, clock=FakeClock())
    memory_provider.save(DatasetKind.VOC, [_voc("OLD")])

    started = threading.Event()
    release = threading.Event()
    stored_get = memory_provider.get

    def slow_get(kind):
        dataset = stored_get(kind)
        if not started.is_set():
            started.set()
            release.wait(5)
        return dataset

    memory_provider.get = slow_get
    reader = threading.Thread(target=cache.get_records, args=(DatasetKind.VOC,))
    reader.start()
    assert started.wait(5)

    cache.record_saved(memory_store.save(DatasetKind.VOC, [_voc("NEW")]))
    release.set()
    reader.join(5)

    assert cache.peek(DatasetKind.VOC) is None
    assert snapshot.get(DatasetKind.VOC).records == (_voc("NEW"),)
    assert asyncio.run(cache.get_async(DatasetKind.VOC)) == [_voc("NEW")]


def test_invalidate_all_blocks_in_flight_reads(memory_provider, memory_store):
    memory_provider.save(DatasetKind.TEC, [])
    cache = LookupCache(memory_store, clock=FakeClock())
    stored_get = memory_provider.get

    def get_then_invalidate(kind):
        dataset = stored_get(kind)
        cache.invalidate()
        return dataset

    memory_provider.get = get_then_invalidate
    cache.get_records(DatasetKind.TEC)

    assert cache.peek(DatasetKind.TEC) is None
