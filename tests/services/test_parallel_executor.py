"""Tests for ParallelExecutor - slot ownership, ordering and aggregation."""

import threading
from pathlib import Path

import pytest

from media_shelf.core import ThumbnailResult
from media_shelf.services import ImageTranscoder, ParallelExecutor


def test_results_keep_input_order():
    executor = ParallelExecutor(worker_count=3)
    outcome = executor.map(lambda slot, item: item * 2, list(range(50)))
    assert outcome.results == [i * 2 for i in range(50)]


def test_empty_batch():
    outcome = ParallelExecutor(worker_count=2).map(lambda slot, item: item, [])
    assert outcome.results == []
    assert outcome.totals.new_count == 0


def test_each_slot_owns_one_transcoder_for_its_lifetime():
    created = []

    def factory():
        transcoder = ImageTranscoder()
        created.append(transcoder)
        return transcoder

    executor = ParallelExecutor(worker_count=4, transcoder_factory=factory)
    seen = {}
    lock = threading.Lock()

    def record(slot, item):
        with lock:
            seen.setdefault(slot.slot_id, set()).add(id(slot.transcoder))
        return item

    executor.map(record, range(40))
    executor.map(record, range(40))

    assert len(created) == 4
    assert all(len(ids) == 1 for ids in seen.values())
    assert set(seen) <= {0, 1, 2, 3}


def test_pool_size_does_not_depend_on_item_count():
    executor = ParallelExecutor(worker_count=2)
    active = set()
    lock = threading.Lock()

    def record(slot, item):
        with lock:
            active.add(threading.get_ident())
        return item

    executor.map(record, range(100))
    assert len(executor.slots) == 2
    assert len(active) <= 2


def test_totals_sum_new_thumbnails_across_slots():
    executor = ParallelExecutor(worker_count=3)

    def fake_thumbnail(slot, item):
        new_bytes = 10 if item % 2 == 0 else 0
        result = ThumbnailResult(256, 384, new_bytes, Path(f"/cache/{item}.jpg"))
        slot.record(result)
        return result

    outcome = executor.map(fake_thumbnail, range(20))

    assert outcome.totals.new_count == 10
    assert outcome.totals.new_bytes == 100

    again = executor.map(fake_thumbnail, range(4))
    assert again.totals.new_count == 2


def test_escaped_error_is_raised_after_batch():
    executor = ParallelExecutor(worker_count=2)
    done = []

    def work(slot, item):
        if item == 3:
            raise RuntimeError("boom")
        done.append(item)
        return item

    with pytest.raises(RuntimeError, match="boom"):
        executor.map(work, range(10))
    assert sorted(done) == [0, 1, 2, 4, 5, 6, 7, 8, 9]


def test_worker_count_must_be_positive():
    with pytest.raises(ValueError):
        ParallelExecutor(worker_count=0)
