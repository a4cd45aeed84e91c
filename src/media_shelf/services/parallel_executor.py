"""Bounded worker pool for scan items using Qt threading.

Each worker slot owns one ImageTranscoder for the executor's lifetime.
Slots pull whole items from a shared queue, so an item is never split
across workers. New-thumbnail totals are accumulated per slot and summed
once the batch has drained, so no counter is shared between threads.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from PySide6.QtCore import QRunnable, QThreadPool, Slot

from media_shelf.core.thumbnail_records import ThumbnailResult
from media_shelf.services.image_transcoder import ImageTranscoder, ensure_qt_core

logger = logging.getLogger(__name__)

DEFAULT_WORKER_COUNT = 4

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class WorkerSlot:
    """Worker-local state: a reusable transcoder and this batch's counters."""

    slot_id: int
    transcoder: ImageTranscoder
    new_count: int = 0
    new_bytes: int = 0

    def record(self, result: Optional[ThumbnailResult]) -> None:
        """Count a thumbnail written by this slot."""
        if result is not None and result.is_new:
            self.new_count += 1
            self.new_bytes += result.new_bytes

    def reset(self) -> None:
        self.new_count = 0
        self.new_bytes = 0


@dataclass(frozen=True)
class BatchTotals:
    new_count: int = 0
    new_bytes: int = 0


@dataclass
class BatchOutcome(Generic[R]):
    """Per-item results in input order plus the summed slot counters."""

    results: List[R] = field(default_factory=list)
    totals: BatchTotals = field(default_factory=BatchTotals)


class SlotWorker(QRunnable):
    """
    Drains the shared item queue on behalf of one worker slot.

    Item functions are expected to handle their own per-item failures;
    anything that still escapes is recorded and re-raised by the
    executor after the batch completes.
    """

    def __init__(
        self,
        slot: WorkerSlot,
        items: "queue.SimpleQueue",
        func: Callable[[WorkerSlot, T], R],
        results: list,
        errors: list,
    ):
        super().__init__()
        self.slot = slot
        self.items = items
        self.func = func
        self.results = results
        self.errors = errors
        self.setAutoDelete(False)

    @Slot()
    def run(self):
        while True:
            try:
                index, item = self.items.get_nowait()
            except queue.Empty:
                return
            try:
                self.results[index] = self.func(self.slot, item)
            except Exception as e:
                logger.error("Worker %d failed on item %r: %s", self.slot.slot_id, item, e)
                self.errors.append(e)


class ParallelExecutor:
    """Fixed-size pool; its size does not depend on the number of items.

    ``map`` blocks until every item has been processed. Only one batch
    runs at a time per executor because the slots are reused.
    """

    def __init__(
        self,
        worker_count: int = DEFAULT_WORKER_COUNT,
        transcoder_factory: Callable[[], ImageTranscoder] = ImageTranscoder,
    ) -> None:
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        ensure_qt_core()
        self.worker_count = worker_count
        self.slots = [WorkerSlot(i, transcoder_factory()) for i in range(worker_count)]
        self._pool = QThreadPool()
        self._pool.setMaxThreadCount(worker_count)
        self._batch_lock = threading.Lock()

    def map(self, func: Callable[[WorkerSlot, T], R], items: Sequence[T]) -> BatchOutcome:
        """Run ``func(slot, item)`` for every item and collect the results.

        Returns:
            BatchOutcome with results in the same order as ``items``.

        Raises:
            Exception: The first error that escaped an item function.
        """
        items = list(items)
        if not items:
            return BatchOutcome()

        with self._batch_lock:
            pending: queue.SimpleQueue = queue.SimpleQueue()
            for index, item in enumerate(items):
                pending.put((index, item))

            results: list = [None] * len(items)
            errors: list = []
            active = self.slots[: min(self.worker_count, len(items))]
            workers = []
            for slot in active:
                slot.reset()
                worker = SlotWorker(slot, pending, func, results, errors)
                workers.append(worker)
                self._pool.start(worker)
            self._pool.waitForDone()

            if errors:
                raise errors[0]

            totals = BatchTotals(
                new_count=sum(slot.new_count for slot in active),
                new_bytes=sum(slot.new_bytes for slot in active),
            )
            return BatchOutcome(results=results, totals=totals)
