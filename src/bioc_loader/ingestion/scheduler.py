# src/bioc_loader/ingestion/scheduler.py
import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, TypeVar

from bioc_loader.core.exceptions import DocumentError
from bioc_loader.core.schemas import BatchReport, WorkItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

# progress(completed_count, label_of_last_finished_document)
ProgressSink = Callable[[int, str], None]


def partition(items: Sequence[T], max_concurrency: int) -> List[List[T]]:
    """
    Split items into contiguous slices of ceil(n / max_concurrency) items.
    The last slice may be shorter; no slice is empty.
    """
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
    if not items:
        return []
    size = math.ceil(len(items) / max_concurrency)
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BatchScheduler:
    """
    Drains a document list through the upsert engine with bounded parallelism.

    Each slice runs on its own worker thread and is processed strictly in
    order. Slices run concurrently with no ordering between them. A failing
    document is logged and counted, the rest carry on. Setting cancel_event
    stops every worker before its next document; the document in flight
    finishes its own transaction.
    """
    def __init__(
        self,
        engine,
        max_concurrency: int = 10,
        progress: Optional[ProgressSink] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self._engine = engine
        self.max_concurrency = max_concurrency
        self._progress = progress
        self._cancel_event = cancel_event or threading.Event()
        self._lock = threading.Lock()
        self._report = BatchReport()
        self._completed = 0

    def cancel(self) -> None:
        self._cancel_event.set()

    def run(self, items: Sequence[WorkItem]) -> BatchReport:
        self._report = BatchReport(total=len(items))
        self._completed = 0

        batches = partition(items, self.max_concurrency)
        if not batches:
            return self._report

        logger.info(f"Processing {len(items)} documents in {len(batches)} parallel batches")
        with ThreadPoolExecutor(max_workers=len(batches), thread_name_prefix="bioc-batch") as pool:
            futures = [pool.submit(self._drain, idx, batch) for idx, batch in enumerate(batches)]
            for future in futures:
                future.result()

        return self._report

    def _drain(self, batch_index: int, batch: List[WorkItem]) -> None:
        for position, item in enumerate(batch):
            if self._cancel_event.is_set():
                skipped = len(batch) - position
                with self._lock:
                    self._report.cancelled += skipped
                logger.warning(f"Batch {batch_index} cancelled with {skipped} documents not started")
                return
            self._process(item)

    def _process(self, item: WorkItem) -> None:
        result = None
        try:
            result = self._engine.upsert(item.document, item.collection)
        except DocumentError as exc:
            logger.error(f"Error processing document {item.label}: {exc}")
        except Exception:
            logger.exception(f"Unexpected error processing document {item.label}")

        with self._lock:
            if result is None:
                self._report.failed += 1
            else:
                self._report.succeeded += 1
                if result.replaced:
                    self._report.replaced += 1
            self._completed += 1
            completed = self._completed
            # Emitted under the lock so sinks see counts in increasing order
            if self._progress is not None:
                try:
                    self._progress(completed, item.label)
                except Exception:
                    logger.exception(f"Progress sink failed after document {item.label}")

        logger.debug(f"Processed document {completed}/{self._report.total} - {item.label}")
