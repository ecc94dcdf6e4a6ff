# src/bioc_loader/ingestion/diseases.py
"""
Loader for the disease2pubtator vocabulary file.

Each line is tab-separated: row id, entity kind, MeSH id (optionally
"MESH:"-prefixed), display text. Lines that don't fit are counted as invalid
and skipped. Valid records are inserted in fixed-size batches, several batches
in parallel, and duplicate (mesh_id, text) pairs are skipped by the store.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from bioc_loader.core.config import settings
from bioc_loader.core.exceptions import InputPathError
from bioc_loader.core.schemas import DiseaseLoadReport, DiseaseRecord
from bioc_loader.db.repository import LoaderRepository
from bioc_loader.db.session import Database

logger = logging.getLogger(__name__)

MESH_PREFIX = "MESH:"
PROGRESS_EVERY = 1000


def parse_line(line: str) -> Optional[DiseaseRecord]:
    parts = line.strip().split("\t")
    if len(parts) < 4:
        return None

    mesh_id = parts[2].strip()
    text = parts[3].strip()
    if mesh_id.startswith(MESH_PREFIX):
        mesh_id = mesh_id[len(MESH_PREFIX):].strip()
    if not mesh_id or not text:
        return None

    return DiseaseRecord(mesh_id=mesh_id, text=text)


def count_lines(path: Union[str, Path]) -> int:
    with open(path, "rb") as handle:
        return sum(chunk.count(b"\n") for chunk in iter(lambda: handle.read(1 << 20), b""))


class DiseaseLoader:
    def __init__(
        self,
        database: Database,
        batch_size: int = settings.DISEASE_BATCH_SIZE,
        concurrency: int = settings.DISEASE_CONCURRENCY,
        progress: Optional[Callable[[int], None]] = None,
    ):
        if batch_size < 1 or concurrency < 1:
            raise ValueError("batch_size and concurrency must be at least 1")
        self._database = database
        self.batch_size = batch_size
        self.concurrency = concurrency
        self._progress = progress

    def load_file(self, path: Union[str, Path]) -> DiseaseLoadReport:
        """
        Replace the disease table with the contents of path.

        The file is opened before existing rows are cleared, and undecodable
        bytes are read as U+FFFD, so an unreadable file never empties the
        table. The clear is committed on its own: a database failure later in
        the load leaves the table partially loaded. A failed batch is logged
        and the load continues.
        """
        path = Path(path)
        if not path.is_file():
            raise InputPathError(f"Disease file does not exist: {path}")

        logger.info(f"Loading disease data from: {path}")
        report = DiseaseLoadReport()
        start = time.perf_counter()

        batch: List[DiseaseRecord] = []
        pending: List[List[DiseaseRecord]] = []

        with open(path, encoding="utf-8", errors="replace") as handle:
            with self._database.transaction() as session:
                repo = LoaderRepository(session)
                report.deleted = repo.count_diseases()
                repo.delete_all_diseases()
            logger.info(f"Deleted {report.deleted:,} existing disease records")

            for line in handle:
                report.lines += 1
                record = parse_line(line)
                if record is None:
                    report.invalid += 1
                else:
                    report.valid += 1
                    batch.append(record)

                if len(batch) >= self.batch_size:
                    pending.append(batch)
                    batch = []
                    if len(pending) >= self.concurrency:
                        self._process_batches(pending, report)
                        pending = []

                if self._progress is not None and report.lines % PROGRESS_EVERY == 0:
                    self._progress(report.lines)

        if batch:
            pending.append(batch)
        if pending:
            self._process_batches(pending, report)
        if self._progress is not None:
            self._progress(report.lines)

        report.elapsed = time.perf_counter() - start
        rate = report.lines / report.elapsed if report.elapsed else 0
        logger.info("Processing summary:")
        logger.info(f"- Total lines processed: {report.lines:,}")
        logger.info(f"- Valid records: {report.valid:,}")
        logger.info(f"- Invalid records: {report.invalid:,}")
        logger.info(f"- Records inserted: {report.loaded:,}")
        logger.info(f"- Processing rate: {rate:,.0f} lines/second")
        logger.info(f"- Total time: {report.elapsed:.2f} seconds")
        return report

    def _process_batches(self, batches: List[List[DiseaseRecord]], report: DiseaseLoadReport) -> None:
        with ThreadPoolExecutor(max_workers=min(self.concurrency, len(batches))) as pool:
            futures = [pool.submit(self._insert_batch, batch) for batch in batches]
            for index, future in enumerate(futures):
                try:
                    report.loaded += future.result()
                except SQLAlchemyError as exc:
                    report.failed_batches += 1
                    logger.error(f"Error processing batch {index}: {exc}")

    def _insert_batch(self, batch: List[DiseaseRecord]) -> int:
        with self._database.transaction() as session:
            return LoaderRepository(session).create_diseases(batch)
