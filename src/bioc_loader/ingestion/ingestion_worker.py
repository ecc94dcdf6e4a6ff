# src/bioc_loader/ingestion/ingestion_worker.py
import logging
import threading
from pathlib import Path
from typing import AbstractSet, Callable, Dict, Any, List, Optional, Sequence, Tuple, Union

from bioc_loader.core.config import settings
from bioc_loader.core.exceptions import DocumentParseError
from bioc_loader.core.schemas import BatchReport, FileReport, IngestSummary, WorkItem
from bioc_loader.db.session import Database
from .files import get_files_to_process
from .filters import should_process_document
from .normalizer import ensure_list, normalize_collection, normalize_document
from .parsers import parse_file
from .scheduler import BatchScheduler, ProgressSink
from .upsert import DocumentUpsertEngine

logger = logging.getLogger(__name__)

Parser = Callable[[Union[str, Path]], Dict[str, Any]]


def ingest_path(
    path: Union[str, Path],
    database: Database,
    required: Optional[AbstractSet[str]] = None,
    max_concurrency: int = settings.MAX_CONCURRENCY,
    progress: Optional[ProgressSink] = None,
    cancel_event: Optional[threading.Event] = None,
    extension: str = settings.FILE_EXTENSION,
) -> IngestSummary:
    """
    High-level ingestion entrypoint.

    1. Enumerate the input files (raises InputPathError when there are none).
    2. Parse, normalize and filter every document of every file.
    3. Write the accepted documents in parallel batches.
    """
    files = get_files_to_process(path, extension=extension)
    logger.info(f"Found {len(files)} file(s) to process")

    items, file_report = extract_valid_documents(files, required=required)

    engine = DocumentUpsertEngine(database)
    batch_report = process_valid_documents(
        items,
        engine,
        max_concurrency=max_concurrency,
        progress=progress,
        cancel_event=cancel_event,
    )
    return IngestSummary(files=file_report, batches=batch_report)


def extract_valid_documents(
    files: Sequence[Union[str, Path]],
    required: Optional[AbstractSet[str]] = None,
    parse: Parser = parse_file,
) -> Tuple[List[WorkItem], FileReport]:
    """
    Phase 1: turn every file into normalized, filtered work items.
    A file that fails to parse or has no collection/documents is logged and skipped.
    """
    logger.info("Phase 1: Extracting all valid documents...")
    items: List[WorkItem] = []
    report = FileReport(files=len(files))

    for i, file in enumerate(files):
        file_name = Path(file).name
        logger.info(f"Processing file: {i + 1}/{len(files)} - {file_name}")

        try:
            data = parse(file)
        except DocumentParseError as exc:
            logger.error(f"Error in {file_name}: {exc}")
            report.files_failed += 1
            continue

        collection_node = data.get("collection") if isinstance(data, dict) else None
        if not isinstance(collection_node, dict):
            logger.warning(f"No collection found in file: {file_name}")
            report.files_failed += 1
            continue

        documents = ensure_list(collection_node.get("document"))
        if not documents:
            logger.warning(f"No documents found in file: {file_name}")
            report.files_failed += 1
            continue

        collection = normalize_collection(collection_node, key=file_name)
        accepted = 0
        for index, node in enumerate(documents):
            document = normalize_document(node, collection_key=file_name)
            if should_process_document(document, required):
                items.append(WorkItem(
                    document=document,
                    collection=collection,
                    file_name=file_name,
                    document_index=index,
                ))
                accepted += 1

        report.documents_found += len(documents)
        report.documents_accepted += accepted
        if accepted:
            logger.info(f"{file_name}: {accepted}/{len(documents)} valid documents")

    logger.info(f"Phase 1 complete: Found {len(items)} total valid documents")
    return items, report


def process_valid_documents(
    items: Sequence[WorkItem],
    engine: DocumentUpsertEngine,
    max_concurrency: int = settings.MAX_CONCURRENCY,
    progress: Optional[ProgressSink] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BatchReport:
    """Phase 2: write the accepted documents."""
    logger.info("Phase 2: Processing valid documents...")
    if not items:
        logger.warning("No valid documents to process")
        return BatchReport()

    scheduler = BatchScheduler(
        engine, max_concurrency=max_concurrency, progress=progress, cancel_event=cancel_event
    )
    report = scheduler.run(items)
    logger.info(
        f"Phase 2 complete: {report.succeeded}/{report.total} documents stored "
        f"({report.replaced} replaced, {report.failed} failed, {report.cancelled} cancelled)"
    )
    return report
