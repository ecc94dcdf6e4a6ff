# src/bioc_loader/cli.py
"""Command-line entry points: bioc-loader and bioc-disease-loader."""
import argparse
import logging
import sys
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from tqdm import tqdm

from bioc_loader.core.config import settings
from bioc_loader.core.exceptions import InputPathError
from bioc_loader.core.logging_config import configure_logging
from bioc_loader.db.session import Database
from bioc_loader.ingestion.diseases import DiseaseLoader, count_lines
from bioc_loader.ingestion.filters import parse_required_annotations
from bioc_loader.ingestion.ingestion_worker import ingest_path

logger = logging.getLogger(__name__)

BANNER = "=" * 60


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--database-url", default=settings.DATABASE_URL, help="SQLAlchemy database URL.")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (default: %(default)s).")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {settings.VERSION}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bioc-loader",
        description="Load BioC XML file(s) into the relational store.",
        epilog="Examples: bioc-loader data/10.BioC.XML | bioc-loader data/ --annotations Gene,Disease",
    )
    parser.add_argument("path", help="Path to an XML file or a directory containing XML files.")
    parser.add_argument(
        "-a", "--annotations", default="",
        help="Comma-separated annotation types/identifiers a document must contain to be loaded.",
    )
    parser.add_argument(
        "-c", "--concurrency", type=int, default=settings.MAX_CONCURRENCY,
        help="Number of parallel worker batches (default: %(default)s).",
    )
    _add_common_arguments(parser)
    args = parser.parse_args(argv)
    if args.concurrency < 1:
        parser.error("--concurrency must be at least 1")
    return args


def _open_database(url: str) -> Database:
    database = Database(url, pool_size=settings.DB_POOL_SIZE)
    database.ping()
    database.create_all()
    logger.info("Connected to database")
    return database


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    required = parse_required_annotations(args.annotations)

    logger.info(BANNER)
    logger.info("PubTator BioC.XML Loader")
    logger.info(BANNER)
    if required:
        logger.info(f"Loading only documents annotated with: {', '.join(sorted(required))}")

    database = None
    try:
        database = _open_database(args.database_url)
        with tqdm(desc="Documents", unit="doc") as bar:
            def progress(completed: int, label: str) -> None:
                bar.set_postfix_str(label, refresh=False)
                bar.update(completed - bar.n)

            summary = ingest_path(
                args.path,
                database,
                required=required,
                max_concurrency=args.concurrency,
                progress=progress,
            )
    except InputPathError as exc:
        logger.error(f"Fatal error: {exc}")
        return 1
    except SQLAlchemyError as exc:
        logger.error(f"Fatal error: cannot reach the database: {exc}")
        return 1
    finally:
        if database is not None:
            database.dispose()

    files, batches = summary.files, summary.batches
    logger.info(BANNER)
    logger.info(
        f"Processing complete! Files: {files.files - files.files_failed}/{files.files} read, "
        f"documents: {files.documents_accepted}/{files.documents_found} accepted, "
        f"{batches.succeeded}/{batches.total} stored ({batches.failed} failed)"
    )
    logger.info(BANNER)
    return 0


def parse_disease_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bioc-disease-loader",
        description="Load the tab-separated disease vocabulary (disease2pubtator) into the store.",
    )
    parser.add_argument("path", nargs="?", default=settings.DISEASE_FILE, help="Disease file (default: %(default)s).")
    parser.add_argument("--batch-size", type=int, default=settings.DISEASE_BATCH_SIZE)
    parser.add_argument("--concurrency", type=int, default=settings.DISEASE_CONCURRENCY)
    _add_common_arguments(parser)
    args = parser.parse_args(argv)
    if args.batch_size < 1 or args.concurrency < 1:
        parser.error("--batch-size and --concurrency must be at least 1")
    return args


def disease_main(argv: Optional[List[str]] = None) -> int:
    args = parse_disease_args(argv)
    configure_logging(args.log_level)

    logger.info(BANNER)
    logger.info("Disease Data Loader")
    logger.info(BANNER)

    database = None
    try:
        database = _open_database(args.database_url)
        total = count_lines(args.path)
        logger.info(f"Found {total:,} total lines to process")
        with tqdm(total=total, desc="Lines", unit="line") as bar:
            loader = DiseaseLoader(
                database,
                batch_size=args.batch_size,
                concurrency=args.concurrency,
                progress=lambda lines: bar.update(lines - bar.n),
            )
            report = loader.load_file(args.path)
    except (InputPathError, OSError) as exc:
        logger.error(f"Fatal error: {exc}")
        return 1
    except SQLAlchemyError as exc:
        logger.error(f"Fatal error: database failure: {exc}")
        return 1
    finally:
        if database is not None:
            database.dispose()

    logger.info(BANNER)
    logger.info(f"Processing complete! {report.loaded:,} disease records loaded, {report.invalid:,} lines skipped")
    logger.info(BANNER)
    return 0


def run() -> None:  # pragma: no cover - console script
    sys.exit(main())


def run_diseases() -> None:  # pragma: no cover - console script
    sys.exit(disease_main())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    run()
