# src/bioc_loader/api/loader_api.py
import logging
from functools import lru_cache
from typing import AbstractSet, Optional

from fastapi import FastAPI, Depends, BackgroundTasks, HTTPException

from bioc_loader.core.config import settings
from bioc_loader.core.exceptions import BioCLoaderError, InputPathError
from bioc_loader.core.schemas import IngestRequest, IngestResponse
from bioc_loader.db.session import Database
from bioc_loader.ingestion.files import get_files_to_process
from bioc_loader.ingestion.filters import parse_required_annotations
from bioc_loader.ingestion.ingestion_worker import ingest_path

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, version=settings.VERSION)


@lru_cache(maxsize=1)
def get_database() -> Database:
    """
    Store handle shared by every request, built on first use.
    Tests override this dependency with their own Database.
    """
    database = Database(settings.DATABASE_URL, pool_size=settings.DB_POOL_SIZE)
    database.create_all()
    return database


def run_ingestion(path: str, database: Database, required: AbstractSet[str], concurrency: Optional[int]) -> None:
    try:
        summary = ingest_path(
            path,
            database,
            required=required,
            max_concurrency=concurrency or settings.MAX_CONCURRENCY,
            extension=settings.FILE_EXTENSION,
        )
    except BioCLoaderError as exc:
        logger.error(f"Ingestion of {path} failed: {exc}")
        return
    logger.info(
        f"Ingestion of {path} finished: {summary.batches.succeeded}/{summary.batches.total} documents stored"
    )

# --- Routes ---

@app.post("/ingest", response_model=IngestResponse, status_code=202)
def api_ingest(
    payload: IngestRequest,
    background_tasks: BackgroundTasks,
    database: Database = Depends(get_database),
):
    """
    Validates the input path and loads it in the background.
    """
    try:
        files = get_files_to_process(payload.path, extension=settings.FILE_EXTENSION)
    except InputPathError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    required = parse_required_annotations(payload.annotations)
    background_tasks.add_task(run_ingestion, payload.path, database, required, payload.concurrency)

    return IngestResponse(
        status="accepted",
        message=f"Ingestion queued for {payload.path}",
        files=len(files),
    )


@app.get("/health")
def health_check():
    """Liveness check for Kubernetes deployment"""
    return {"status": "healthy", "version": settings.VERSION}
