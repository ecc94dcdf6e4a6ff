# src/bioc_loader/core/__init__.py
from .schemas import (
    InfonRecord, AnnotationRecord, PassageRecord, DocumentRecord, CollectionRecord,
    CollectionHandle, WorkItem, UpsertResult, BatchReport, FileReport, IngestSummary,
    DiseaseRecord, DiseaseLoadReport, IngestRequest, IngestResponse,
)
from .config import settings
