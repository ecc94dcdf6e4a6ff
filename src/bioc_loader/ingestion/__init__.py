# src/bioc_loader/ingestion/__init__.py
from .ingestion_worker import ingest_path, extract_valid_documents, process_valid_documents
from .upsert import DocumentUpsertEngine
from .registry import CollectionRegistry
from .scheduler import BatchScheduler, partition
from .diseases import DiseaseLoader
