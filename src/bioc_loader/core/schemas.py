# src/bioc_loader/core/schemas.py
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

# --- Normalized BioC records ---

class InfonRecord(BaseModel):
    key: str = ""
    value: str = ""

class AnnotationRecord(BaseModel):
    annotation_id: str = Field("", description="Source-local annotation id, not globally unique")
    identifier: Optional[str] = Field(None, description="Value of the last 'identifier' infon")
    type: Optional[str] = Field(None, description="Value of the last 'type' infon")
    offset: int = 0
    length: int = 0
    text: str = ""
    infons: List[InfonRecord] = Field(default_factory=list)

class PassageRecord(BaseModel):
    offset: int = 0
    text: str = ""
    section_type: Optional[str] = Field(None, description="Value of the last 'section_type' infon")
    type: Optional[str] = Field(None, description="Value of the last 'type' infon")
    infons: List[InfonRecord] = Field(default_factory=list)
    annotations: List[AnnotationRecord] = Field(default_factory=list)

class DocumentRecord(BaseModel):
    document_id: Optional[str] = Field(None, description="Natural key taken from the document's <id>")
    collection_key: str
    passages: List[PassageRecord] = Field(default_factory=list)

class CollectionRecord(BaseModel):
    key: str = Field(..., description="Unique collection key, the input file name")
    source: Optional[str] = None
    date: Optional[str] = None


# --- Pipeline results ---

class CollectionHandle(BaseModel):
    id: UUID
    key: str
    source: Optional[str] = None
    date: Optional[str] = None

class WorkItem(BaseModel):
    """A filtered document waiting to be written, with where it came from."""
    document: DocumentRecord
    collection: CollectionRecord
    file_name: str
    document_index: int

    @property
    def label(self) -> str:
        return f"{self.file_name}:{self.document_index} (ID: {self.document.document_id})"

class UpsertResult(BaseModel):
    document_id: str
    inserted: bool
    replaced: bool = False

class BatchReport(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    replaced: int = 0
    cancelled: int = 0

class FileReport(BaseModel):
    files: int = 0
    files_failed: int = 0
    documents_found: int = 0
    documents_accepted: int = 0

class IngestSummary(BaseModel):
    files: FileReport
    batches: BatchReport

class DiseaseRecord(BaseModel):
    mesh_id: str
    text: str

class DiseaseLoadReport(BaseModel):
    lines: int = 0
    valid: int = 0
    invalid: int = 0
    deleted: int = 0
    loaded: int = 0
    failed_batches: int = 0
    elapsed: float = 0.0


# --- Ingestion API IO ---

class IngestRequest(BaseModel):
    path: str = Field(..., description="BioC XML file or directory of XML files to load")
    annotations: List[str] = Field(default_factory=list, description="Required annotation types or identifiers; empty loads every document")
    concurrency: Optional[int] = Field(None, ge=1, description="Number of parallel worker slices")

class IngestResponse(BaseModel):
    status: str
    message: str
    files: int
