# src/bioc_loader/core/exceptions.py
"""Exception classes for the loader, grouped by the scope they abort."""


class BioCLoaderError(Exception):
    """Base exception for all loader errors."""

    pass


class InputPathError(BioCLoaderError):
    """Raised when the input path is missing, of the wrong kind, or holds nothing to load.

    Aborts the whole run.
    """

    pass


class DocumentParseError(BioCLoaderError):
    """Raised when a single input file cannot be parsed. The file is skipped."""

    pass


class DocumentError(BioCLoaderError):
    """Base for failures scoped to one document. The document is skipped."""

    def __init__(self, message: str, document_id=None):
        super().__init__(message)
        self.document_id = document_id


class MissingDocumentIdError(DocumentError):
    """Raised when a document has no natural identifier and cannot be stored."""

    pass


class StoreError(DocumentError):
    """Raised when a storage operation for a document fails."""

    pass
