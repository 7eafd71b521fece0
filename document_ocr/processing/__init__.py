"""
Document processing: the OCR service and its storage boundaries.
"""

from .service import OCRService
from .storage import (
    DocumentRecord,
    DocumentStore,
    FileStorage,
    InMemoryDocumentStore,
    LocalFileStorage,
)

__all__ = [
    "OCRService",
    "DocumentRecord",
    "DocumentStore",
    "FileStorage",
    "InMemoryDocumentStore",
    "LocalFileStorage",
]
