"""
Document store and file storage boundaries used by the OCR service.
"""

import copy
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from document_ocr.ocr.types import DocumentNotFoundError, DocumentType, OCRResult

logger = structlog.get_logger(__name__)


@dataclass
class DocumentRecord:
    """A stored document and its persisted OCR blob, if any."""
    document_id: str
    file_path: str
    document_type: Union[DocumentType, str]
    mime_type: Optional[str] = None
    ocr_data: Optional[Dict[str, Any]] = None

    @property
    def has_ocr_data(self) -> bool:
        return bool(self.ocr_data)

    @property
    def ocr_result(self) -> Optional[OCRResult]:
        return OCRResult.from_dict(self.ocr_data) if self.ocr_data else None


class DocumentStore(ABC):
    """Persistence owned outside the OCR pipeline."""

    @abstractmethod
    def fetch(self, document_id: str) -> Optional[DocumentRecord]:
        """Return the record, or None when the ID is unknown."""

    @abstractmethod
    def persist(self, document_id: str, ocr_data: Dict[str, Any]) -> None:
        """Store an OCR result blob on an existing record."""

    @abstractmethod
    def find_pending(self) -> List[DocumentRecord]:
        """Records of OCR-supported types that have no OCR data yet."""


class FileStorage(ABC):
    @abstractmethod
    def exists(self, file_path: Union[str, Path]) -> bool:
        ...

    def resolve(self, file_path: Union[str, Path]) -> Path:
        """Local path the image can be read from."""
        return Path(file_path)


class LocalFileStorage(FileStorage):
    """Files on the local filesystem, optionally relative to a base directory."""

    def __init__(self, base_directory: Optional[Union[str, Path]] = None):
        self.base_directory = Path(base_directory) if base_directory else None

    def resolve(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        if self.base_directory and not path.is_absolute():
            return self.base_directory / path
        return path

    def exists(self, file_path: Union[str, Path]) -> bool:
        return self.resolve(file_path).is_file()


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe in-process store."""

    def __init__(self, records: Optional[List[DocumentRecord]] = None):
        self._records: Dict[str, DocumentRecord] = {}
        self._lock = threading.Lock()
        for record in records or []:
            self.add(record)

    def add(self, record: DocumentRecord) -> None:
        with self._lock:
            self._records[record.document_id] = record

    def fetch(self, document_id: str) -> Optional[DocumentRecord]:
        with self._lock:
            record = self._records.get(document_id)
            return copy.deepcopy(record) if record else None

    def persist(self, document_id: str, ocr_data: Dict[str, Any]) -> None:
        with self._lock:
            record = self._records.get(document_id)
            if record is None:
                raise DocumentNotFoundError(f"Document not found: {document_id}", document_id=document_id)
            record.ocr_data = copy.deepcopy(ocr_data)

        logger.debug(
            "OCR data persisted",
            document_id=document_id,
            processing_status=ocr_data.get("processing_status"),
        )

    def find_pending(self) -> List[DocumentRecord]:
        with self._lock:
            records = list(self._records.values())

        pending = []
        for record in records:
            if record.has_ocr_data:
                continue
            try:
                document_type = DocumentType(getattr(record.document_type, "value", record.document_type))
            except ValueError:
                continue
            if document_type.is_ocr_supported:
                pending.append(copy.deepcopy(record))
        return pending
