"""
Type definitions for document OCR processing.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class DocumentOCRError(Exception):
    """Base exception for document OCR errors."""

    def __init__(
        self,
        message: str,
        document_id: Optional[str] = None,
        document_type: Optional[str] = None,
    ):
        self.document_id = document_id
        self.document_type = document_type
        super().__init__(message)


class UnsupportedDocumentTypeError(DocumentOCRError):
    """Document type is not one of the OCR-supported kinds."""


class UnsupportedLanguageError(DocumentOCRError):
    """Language code is not one of the extraction languages."""

    def __init__(self, message: str, language: Optional[str] = None, **kwargs):
        self.language = language
        super().__init__(message, **kwargs)


class DocumentNotFoundError(DocumentOCRError):
    """Document store has no record for the requested ID."""


class DocumentFileNotFoundError(DocumentOCRError):
    """Source image for a document is not reachable."""

    def __init__(self, message: str, file_path: Optional[str] = None, **kwargs):
        self.file_path = file_path
        super().__init__(message, **kwargs)


class ImagePreprocessingError(DocumentOCRError):
    """Source image could not be decoded or transformed."""


class OCRProcessingError(DocumentOCRError):
    """Underlying OCR engine failed."""


class NoOCRDataError(DocumentOCRError):
    """Correction attempted on a document with no prior OCR result."""


class DocumentType(Enum):
    """Document categories known to the document store."""
    SSN = "ssn"
    DRIVERS_LICENSE = "drivers_license"
    STATE_ID = "state_id"
    PASSPORT = "passport"
    WORK_AUTHORIZATION = "work_authorization"
    I9 = "i9"
    W4 = "w4"
    HANDBOOK = "handbook"
    POLICY = "policy"
    EXPERIENCE_LETTER = "experience_letter"
    OTHER = "other"

    @property
    def is_ocr_supported(self) -> bool:
        return self in OCR_SUPPORTED_TYPES

    @classmethod
    def parse(cls, value: Union["DocumentType", str]) -> "DocumentType":
        """Resolve a document type, raising if OCR cannot handle it."""
        if isinstance(value, cls):
            document_type = value
        else:
            try:
                document_type = cls(str(value).strip().lower())
            except ValueError:
                raise UnsupportedDocumentTypeError(
                    f"OCR is not supported for document type: {value}",
                    document_type=str(value),
                )

        if not document_type.is_ocr_supported:
            raise UnsupportedDocumentTypeError(
                f"OCR is not supported for document type: {document_type.value}",
                document_type=document_type.value,
            )
        return document_type


OCR_SUPPORTED_TYPES = frozenset({
    DocumentType.SSN,
    DocumentType.DRIVERS_LICENSE,
    DocumentType.STATE_ID,
    DocumentType.PASSPORT,
    DocumentType.WORK_AUTHORIZATION,
})


class Language(Enum):
    """Extraction languages."""
    EN = "en"
    ES = "es"

    @property
    def tesseract_code(self) -> str:
        return "spa" if self is Language.ES else "eng"

    @classmethod
    def parse(cls, value: Union["Language", str, None], default: "Language" = None) -> "Language":
        if value is None:
            return default or cls.EN
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedLanguageError(
                f"Unsupported extraction language: {value}", language=str(value)
            )


class ProcessingStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class NormalizedDate(str):
    """A date string normalized to MM/DD/YYYY."""

    __slots__ = ()

    PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$")

    def to_date(self) -> Optional[date]:
        """Return the calendar date, or None when the components don't form one."""
        if not self.PATTERN.fullmatch(self):
            return None
        month, day, year = (int(part) for part in self.split("/"))
        try:
            return date(year, month, day)
        except ValueError:
            return None


# Extracted values are text, a normalized date, or a presence flag
FieldValue = Union[str, NormalizedDate, bool]

DATE_FIELDS = frozenset({"dateOfBirth", "expirationDate"})


def coerce_field_value(field_name: str, value: Any) -> Any:
    """Re-tag plain strings for date fields as NormalizedDate."""
    if (
        field_name in DATE_FIELDS
        and isinstance(value, str)
        and not isinstance(value, NormalizedDate)
        and NormalizedDate.PATTERN.fullmatch(value)
    ):
        return NormalizedDate(value)
    return value


@dataclass
class QualityMetrics:
    """Image quality estimate used to advise on recapture."""
    resolution: Tuple[int, int]
    file_size: int
    estimated_quality: str  # low, medium, high
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resolution": {"width": self.resolution[0], "height": self.resolution[1]},
            "file_size": self.file_size,
            "estimated_quality": self.estimated_quality,
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QualityMetrics":
        resolution = data.get("resolution") or {}
        return cls(
            resolution=(int(resolution.get("width", 0)), int(resolution.get("height", 0))),
            file_size=int(data.get("file_size", 0)),
            estimated_quality=data.get("estimated_quality", "low"),
            recommendations=list(data.get("recommendations", [])),
        )


@dataclass
class OCRResult:
    """Outcome of one processing attempt on a document."""
    extracted_data: Dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0
    field_confidences: Dict[str, int] = field(default_factory=dict)
    raw_text: str = ""
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    error_message: Optional[str] = None
    enhanced_processing: bool = False
    language: Optional[Language] = None
    manually_corrected: bool = False
    corrected_at: Optional[datetime] = None
    manual_entry_enabled: bool = False
    requires_manual_review: Optional[bool] = None
    quality_metrics: Optional[QualityMetrics] = None
    processed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_completed(self) -> bool:
        return self.processing_status == ProcessingStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.processing_status == ProcessingStatus.FAILED

    @property
    def is_human_reviewed(self) -> bool:
        return self.manually_corrected or self.manual_entry_enabled

    @classmethod
    def failed(cls, message: str, language: Optional[Language] = None, **kwargs) -> "OCRResult":
        """Create a failed result; failed results always carry zero confidence."""
        return cls(
            extracted_data={},
            confidence=0.0,
            field_confidences={},
            raw_text="",
            processing_status=ProcessingStatus.FAILED,
            error_message=message,
            language=language,
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the blob shape persisted by the document store."""
        return {
            "extracted_data": {
                name: str(value) if isinstance(value, NormalizedDate) else value
                for name, value in self.extracted_data.items()
            },
            "confidence": self.confidence,
            "field_confidences": dict(self.field_confidences),
            "raw_text": self.raw_text,
            "processing_status": self.processing_status.value,
            "error_message": self.error_message,
            "enhanced_processing": self.enhanced_processing,
            "language": self.language.value if self.language else None,
            "manually_corrected": self.manually_corrected,
            "corrected_at": self.corrected_at.isoformat() if self.corrected_at else None,
            "manual_entry_enabled": self.manual_entry_enabled,
            "requires_manual_review": self.requires_manual_review,
            "quality_metrics": self.quality_metrics.to_dict() if self.quality_metrics else None,
            "processed_at": self.processed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OCRResult":
        """Rebuild a result from a persisted blob."""
        extracted = {
            name: coerce_field_value(name, value)
            for name, value in (data.get("extracted_data") or {}).items()
        }
        corrected_at = data.get("corrected_at")
        processed_at = data.get("processed_at")
        quality = data.get("quality_metrics")

        return cls(
            extracted_data=extracted,
            confidence=float(data.get("confidence", 0.0)),
            field_confidences=dict(data.get("field_confidences") or {}),
            raw_text=data.get("raw_text", ""),
            processing_status=ProcessingStatus(data.get("processing_status", "pending")),
            error_message=data.get("error_message"),
            enhanced_processing=bool(data.get("enhanced_processing", False)),
            language=Language(data["language"]) if data.get("language") else None,
            manually_corrected=bool(data.get("manually_corrected", False)),
            corrected_at=datetime.fromisoformat(corrected_at) if corrected_at else None,
            manual_entry_enabled=bool(data.get("manual_entry_enabled", False)),
            requires_manual_review=data.get("requires_manual_review"),
            quality_metrics=QualityMetrics.from_dict(quality) if quality else None,
            processed_at=(
                datetime.fromisoformat(processed_at)
                if processed_at
                else datetime.now(timezone.utc)
            ),
        )


@dataclass
class ValidationResult:
    """Field validation outcome; errors map field (or "general") to an error key."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"is_valid": self.is_valid, "errors": dict(self.errors)}


@dataclass
class ComparisonResult:
    """OCR output compared against manually entered values."""
    matches: Dict[str, bool] = field(default_factory=dict)
    differences: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    accuracy: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": dict(self.matches),
            "differences": {name: dict(diff) for name, diff in self.differences.items()},
            "accuracy": self.accuracy,
        }
