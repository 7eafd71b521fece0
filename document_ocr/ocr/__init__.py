"""
Document OCR Module

Image quality assessment, preprocessing, Tesseract recognition and
language detection for photographed identity documents.
"""

from .engine import EngineConfig, EngineSession, Recognition, TesseractEngine
from .language import detect_document_language
from .preprocessing import ImagePreprocessor, PreprocessedImage, PreprocessingProfile
from .quality import assess_image, assess_image_quality
from .types import (
    ComparisonResult,
    DocumentFileNotFoundError,
    DocumentNotFoundError,
    DocumentOCRError,
    DocumentType,
    ImagePreprocessingError,
    Language,
    NoOCRDataError,
    NormalizedDate,
    OCRProcessingError,
    OCRResult,
    ProcessingStatus,
    QualityMetrics,
    UnsupportedDocumentTypeError,
    UnsupportedLanguageError,
    ValidationResult,
)

__all__ = [
    # Components
    "TesseractEngine",
    "EngineSession",
    "ImagePreprocessor",
    "detect_document_language",
    "assess_image",
    "assess_image_quality",
    # Data types
    "EngineConfig",
    "Recognition",
    "PreprocessedImage",
    "PreprocessingProfile",
    "DocumentType",
    "Language",
    "ProcessingStatus",
    "NormalizedDate",
    "OCRResult",
    "QualityMetrics",
    "ValidationResult",
    "ComparisonResult",
    # Exceptions
    "DocumentOCRError",
    "UnsupportedDocumentTypeError",
    "UnsupportedLanguageError",
    "DocumentNotFoundError",
    "DocumentFileNotFoundError",
    "ImagePreprocessingError",
    "OCRProcessingError",
    "NoOCRDataError",
]
