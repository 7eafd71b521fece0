"""
Identity document OCR extraction.

Turns photographed or scanned identity documents into structured,
confidence-scored fields, with manual entry when extraction is unreliable.
"""

from .ocr.types import (
    DocumentOCRError,
    DocumentType,
    Language,
    OCRResult,
    ProcessingStatus,
)
from .processing import OCRService

__version__ = "1.0.0"

__all__ = [
    "OCRService",
    "OCRResult",
    "DocumentType",
    "Language",
    "ProcessingStatus",
    "DocumentOCRError",
]
