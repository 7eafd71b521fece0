"""
Field Extraction Module.

Language-aware pattern extraction of identity-document fields, per-field
confidence scoring, validation and manual-entry support.
"""

from .comparison import compare_ocr_with_manual_entry, normalize_value
from .confidence import calculate_field_confidence
from .extractor import extract_fields
from .messages import (
    OCRMessageKeys,
    ValidationErrorKeys,
    get_confidence_message,
    get_document_type_label,
)
from .patterns import (
    CONFIDENCE_WEIGHTS,
    EXTRACTION_PATTERNS,
    MINIMUM_CONFIDENCE_THRESHOLDS,
    VALIDATION_PATTERNS,
    ExtractionRule,
    format_date_by_locale,
    get_patterns_for_language,
)
from .templates import FIELD_TEMPLATES, FieldTemplate, get_field_templates
from .validator import validate_extracted_data

__all__ = [
    "extract_fields",
    "calculate_field_confidence",
    "validate_extracted_data",
    "compare_ocr_with_manual_entry",
    "normalize_value",
    "get_confidence_message",
    "get_document_type_label",
    "get_field_templates",
    "get_patterns_for_language",
    "format_date_by_locale",
    "ExtractionRule",
    "FieldTemplate",
    "OCRMessageKeys",
    "ValidationErrorKeys",
    "EXTRACTION_PATTERNS",
    "VALIDATION_PATTERNS",
    "CONFIDENCE_WEIGHTS",
    "MINIMUM_CONFIDENCE_THRESHOLDS",
    "FIELD_TEMPLATES",
]
