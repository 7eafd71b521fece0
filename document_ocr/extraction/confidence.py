"""
Per-field confidence scoring.

Starts from the engine's overall confidence, applies the field weight,
rewards or penalizes validation-pattern conformance, then clamps to the
field's floor and to [0, 100].
"""

import math
from typing import Any, Dict, Mapping, Optional, Union

import structlog

from document_ocr.ocr.types import DocumentType

from .patterns import (
    CONFIDENCE_WEIGHTS,
    DEFAULT_CONFIDENCE_FLOOR,
    DEFAULT_CONFIDENCE_WEIGHT,
    MINIMUM_CONFIDENCE_THRESHOLDS,
    VALIDATION_PATTERNS,
)

logger = structlog.get_logger(__name__)

VALID_PATTERN_BOOST = 1.1
VALID_PATTERN_CAP = 95.0
INVALID_PATTERN_PENALTY = 0.7


def confidence_floor(field_name: str) -> int:
    return MINIMUM_CONFIDENCE_THRESHOLDS.get(field_name, DEFAULT_CONFIDENCE_FLOOR)


def score_field(field_name: str, value: Any, overall_confidence: float) -> int:
    """Score a single non-empty field value."""
    score = overall_confidence * CONFIDENCE_WEIGHTS.get(field_name, DEFAULT_CONFIDENCE_WEIGHT)

    pattern = VALIDATION_PATTERNS.get(field_name)
    if pattern is not None and not isinstance(value, bool):
        if pattern.fullmatch(str(value)):
            score = min(VALID_PATTERN_CAP, score * VALID_PATTERN_BOOST)
        else:
            score = score * INVALID_PATTERN_PENALTY

    score = max(float(confidence_floor(field_name)), score)
    return int(math.floor(min(100.0, max(0.0, score)) + 0.5))


def calculate_field_confidence(
    extracted_data: Mapping[str, Any],
    raw_text: str,
    overall_confidence: float,
    document_type: Optional[Union[DocumentType, str]] = None,
) -> Dict[str, int]:
    """
    Calculate confidence scores for extracted fields.

    Args:
        extracted_data: Extracted field values
        raw_text: Raw OCR text the fields came from
        overall_confidence: Engine confidence, 0-100
        document_type: Document type the fields were extracted for

    Returns:
        Field name to integer confidence; empty fields score 0
    """
    field_confidences = {}
    for field_name, value in extracted_data.items():
        if value is None or value == "" or value is False:
            field_confidences[field_name] = 0
        else:
            field_confidences[field_name] = score_field(field_name, value, overall_confidence)

    logger.debug(
        "Field confidence calculated",
        document_type=getattr(document_type, "value", document_type),
        overall_confidence=round(overall_confidence, 2),
        field_count=len(field_confidences),
    )
    return field_confidences
