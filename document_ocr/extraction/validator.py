"""
Validation of extracted document fields.

Failures are returned as data: a mapping of field name (or "general") to a
translation key. Nothing here raises on malformed input.
"""

from datetime import date
from typing import Any, Dict, Mapping, Optional, Union

import structlog

from document_ocr.ocr.types import (
    DATE_FIELDS,
    DocumentType,
    Language,
    NormalizedDate,
    OCRResult,
    ProcessingStatus,
    ValidationResult,
)

from .messages import OCRMessageKeys, ValidationErrorKeys
from .patterns import VALIDATION_PATTERNS, required_fields

logger = structlog.get_logger(__name__)

MIN_FIELD_LENGTHS = {"fullName": 2, "address": 5}
MAX_FIELD_LENGTH = 100

MIN_AGE_YEARS = 16
MAX_AGE_YEARS = 120

FORMAT_ERROR_KEYS = {
    "ssnNumber": ValidationErrorKeys.INVALID_SSN_FORMAT,
    "licenseNumber": ValidationErrorKeys.INVALID_LICENSE_FORMAT,
    "dateOfBirth": ValidationErrorKeys.INVALID_DATE_FORMAT,
    "expirationDate": ValidationErrorKeys.INVALID_DATE_FORMAT,
    "state": ValidationErrorKeys.INVALID_STATE_CODE,
    "zipCode": ValidationErrorKeys.INVALID_ZIP_CODE,
}


def _unpack(data: Union[OCRResult, Mapping[str, Any], None]):
    if data is None:
        return None, None
    if isinstance(data, OCRResult):
        return data.extracted_data, data.processing_status

    extracted = data.get("extracted_data")
    status = data.get("processing_status")
    if isinstance(status, str):
        try:
            status = ProcessingStatus(status)
        except ValueError:
            pass
    return extracted, status


def _check_date(field_name: str, value: str, today: date) -> Optional[str]:
    parsed = NormalizedDate(value).to_date()
    if parsed is None:
        return ValidationErrorKeys.INVALID_DATE_FORMAT

    if field_name == "dateOfBirth":
        age = today.year - parsed.year
        if age < MIN_AGE_YEARS or age > MAX_AGE_YEARS:
            return ValidationErrorKeys.INVALID_AGE
    elif field_name == "expirationDate" and parsed < today:
        return ValidationErrorKeys.DOCUMENT_EXPIRED
    return None


def validate_field(field_name: str, value: Any, today: Optional[date] = None) -> Optional[str]:
    """
    Validate one non-empty field value.

    Later checks take precedence: format, then length, then date logic.

    Returns:
        Error key, or None when the value is acceptable
    """
    if value is None or value == "" or value is False:
        return None

    error = None
    text = str(value)

    pattern = VALIDATION_PATTERNS.get(field_name)
    if pattern is not None and not isinstance(value, bool) and not pattern.fullmatch(text):
        error = FORMAT_ERROR_KEYS.get(field_name, ValidationErrorKeys.INVALID_FIELD_FORMAT)

    min_length = MIN_FIELD_LENGTHS.get(field_name)
    if min_length is not None and len(text) < min_length:
        error = ValidationErrorKeys.FIELD_TOO_SHORT
    elif len(text) > MAX_FIELD_LENGTH:
        error = ValidationErrorKeys.FIELD_TOO_LONG

    if field_name in DATE_FIELDS and NormalizedDate.PATTERN.fullmatch(text):
        date_error = _check_date(field_name, text, today or date.today())
        if date_error:
            error = date_error

    return error


def validate_extracted_data(
    data: Union[OCRResult, Mapping[str, Any], None],
    language: Union[Language, str] = Language.EN,
    document_type: Optional[Union[DocumentType, str]] = None,
    today: Optional[date] = None,
) -> ValidationResult:
    """
    Validate an OCR result's extracted fields.

    Args:
        data: OCRResult, or its persisted dict form
        language: Extraction language; error keys are language-neutral
        document_type: When given, empty required fields are reported
        today: Reference date for age and expiry checks

    Returns:
        ValidationResult with field (or "general") to error key
    """
    extracted, status = _unpack(data)
    if extracted is None or status is None:
        return ValidationResult(errors={"general": ValidationErrorKeys.FIELD_REQUIRED})

    if status != ProcessingStatus.COMPLETED:
        return ValidationResult(errors={"general": OCRMessageKeys.PROCESSING_FAILED})

    today = today or date.today()
    errors: Dict[str, str] = {}

    for field_name, value in extracted.items():
        error = validate_field(field_name, value, today)
        if error:
            errors[field_name] = error

    if document_type is not None:
        document_type = DocumentType.parse(document_type)
        for field_name in required_fields(document_type, Language.parse(language)):
            value = extracted.get(field_name)
            if value is None or value == "":
                errors[field_name] = ValidationErrorKeys.FIELD_REQUIRED

    if errors:
        logger.debug("Extracted data failed validation", fields=sorted(errors))
    return ValidationResult(errors=errors)
