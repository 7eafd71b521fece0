"""
Translation keys emitted by the OCR pipeline.

The pipeline never renders user-facing text; callers resolve these keys
in their own localization layer.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Union

from document_ocr.ocr.types import DocumentType, Language


class OCRMessageKeys:
    PROCESSING_FAILED = "ocr.errors.processingFailed"

    HIGH_CONFIDENCE = "ocr.confidence.high_confidence"
    MEDIUM_CONFIDENCE = "ocr.confidence.medium_confidence"
    LOW_CONFIDENCE = "ocr.confidence.low_confidence"


class ValidationErrorKeys:
    INVALID_SSN_FORMAT = "validation.errors.invalidSsnFormat"
    INVALID_LICENSE_FORMAT = "validation.errors.invalidLicenseFormat"
    INVALID_DATE_FORMAT = "validation.errors.invalidDateFormat"
    INVALID_STATE_CODE = "validation.errors.invalidStateCode"
    INVALID_ZIP_CODE = "validation.errors.invalidZipCode"
    INVALID_FIELD_FORMAT = "validation.errors.invalidFieldFormat"
    INVALID_AGE = "validation.errors.invalidAge"
    DOCUMENT_EXPIRED = "validation.errors.documentExpired"
    FIELD_REQUIRED = "validation.errors.fieldRequired"
    FIELD_TOO_SHORT = "validation.errors.fieldTooShort"
    FIELD_TOO_LONG = "validation.errors.fieldTooLong"


FIELD_LABEL_KEYS: Mapping[str, str] = MappingProxyType({
    name: f"ocr.fields.{name}"
    for name in (
        "ssnNumber",
        "licenseNumber",
        "idNumber",
        "passportNumber",
        "alienNumber",
        "cardNumber",
        "fullName",
        "dateOfBirth",
        "expirationDate",
        "address",
        "state",
        "zipCode",
        "nationality",
        "sex",
        "countryOfBirth",
    )
})

DOCUMENT_TYPE_LABEL_KEYS: Mapping[DocumentType, str] = MappingProxyType({
    document_type: f"ocr.documentTypes.labels.{document_type.value}"
    for document_type in (
        DocumentType.DRIVERS_LICENSE,
        DocumentType.STATE_ID,
        DocumentType.PASSPORT,
        DocumentType.WORK_AUTHORIZATION,
        DocumentType.SSN,
        DocumentType.I9,
        DocumentType.W4,
    )
})

HIGH_CONFIDENCE_THRESHOLD = 80
MEDIUM_CONFIDENCE_THRESHOLD = 60


def field_label_key(field_name: str) -> str:
    return FIELD_LABEL_KEYS.get(field_name, f"ocr.fields.{field_name}")


def get_confidence_message(confidence: float, language: Union[Language, str] = Language.EN) -> str:
    """Message key for a confidence level; keys are shared across languages."""
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return OCRMessageKeys.HIGH_CONFIDENCE
    if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return OCRMessageKeys.MEDIUM_CONFIDENCE
    return OCRMessageKeys.LOW_CONFIDENCE


def get_document_type_label(
    document_type: Union[DocumentType, str],
    language: Optional[Union[Language, str]] = Language.EN,
) -> str:
    """Label key for a document type; unknown types are returned unchanged."""
    if isinstance(document_type, DocumentType):
        resolved = document_type
    else:
        try:
            resolved = DocumentType(str(document_type))
        except ValueError:
            return str(document_type)

    return DOCUMENT_TYPE_LABEL_KEYS.get(resolved, resolved.value)
