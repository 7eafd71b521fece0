"""
Field extraction from raw OCR text using the pattern catalog.
"""

from typing import Any, Dict, Union

import structlog

from document_ocr.ocr.types import DocumentType, Language

from .patterns import ExtractionRule, get_patterns_for_language

logger = structlog.get_logger(__name__)


def apply_rule(rule: ExtractionRule, text: str) -> Any:
    """Return the transformed value for a rule, or None when it does not match."""
    match = rule.matcher.search(text)
    if not match or not match.group(1):
        return None

    value = match.group(1)
    return rule.transform(value) if rule.transform else value


def extract_fields(
    text: str,
    document_type: Union[DocumentType, str],
    language: Union[Language, str] = Language.EN,
) -> Dict[str, Any]:
    """
    Extract document fields from OCR text.

    Rules are evaluated independently in catalog order. A required field
    with no match is stored as an empty string; an optional one is omitted.

    Args:
        text: Raw OCR text
        document_type: OCR-supported document type
        language: Active extraction language

    Returns:
        Mapping of field name to extracted value
    """
    document_type = DocumentType.parse(document_type)
    language = Language.parse(language)
    text = text or ""

    extracted: Dict[str, Any] = {}
    for rule in get_patterns_for_language(document_type, language):
        value = apply_rule(rule, text)
        if value is not None and value != "":
            extracted[rule.field_name] = value
        elif rule.required:
            extracted[rule.field_name] = ""

    logger.debug(
        "Fields extracted",
        document_type=document_type.value,
        language=language.value,
        fields=sorted(name for name, value in extracted.items() if value != ""),
        missing_required=sorted(name for name, value in extracted.items() if value == ""),
    )
    return extracted
