"""
Comparison of OCR output against manually entered values.
"""

import re
from typing import Any, Dict, Mapping

from document_ocr.ocr.types import ComparisonResult

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_value(value: Any) -> str:
    """Lower-case, drop punctuation and collapse whitespace; None becomes ""."""
    if value is None:
        return ""
    text = str(value).lower().strip()
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def compare_ocr_with_manual_entry(
    ocr_data: Mapping[str, Any], manual_data: Mapping[str, Any]
) -> ComparisonResult:
    """
    Compare two field mappings over the union of their field names.

    A field missing on one side compares as "". Differences keep the raw,
    un-normalized values. Accuracy is the matched share of the union as a
    percentage, and 0 when both mappings are empty.
    """
    ocr_data = ocr_data or {}
    manual_data = manual_data or {}

    fields = list(ocr_data)
    fields.extend(name for name in manual_data if name not in ocr_data)

    matches: Dict[str, bool] = {}
    differences: Dict[str, Dict[str, Any]] = {}

    for name in fields:
        ocr_value = ocr_data.get(name)
        manual_value = manual_data.get(name)

        is_match = normalize_value(ocr_value) == normalize_value(manual_value)
        matches[name] = is_match
        if not is_match:
            differences[name] = {"ocr": ocr_value, "manual": manual_value}

    matched = sum(1 for is_match in matches.values() if is_match)
    accuracy = (matched / len(fields)) * 100 if fields else 0.0

    return ComparisonResult(matches=matches, differences=differences, accuracy=accuracy)
