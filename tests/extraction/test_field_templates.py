"""
Unit tests for manual-entry templates and message keys.
"""

import pytest

from document_ocr.extraction import (
    OCRMessageKeys,
    get_confidence_message,
    get_document_type_label,
    get_field_templates,
)
from document_ocr.extraction.templates import US_STATE_CODES
from document_ocr.ocr.types import DocumentType, Language


@pytest.mark.unit
class TestFieldTemplates:
    """Test per-type form templates."""

    def test_license_template(self):
        templates = get_field_templates(DocumentType.DRIVERS_LICENSE)

        assert list(templates) == [
            "fullName",
            "licenseNumber",
            "dateOfBirth",
            "expirationDate",
            "address",
            "state",
            "zipCode",
        ]
        assert templates["dateOfBirth"].field_type == "date"
        assert templates["dateOfBirth"].required is True
        assert templates["address"].field_type == "textarea"
        assert templates["state"].options == US_STATE_CODES
        assert len(US_STATE_CODES) == 50
        assert templates["zipCode"].pattern == r"\d{5}(-\d{4})?"

    def test_label_keys(self):
        templates = get_field_templates("passport")

        assert templates["passportNumber"].label_key == "ocr.fields.passportNumber"
        assert templates["sex"].options == ("M", "F")

    def test_ssn_template_to_dict(self):
        templates = get_field_templates(DocumentType.SSN)

        assert templates["ssnNumber"].to_dict() == {
            "type": "text",
            "required": True,
            "label": "ocr.fields.ssnNumber",
            "pattern": r"\d{9}",
        }
        assert templates["fullName"].to_dict() == {
            "type": "text",
            "required": False,
            "label": "ocr.fields.fullName",
        }

    def test_unsupported_type_has_no_templates(self):
        assert dict(get_field_templates(DocumentType.HANDBOOK)) == {}
        assert dict(get_field_templates("library_card")) == {}

    def test_templates_are_read_only(self):
        templates = get_field_templates(DocumentType.SSN)

        with pytest.raises(TypeError):
            templates["extra"] = None


@pytest.mark.unit
class TestMessageKeys:
    """Test confidence and document type keys."""

    @pytest.mark.parametrize(
        "confidence,expected",
        [
            (100, OCRMessageKeys.HIGH_CONFIDENCE),
            (80, OCRMessageKeys.HIGH_CONFIDENCE),
            (79.9, OCRMessageKeys.MEDIUM_CONFIDENCE),
            (60, OCRMessageKeys.MEDIUM_CONFIDENCE),
            (59.9, OCRMessageKeys.LOW_CONFIDENCE),
            (0, OCRMessageKeys.LOW_CONFIDENCE),
        ],
    )
    def test_confidence_message(self, confidence, expected):
        assert get_confidence_message(confidence) == expected

    def test_confidence_message_is_language_neutral(self):
        assert get_confidence_message(90, Language.ES) == get_confidence_message(90, Language.EN)

    def test_document_type_label(self):
        assert get_document_type_label(DocumentType.DRIVERS_LICENSE) == "ocr.documentTypes.labels.drivers_license"
        assert get_document_type_label("ssn", "es") == "ocr.documentTypes.labels.ssn"

    def test_unknown_document_type_is_echoed(self):
        assert get_document_type_label("library_card") == "library_card"
