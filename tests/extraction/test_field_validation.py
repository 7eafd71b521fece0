"""
Unit tests for extracted field validation.
"""

from datetime import date

import pytest

from document_ocr.extraction import OCRMessageKeys, ValidationErrorKeys, validate_extracted_data
from document_ocr.extraction.validator import validate_field
from document_ocr.ocr.types import NormalizedDate, OCRResult, ProcessingStatus

TODAY = date(2026, 6, 15)


def completed(**fields) -> OCRResult:
    return OCRResult(extracted_data=fields, confidence=90.0, processing_status=ProcessingStatus.COMPLETED)


@pytest.mark.unit
class TestValidateExtractedData:
    """Test whole-result validation."""

    def test_valid_license(self):
        result = completed(
            fullName="JOHN DOE",
            licenseNumber="D1234567",
            dateOfBirth=NormalizedDate("01/15/1985"),
            expirationDate=NormalizedDate("01/15/2030"),
            state="CA",
            zipCode="90210",
        )

        validation = validate_extracted_data(result, today=TODAY)

        assert validation.is_valid
        assert validation.errors == {}

    def test_validation_is_idempotent(self):
        result = completed(ssnNumber="123456789")

        first = validate_extracted_data(result, today=TODAY)
        second = validate_extracted_data(result, today=TODAY)

        assert first.is_valid and second.is_valid
        assert first.errors == second.errors == {}

    def test_missing_data(self):
        validation = validate_extracted_data(None)

        assert not validation.is_valid
        assert validation.errors == {"general": ValidationErrorKeys.FIELD_REQUIRED}

    def test_failed_result_has_single_general_error(self):
        validation = validate_extracted_data(OCRResult.failed("engine crashed"))

        assert validation.errors == {"general": OCRMessageKeys.PROCESSING_FAILED}

    def test_accepts_persisted_dict(self):
        blob = completed(ssnNumber="123-45-6789").to_dict()

        validation = validate_extracted_data(blob, today=TODAY)

        assert validation.errors == {"ssnNumber": ValidationErrorKeys.INVALID_SSN_FORMAT}

    def test_dict_without_status(self):
        validation = validate_extracted_data({"extracted_data": {}})

        assert validation.errors == {"general": ValidationErrorKeys.FIELD_REQUIRED}

    def test_empty_fields_are_skipped_without_document_type(self):
        validation = validate_extracted_data(completed(fullName="", licenseNumber=""), today=TODAY)

        assert validation.is_valid

    def test_required_fields_checked_with_document_type(self):
        result = completed(fullName="JOHN DOE", licenseNumber="")

        validation = validate_extracted_data(result, "en", "drivers_license", today=TODAY)

        assert validation.errors == {
            "licenseNumber": ValidationErrorKeys.FIELD_REQUIRED,
            "dateOfBirth": ValidationErrorKeys.FIELD_REQUIRED,
        }

    def test_kind_specific_error_keys(self):
        result = completed(
            ssnNumber="12345",
            licenseNumber="AB",
            state="california",
            zipCode="9021",
            sex="X",
        )

        validation = validate_extracted_data(result, today=TODAY)

        assert validation.errors == {
            "ssnNumber": ValidationErrorKeys.INVALID_SSN_FORMAT,
            "licenseNumber": ValidationErrorKeys.INVALID_LICENSE_FORMAT,
            "state": ValidationErrorKeys.INVALID_STATE_CODE,
            "zipCode": ValidationErrorKeys.INVALID_ZIP_CODE,
            "sex": ValidationErrorKeys.INVALID_FIELD_FORMAT,
        }


@pytest.mark.unit
class TestValidateField:
    """Test single field rules and their precedence."""

    def test_short_full_name(self):
        assert validate_field("fullName", "J", TODAY) == ValidationErrorKeys.FIELD_TOO_SHORT

    def test_short_address(self):
        assert validate_field("address", "1 A", TODAY) == ValidationErrorKeys.FIELD_TOO_SHORT

    def test_long_value_overrides_format_error(self):
        assert validate_field("licenseNumber", "a" * 101, TODAY) == ValidationErrorKeys.FIELD_TOO_LONG

    def test_unformatted_date(self):
        assert validate_field("dateOfBirth", "1985-01-15", TODAY) == ValidationErrorKeys.INVALID_DATE_FORMAT

    def test_impossible_calendar_date(self):
        assert validate_field("dateOfBirth", "02/30/1990", TODAY) == ValidationErrorKeys.INVALID_DATE_FORMAT

    def test_too_young(self):
        assert validate_field("dateOfBirth", "01/01/2015", TODAY) == ValidationErrorKeys.INVALID_AGE

    def test_too_old(self):
        assert validate_field("dateOfBirth", "01/01/1900", TODAY) == ValidationErrorKeys.INVALID_AGE

    def test_adult_birth_date(self):
        assert validate_field("dateOfBirth", "01/01/1990", TODAY) is None

    def test_expired_document(self):
        assert validate_field("expirationDate", "06/14/2026", TODAY) == ValidationErrorKeys.DOCUMENT_EXPIRED

    def test_expiring_today_is_valid(self):
        assert validate_field("expirationDate", "06/15/2026", TODAY) is None

    def test_flag_value(self):
        assert validate_field("socialSecurity", True, TODAY) is None

    def test_empty_value(self):
        assert validate_field("ssnNumber", "", TODAY) is None
