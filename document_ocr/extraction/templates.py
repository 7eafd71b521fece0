"""
Manual-entry form templates per document type.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from document_ocr.ocr.types import DocumentType

from .messages import field_label_key

US_STATE_CODES = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)

SEX_OPTIONS = ("M", "F")


@dataclass(frozen=True)
class FieldTemplate:
    """UI hint for one manual-entry field."""
    field_type: str  # text, date, textarea, select
    required: bool
    label_key: str
    options: Optional[Tuple[str, ...]] = None
    pattern: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.field_type,
            "required": self.required,
            "label": self.label_key,
        }
        if self.options is not None:
            data["options"] = list(self.options)
        if self.pattern is not None:
            data["pattern"] = self.pattern
        return data


def _field(name, field_type="text", required=False, options=None, pattern=None):
    return name, FieldTemplate(field_type, required, field_label_key(name), options, pattern)


def _template(*fields) -> Mapping[str, FieldTemplate]:
    return MappingProxyType(dict(fields))


FIELD_TEMPLATES: Mapping[DocumentType, Mapping[str, FieldTemplate]] = MappingProxyType({
    DocumentType.DRIVERS_LICENSE: _template(
        _field("fullName", required=True),
        _field("licenseNumber", required=True),
        _field("dateOfBirth", "date", required=True),
        _field("expirationDate", "date"),
        _field("address", "textarea"),
        _field("state", "select", options=US_STATE_CODES),
        _field("zipCode", pattern=r"\d{5}(-\d{4})?"),
    ),
    DocumentType.STATE_ID: _template(
        _field("fullName", required=True),
        _field("idNumber", required=True),
        _field("dateOfBirth", "date", required=True),
        _field("expirationDate", "date"),
        _field("address", "textarea"),
        _field("state", "select", options=US_STATE_CODES),
    ),
    DocumentType.PASSPORT: _template(
        _field("fullName", required=True),
        _field("passportNumber", required=True),
        _field("dateOfBirth", "date", required=True),
        _field("expirationDate", "date"),
        _field("nationality"),
        _field("sex", "select", options=SEX_OPTIONS),
    ),
    DocumentType.WORK_AUTHORIZATION: _template(
        _field("fullName", required=True),
        _field("alienNumber"),
        _field("cardNumber"),
        _field("expirationDate", "date"),
        _field("countryOfBirth"),
    ),
    DocumentType.SSN: _template(
        _field("ssnNumber", required=True, pattern=r"\d{9}"),
        _field("fullName"),
    ),
})


def get_field_templates(document_type: Union[DocumentType, str]) -> Mapping[str, FieldTemplate]:
    """Field templates for a document type; empty for types without OCR support."""
    if not isinstance(document_type, DocumentType):
        try:
            document_type = DocumentType(str(document_type))
        except ValueError:
            return MappingProxyType({})
    return FIELD_TEMPLATES.get(document_type, MappingProxyType({}))
