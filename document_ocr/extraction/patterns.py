"""
Extraction pattern catalog for identity documents.

Rules are keyed by (document type, language). Validation patterns,
confidence weights and minimum confidence floors are per field. All tables
are built once at import and are read-only.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Tuple, Union

from document_ocr.ocr.types import DocumentType, Language, NormalizedDate


@dataclass(frozen=True)
class ExtractionRule:
    """One field pattern; group 1 of the matcher is the candidate value."""
    field_name: str
    matcher: Pattern
    transform: Optional[Callable[[str], Any]] = None
    required: bool = False
    language: Optional[Language] = None

    def applies_to(self, language: Language) -> bool:
        return self.language is None or self.language == language


def format_date_by_locale(value: str, language: Language = Language.EN) -> Union[NormalizedDate, str]:
    """
    Normalize a matched date to MM/DD/YYYY.

    Two-digit years above 50 are read as 19xx, the rest as 20xx. Both
    languages keep month-first order.
    """
    parts = re.split(r"[-/]", value.strip())
    if len(parts) != 3:
        return value

    month, day, year = parts
    if len(year) == 2:
        year = ("19" if int(year) > 50 else "20") + year

    return NormalizedDate(f"{month.zfill(2)}/{day.zfill(2)}/{year}")


def _upper_trimmed(value: str) -> str:
    return value.strip().upper()


def _trimmed(value: str) -> str:
    return value.strip()


def _identifier(value: str) -> str:
    return re.sub(r"[-\s]", "", value).upper()


def _upper(value: str) -> str:
    return value.upper()


def _present(value: str) -> bool:
    return True


def _date_en(value: str) -> Union[NormalizedDate, str]:
    return format_date_by_locale(value, Language.EN)


def _date_es(value: str) -> Union[NormalizedDate, str]:
    return format_date_by_locale(value, Language.ES)


def _rx(pattern: str, ignore_case: bool = True) -> Pattern:
    return re.compile(pattern, re.IGNORECASE if ignore_case else 0)


# Fragments shared by several rules
_LINE_VALUE = r"[:.\s]*(.*?)(?:\n|$)"
_DATE_VALUE = r"[:.\s]*(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})"
# Document numbers must contain a digit so a label word is never captured
_ID_VALUE = r"[\s#.:]*([a-z0-9-]*\d[a-z0-9-]*)"


def _text(field_name, pattern, language, transform=_upper_trimmed, required=False):
    return ExtractionRule(field_name, _rx(pattern), transform, required, language)


def _date(field_name, pattern, language, required=False):
    transform = _date_es if language == Language.ES else _date_en
    return ExtractionRule(field_name, _rx(pattern), transform, required, language)


def _flag(field_name, pattern, language):
    return ExtractionRule(field_name, _rx(pattern), _present, False, language)


EN = Language.EN
ES = Language.ES


DRIVERS_LICENSE_EN = (
    _text("fullName", r"(?:name|nam|full\s*name)" + _LINE_VALUE, EN, required=True),
    _text("licenseNumber", r"(?:license|lic|dl|driver|id)" + _ID_VALUE, EN, _identifier, required=True),
    _date("dateOfBirth", r"(?:dob|birth|born|date\s*of\s*birth)" + _DATE_VALUE, EN, required=True),
    _date("expirationDate", r"(?:exp|expires|expiration|valid\s*until)" + _DATE_VALUE, EN),
    _text("address", r"(?:address|addr|residence)" + _LINE_VALUE, EN, _trimmed),
    _text("state", r"(?:state|st)[:.\s]*([a-z]{2})\b", EN, _upper),
    _text("zipCode", r"(?:zip|postal)[:.\s]*(\d{5}(?:-\d{4})?)", EN, None),
)

DRIVERS_LICENSE_ES = (
    _text("fullName", r"(?:nombre\s*completo|nombre|nom|apellidos?)" + _LINE_VALUE, ES, required=True),
    _text(
        "licenseNumber",
        r"(?:licencia|lic|número|numero|num|no\.?|identificación)" + _ID_VALUE,
        ES,
        _identifier,
        required=True,
    ),
    _date(
        "dateOfBirth",
        r"(?:fecha\s*de\s*nacimiento|nacimiento|nac|f\.\s*nac|born)" + _DATE_VALUE,
        ES,
        required=True,
    ),
    _date("expirationDate", r"(?:vencimiento|vence|expira|válida?\s*hasta|exp|caducidad)" + _DATE_VALUE, ES),
    _text("address", r"(?:dirección|direccion|dir|domicilio|residencia|address)" + _LINE_VALUE, ES, _trimmed),
    _text("state", r"(?:estado|est|provincia|prov)[:.\s]*([a-z]{2,})", ES, _upper),
    _text("zipCode", r"(?:código\s*postal|codigo\s*postal|cp|zip)[:.\s]*(\d{5}(?:-\d{4})?)", ES, None),
)

SSN_EN = (
    ExtractionRule(
        "ssnNumber",
        _rx(r"(\d{3}[-\s]?\d{2}[-\s]?\d{4})", ignore_case=False),
        _identifier,
        True,
        EN,
    ),
    _text("fullName", r"(?:name|nam)" + _LINE_VALUE, EN),
    _flag("socialSecurity", r"(social\s*security)", EN),
)

SSN_ES = (
    ExtractionRule(
        "ssnNumber",
        _rx(r"(\d{3}[-\s]?\d{2}[-\s]?\d{4})", ignore_case=False),
        _identifier,
        True,
        ES,
    ),
    _text("fullName", r"(?:nombre|nom)" + _LINE_VALUE, ES),
    _flag("socialSecurity", r"(seguro\s*social)", ES),
)

STATE_ID_EN = (
    _text("fullName", r"(?:name|nam|full\s*name)" + _LINE_VALUE, EN, required=True),
    _text("idNumber", r"(?:identification|id|card)" + _ID_VALUE, EN, _identifier, required=True),
    _date("dateOfBirth", r"(?:dob|birth|born|date\s*of\s*birth)" + _DATE_VALUE, EN, required=True),
    _date("expirationDate", r"(?:exp|expires|expiration|valid\s*until)" + _DATE_VALUE, EN),
    _text("address", r"(?:address|addr|residence)" + _LINE_VALUE, EN, _trimmed),
    _text("state", r"(?:state|st)[:.\s]*([a-z]{2})\b", EN, _upper),
)

STATE_ID_ES = (
    _text("fullName", r"(?:nombre\s*completo|nombre|nom|apellidos?)" + _LINE_VALUE, ES, required=True),
    _text(
        "idNumber",
        r"(?:identificación|identificacion|id|número|numero|num|no\.?)" + _ID_VALUE,
        ES,
        _identifier,
        required=True,
    ),
    _date(
        "dateOfBirth",
        r"(?:fecha\s*de\s*nacimiento|nacimiento|nac|f\.\s*nac)" + _DATE_VALUE,
        ES,
        required=True,
    ),
    _date("expirationDate", r"(?:vencimiento|vence|expira|válida?\s*hasta|exp|caducidad)" + _DATE_VALUE, ES),
    _text("address", r"(?:dirección|direccion|dir|domicilio|residencia)" + _LINE_VALUE, ES, _trimmed),
    _text("state", r"(?:estado|est|provincia|prov)[:.\s]*([a-z]{2,})", ES, _upper),
)

PASSPORT_EN = (
    _text("fullName", r"(?:name|surname|given\s*names?)" + _LINE_VALUE, EN, required=True),
    _text(
        "passportNumber",
        r"(?:passport\s*(?:no|number)?|no|number)[ \t#.:]*([a-z0-9]*\d[a-z0-9]*)",
        EN,
        _identifier,
        required=True,
    ),
    _date("dateOfBirth", r"(?:date\s*of\s*birth|dob|birth)" + _DATE_VALUE, EN, required=True),
    _date("expirationDate", r"(?:date\s*of\s*expiry|expiry|expires?)" + _DATE_VALUE, EN),
    _text("nationality", r"(?:nationality|country)[:.\s]*([a-z ]+)", EN),
    _text("sex", r"(?:sex|gender)[:.\s]*([mf])\b", EN, _upper),
)

WORK_AUTHORIZATION_EN = (
    _text("fullName", r"(?:employee\s*name|name)" + _LINE_VALUE, EN, required=True),
    _text("alienNumber", r"(?:alien|a-number|a#|uscis)" + _ID_VALUE, EN, _identifier),
    _text("cardNumber", r"(?:card|receipt|case)" + _ID_VALUE, EN, _identifier),
    _date("expirationDate", r"(?:card\s*expires|valid\s*until|expires?)" + _DATE_VALUE, EN),
    _text("countryOfBirth", r"(?:country\s*of\s*birth|birth\s*country)[:.\s]*([a-z ]+)", EN),
)


EXTRACTION_PATTERNS: Mapping[DocumentType, Tuple[ExtractionRule, ...]] = MappingProxyType({
    DocumentType.DRIVERS_LICENSE: DRIVERS_LICENSE_EN + DRIVERS_LICENSE_ES,
    DocumentType.STATE_ID: STATE_ID_EN + STATE_ID_ES,
    DocumentType.PASSPORT: PASSPORT_EN,
    DocumentType.WORK_AUTHORIZATION: WORK_AUTHORIZATION_EN,
    DocumentType.SSN: SSN_EN + SSN_ES,
})


def _by_language() -> Dict[Tuple[DocumentType, Language], Tuple[ExtractionRule, ...]]:
    table = {}
    for document_type, rules in EXTRACTION_PATTERNS.items():
        for language in Language:
            table[(document_type, language)] = tuple(r for r in rules if r.applies_to(language))
    return table


PATTERN_CATALOG: Mapping[Tuple[DocumentType, Language], Tuple[ExtractionRule, ...]] = MappingProxyType(
    _by_language()
)


def get_patterns_for_language(
    document_type: DocumentType, language: Language = Language.EN
) -> Tuple[ExtractionRule, ...]:
    """Rules for a document type that apply to the given language, in catalog order."""
    return PATTERN_CATALOG.get((document_type, language), ())


def required_fields(document_type: DocumentType, language: Language = Language.EN) -> List[str]:
    return [r.field_name for r in get_patterns_for_language(document_type, language) if r.required]


VALIDATION_PATTERNS: Mapping[str, Pattern] = MappingProxyType({
    "ssnNumber": re.compile(r"^\d{9}$"),
    "licenseNumber": re.compile(r"^[A-Z0-9]{5,}$"),
    "idNumber": re.compile(r"^[A-Z0-9]{5,}$"),
    "passportNumber": re.compile(r"^[A-Z0-9]{6,}$"),
    "alienNumber": re.compile(r"^[A-Z0-9]{8,}$"),
    "cardNumber": re.compile(r"^[A-Z0-9]{10,}$"),
    "dateOfBirth": re.compile(r"^\d{2}/\d{2}/\d{4}$"),
    "expirationDate": re.compile(r"^\d{2}/\d{2}/\d{4}$"),
    "zipCode": re.compile(r"^\d{5}(-\d{4})?$"),
    "state": re.compile(r"^[A-Z]{2,}$"),
    "nationality": re.compile(r"^[A-Z\s]{2,}$"),
    "countryOfBirth": re.compile(r"^[A-Z\s]{2,}$"),
    "sex": re.compile(r"^[MF]$"),
})

# Multipliers on engine confidence reflecting how reliable each pattern is
CONFIDENCE_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "ssnNumber": 1.2,
    "licenseNumber": 1.1,
    "dateOfBirth": 1.1,
    "expirationDate": 1.0,
    "fullName": 0.9,
    "address": 0.8,
    "state": 1.0,
    "zipCode": 1.0,
})

MINIMUM_CONFIDENCE_THRESHOLDS: Mapping[str, int] = MappingProxyType({
    "ssnNumber": 80,
    "licenseNumber": 75,
    "dateOfBirth": 70,
    "expirationDate": 65,
    "fullName": 60,
    "address": 50,
    "state": 70,
    "zipCode": 75,
})

DEFAULT_CONFIDENCE_WEIGHT = 1.0
DEFAULT_CONFIDENCE_FLOOR = 50
