"""
Keyword-based language detection for OCR text.
"""

import re
from typing import Dict, Iterable, Pattern, Tuple

import structlog

from .types import Language

logger = structlog.get_logger(__name__)


SPANISH_KEYWORDS: Tuple[str, ...] = (
    "nombre",
    "licencia",
    "fecha",
    "nacimiento",
    "fecha de nacimiento",
    "direccion",
    "dirección",
    "vence",
    "seguro social",
    "numero",
    "número",
    "estado",
    "domicilio",
    "apellidos",
    "expedicion",
    "expedición",
    "valida hasta",
    "válida hasta",
    "codigo postal",
    "código postal",
)

ENGLISH_KEYWORDS: Tuple[str, ...] = (
    "name",
    "license",
    "date",
    "birth",
    "date of birth",
    "address",
    "expires",
    "social security",
    "number",
    "state",
    "residence",
    "issued",
    "valid until",
    "zip code",
    "driver",
    "identification",
)


def _compile(keywords: Iterable[str]) -> Tuple[Pattern, ...]:
    return tuple(re.compile(rf"\b{re.escape(keyword)}\b") for keyword in keywords)


_SPANISH_PATTERNS = _compile(SPANISH_KEYWORDS)
_ENGLISH_PATTERNS = _compile(ENGLISH_KEYWORDS)


def score_languages(text: str) -> Dict[Language, int]:
    """Count whole-word keyword hits per language."""
    normalized = text.lower()
    return {
        Language.EN: sum(len(p.findall(normalized)) for p in _ENGLISH_PATTERNS),
        Language.ES: sum(len(p.findall(normalized)) for p in _SPANISH_PATTERNS),
    }


def detect_document_language(text: str) -> Language:
    """
    Pick the extraction language for raw OCR text.

    Ties, including text with no keywords at all, resolve to English.
    """
    scores = score_languages(text or "")
    language = Language.ES if scores[Language.ES] > scores[Language.EN] else Language.EN

    logger.debug(
        "Document language detected",
        language=language.value,
        english_score=scores[Language.EN],
        spanish_score=scores[Language.ES],
    )
    return language
