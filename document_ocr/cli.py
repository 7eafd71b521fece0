"""
Command line entry point: run OCR on one document image and print the
result as JSON.
"""

import argparse
import json
import sys
from typing import List, Optional

import structlog

from document_ocr.core.config import get_settings
from document_ocr.core.logging import configure_logging
from document_ocr.ocr.types import OCR_SUPPORTED_TYPES, DocumentOCRError, Language
from document_ocr.processing.service import OCRService

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="document_ocr",
        description="Extract structured fields from an identity document image",
    )
    parser.add_argument("image", help="Path to the document image")
    parser.add_argument(
        "--type",
        "-t",
        dest="document_type",
        required=True,
        choices=sorted(document_type.value for document_type in OCR_SUPPORTED_TYPES),
        help="Document type",
    )
    parser.add_argument(
        "--language",
        "-l",
        choices=[language.value for language in Language],
        help="Extraction language (detected from the text when omitted)",
    )
    parser.add_argument("--enhanced", action="store_true", help="Use the enhanced preprocessing pass")
    parser.add_argument("--validate", action="store_true", help="Include field validation errors")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(get_settings(), stream=sys.stderr)
    service = OCRService()

    try:
        if args.enhanced:
            result = service.process_document_enhanced(
                args.image, args.document_type, args.language or Language.EN
            )
        else:
            result = service.process_document(args.image, args.document_type, args.language)
    except DocumentOCRError as e:
        logger.error("Document could not be processed", image=args.image, error=str(e))
        print(json.dumps({"error": str(e)}, indent=2))
        return 2

    output = result.to_dict()
    output["confidence_message"] = service.get_confidence_message(result.confidence, result.language)
    if args.validate:
        output["validation"] = service.validate_extracted_data(
            result, result.language or Language.EN, args.document_type
        ).to_dict()

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0 if result.is_completed else 1


if __name__ == "__main__":
    sys.exit(main())
