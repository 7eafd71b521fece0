"""
OCR processing controller.

Chains preprocessing, recognition, language detection, field extraction and
confidence scoring for identity documents, and owns the enhanced retry,
batch, manual entry and correction flows on top of a document store.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import structlog

from document_ocr.core.config import Settings, get_settings
from document_ocr.core.logging import bind_document_id, clear_document_id
from document_ocr.extraction.comparison import compare_ocr_with_manual_entry
from document_ocr.extraction.confidence import calculate_field_confidence
from document_ocr.extraction.extractor import extract_fields
from document_ocr.extraction.messages import get_confidence_message, get_document_type_label
from document_ocr.extraction.templates import FieldTemplate, get_field_templates
from document_ocr.extraction.validator import validate_extracted_data
from document_ocr.ocr.engine import (
    TesseractEngine,
    detection_config,
    enhanced_pass_config,
    full_pass_config,
)
from document_ocr.ocr.language import detect_document_language
from document_ocr.ocr.preprocessing import ImagePreprocessor
from document_ocr.ocr.types import (
    ComparisonResult,
    DocumentFileNotFoundError,
    DocumentNotFoundError,
    DocumentType,
    Language,
    NoOCRDataError,
    OCRResult,
    ProcessingStatus,
    ValidationResult,
    coerce_field_value,
)

from .storage import (
    DocumentRecord,
    DocumentStore,
    FileStorage,
    InMemoryDocumentStore,
    LocalFileStorage,
)

logger = structlog.get_logger(__name__)

MANUAL_ENTRY_RAW_TEXT = "Manual entry"
MANUAL_ENTRY_CONFIDENCE = 100


class OCRService:
    """
    Document OCR service.

    Pre-flight problems (unsupported type, unknown document, missing file)
    raise typed errors. Failures inside the pipeline stages are returned as
    ``failed`` results so callers always receive an OCRResult.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        file_storage: Optional[FileStorage] = None,
        engine: Optional[TesseractEngine] = None,
        preprocessor: Optional[ImagePreprocessor] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the OCR service.

        Args:
            store: Document store holding records and OCR blobs
            file_storage: Source image storage
            engine: OCR engine adapter
            preprocessor: Image preprocessor
            settings: Application settings
        """
        self.settings = settings or get_settings()
        self.store = store if store is not None else InMemoryDocumentStore()
        self.file_storage = file_storage or LocalFileStorage()
        self.engine = engine or TesseractEngine(self.settings)
        self.preprocessor = preprocessor or ImagePreprocessor(self.settings)
        self.logger = logger.bind(component="OCRService")

    # Single document

    def process_document(
        self,
        image_path: Union[str, Path],
        document_type: Union[DocumentType, str],
        language: Optional[Union[Language, str]] = None,
    ) -> OCRResult:
        """
        Process a document image.

        Args:
            image_path: Source image
            document_type: OCR-supported document type
            language: Extraction language; detected from the text when None

        Returns:
            Completed result, or a failed result carrying the stage error

        Raises:
            UnsupportedDocumentTypeError: Before any file access
            DocumentFileNotFoundError: When the image is not reachable
        """
        document_type = DocumentType.parse(document_type)
        language = Language.parse(language) if language is not None else None
        source = self._check_file(image_path)

        return self._process(source, document_type, language, enhanced=False)

    def process_document_enhanced(
        self,
        image_path: Union[str, Path],
        document_type: Union[DocumentType, str],
        language: Union[Language, str] = Language.EN,
    ) -> OCRResult:
        """Process a document with the enhanced preprocessing and recognition pass."""
        document_type = DocumentType.parse(document_type)
        language = Language.parse(language)
        source = self._check_file(image_path)

        return self._process(source, document_type, language, enhanced=True)

    def _check_file(self, image_path: Union[str, Path]) -> Path:
        if not image_path or not self.file_storage.exists(image_path):
            raise DocumentFileNotFoundError(
                f"Document file not found: {image_path}",
                file_path=str(image_path) if image_path else None,
            )
        return self.file_storage.resolve(image_path)

    def _process(
        self,
        source: Path,
        document_type: DocumentType,
        language: Optional[Language],
        enhanced: bool,
    ) -> OCRResult:
        start_time = time.time()
        self.logger.info(
            "Processing document",
            document_type=document_type.value,
            language=language.value if language else None,
            enhanced=enhanced,
        )

        try:
            result = self._run_pipeline(source, document_type, language, enhanced)
        except Exception as e:
            self.logger.error(
                "OCR processing failed",
                document_type=document_type.value,
                enhanced=enhanced,
                error=str(e),
                exc_info=True,
            )
            return OCRResult.failed(str(e), language=language, enhanced_processing=enhanced)

        self.logger.info(
            "Document processed",
            document_type=document_type.value,
            language=result.language.value,
            confidence=round(result.confidence, 2),
            fields_extracted=sum(1 for value in result.extracted_data.values() if value != ""),
            estimated_quality=result.quality_metrics.estimated_quality,
            processing_time=time.time() - start_time,
        )
        return result

    def _run_pipeline(
        self,
        source: Path,
        document_type: DocumentType,
        language: Optional[Language],
        enhanced: bool,
    ) -> OCRResult:
        with self.preprocessor.preprocess(source, document_type, enhanced=enhanced) as preprocessed:
            if language is None:
                detection = self.engine.recognize(preprocessed.path, detection_config())
                language = detect_document_language(detection.text)

            if enhanced:
                config = enhanced_pass_config(language)
            else:
                config = full_pass_config(document_type, language)
            recognition = self.engine.recognize(preprocessed.path, config)

        extracted = extract_fields(recognition.text, document_type, language)
        field_confidences = calculate_field_confidence(
            extracted, recognition.text, recognition.confidence, document_type
        )

        return OCRResult(
            extracted_data=extracted,
            confidence=recognition.confidence,
            field_confidences=field_confidences,
            raw_text=recognition.text,
            processing_status=ProcessingStatus.COMPLETED,
            enhanced_processing=enhanced,
            language=language,
            quality_metrics=preprocessed.quality_metrics,
        )

    # Stored documents

    def _fetch(self, document_id: str) -> DocumentRecord:
        record = self.store.fetch(document_id)
        if record is None:
            raise DocumentNotFoundError(f"Document not found: {document_id}", document_id=document_id)
        return record

    def process_stored_document(
        self, document_id: str, language: Optional[Union[Language, str]] = None
    ) -> OCRResult:
        """Process a stored document with its own type and persist the result."""
        bind_document_id(document_id)
        try:
            record = self._fetch(document_id)
            result = self.process_document(record.file_path, record.document_type, language)
            self.store.persist(document_id, result.to_dict())
            return result
        finally:
            clear_document_id()

    def retry_with_enhancement(
        self, document_id: str, language: Union[Language, str] = Language.EN
    ) -> OCRResult:
        """
        Re-run a stored document through the enhanced pass.

        The enhanced result replaces the stored one unless the stored result
        completed with strictly higher confidence, in which case the stored
        result is returned unchanged. A failed retry never replaces a
        completed stored result. Manually entered or corrected results are
        returned as stored without running the enhanced pass.

        Raises:
            DocumentNotFoundError: Unknown document ID
            UnsupportedDocumentTypeError: Stored type has no OCR support
            DocumentFileNotFoundError: Source image is not reachable
        """
        bind_document_id(document_id)
        try:
            record = self._fetch(document_id)
            previous = record.ocr_result
            if previous is not None and previous.is_human_reviewed:
                self.logger.info(
                    "Stored result was reviewed manually, enhanced retry skipped",
                    manually_corrected=previous.manually_corrected,
                    manual_entry_enabled=previous.manual_entry_enabled,
                )
                return previous

            result = self.process_document_enhanced(record.file_path, record.document_type, language)

            if previous is not None and previous.is_completed:
                if result.is_failed:
                    self.logger.warning("Enhanced retry failed, stored result kept", error=result.error_message)
                    return result
                if self.settings.keep_best_enhanced_result and previous.confidence > result.confidence:
                    self.logger.info(
                        "Stored result kept over enhanced retry",
                        stored_confidence=round(previous.confidence, 2),
                        enhanced_confidence=round(result.confidence, 2),
                    )
                    return previous

            self.store.persist(document_id, result.to_dict())
            return result
        finally:
            clear_document_id()

    def get_pending_documents(self) -> List[DocumentRecord]:
        """Stored documents of OCR-supported types that have not been processed."""
        return self.store.find_pending()

    # Batch

    def requires_manual_review(self, result: OCRResult) -> bool:
        if not result.is_completed:
            return True
        if result.confidence < self.settings.manual_review_confidence_threshold:
            return True
        return any(
            confidence < self.settings.manual_review_field_threshold
            for confidence in result.field_confidences.values()
        )

    def _review_flagged(self, result: OCRResult) -> OCRResult:
        result.requires_manual_review = self.requires_manual_review(result)
        return result

    def _process_batch_item(
        self,
        image_path: Union[str, Path],
        document_type: Union[DocumentType, str],
        language: Optional[Union[Language, str]],
    ) -> OCRResult:
        try:
            result = self.process_document(image_path, document_type, language)
        except Exception as e:
            self.logger.warning("Batch item failed", image_path=str(image_path), error=str(e))
            result = OCRResult.failed(str(e))
        return self._review_flagged(result)

    def process_batch(
        self,
        image_paths: Iterable[Union[str, Path]],
        document_type: Union[DocumentType, str],
        language: Optional[Union[Language, str]] = None,
    ) -> Dict[str, OCRResult]:
        """
        Process several images of one document type concurrently.

        Item failures are isolated: each becomes a failed result flagged for
        manual review. Never raises.

        Returns:
            Image path to result, in input order; repeated paths are processed once
        """
        image_paths = list(dict.fromkeys(str(path) for path in image_paths))
        if not image_paths:
            return {}

        workers = max(1, min(self.settings.batch_max_workers, len(image_paths)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                path: executor.submit(self._process_batch_item, path, document_type, language)
                for path in image_paths
            }
            results = {path: future.result() for path, future in futures.items()}

        self.logger.info(
            "Batch processed",
            total=len(results),
            failed=sum(1 for result in results.values() if result.is_failed),
            manual_review=sum(1 for result in results.values() if result.requires_manual_review),
        )
        return results

    def _process_stored_batch_item(
        self, document_id: str, language: Optional[Union[Language, str]]
    ) -> OCRResult:
        try:
            result = self.process_stored_document(document_id, language)
        except Exception as e:
            self.logger.warning("Batch document failed", document_id=document_id, error=str(e))
            result = OCRResult.failed(str(e))
        return self._review_flagged(result)

    def batch_process_documents(
        self,
        document_ids: Iterable[str],
        language: Optional[Union[Language, str]] = None,
    ) -> Dict[str, OCRResult]:
        """Process stored documents concurrently, each with its own type. Never raises."""
        document_ids = list(dict.fromkeys(document_ids))
        if not document_ids:
            return {}

        workers = max(1, min(self.settings.batch_max_workers, len(document_ids)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                document_id: executor.submit(self._process_stored_batch_item, document_id, language)
                for document_id in document_ids
            }
            return {document_id: future.result() for document_id, future in futures.items()}

    # Manual entry and correction

    def enable_manual_entry(self, document_id: str, manual_data: Mapping[str, Any]) -> OCRResult:
        """
        Replace a document's OCR data with manually entered values.

        Raises:
            DocumentNotFoundError: Unknown document ID
        """
        self._fetch(document_id)

        extracted = {name: coerce_field_value(name, value) for name, value in manual_data.items()}
        result = OCRResult(
            extracted_data=extracted,
            confidence=float(MANUAL_ENTRY_CONFIDENCE),
            field_confidences={
                name: MANUAL_ENTRY_CONFIDENCE
                for name, value in extracted.items()
                if value is not None and value != ""
            },
            raw_text=MANUAL_ENTRY_RAW_TEXT,
            processing_status=ProcessingStatus.COMPLETED,
            enhanced_processing=False,
            manual_entry_enabled=True,
        )

        self.store.persist(document_id, result.to_dict())
        self.logger.info("Manual entry enabled", document_id=document_id, fields=sorted(extracted))
        return result

    def correct_ocr_data(self, document_id: str, corrected_data: Mapping[str, Any]) -> OCRResult:
        """
        Merge corrected field values into a document's stored OCR data.

        Corrected values win over extracted ones; untouched fields keep
        their values.

        Raises:
            DocumentNotFoundError: Unknown document ID
            NoOCRDataError: Document has not been processed yet
        """
        record = self._fetch(document_id)
        result = record.ocr_result
        if result is None:
            raise NoOCRDataError(
                f"Document has no OCR data to correct: {document_id}", document_id=document_id
            )

        result.extracted_data.update(
            {name: coerce_field_value(name, value) for name, value in corrected_data.items()}
        )
        result.manually_corrected = True
        result.corrected_at = datetime.now(timezone.utc)

        self.store.persist(document_id, result.to_dict())
        self.logger.info("OCR data corrected", document_id=document_id, fields=sorted(corrected_data))
        return result

    # Read-only helpers

    def compare_ocr_with_manual_entry(
        self, ocr_data: Mapping[str, Any], manual_data: Mapping[str, Any]
    ) -> ComparisonResult:
        return compare_ocr_with_manual_entry(ocr_data, manual_data)

    def validate_extracted_data(
        self,
        data: Union[OCRResult, Mapping[str, Any], None],
        language: Union[Language, str] = Language.EN,
        document_type: Optional[Union[DocumentType, str]] = None,
    ) -> ValidationResult:
        return validate_extracted_data(data, language, document_type)

    def get_confidence_message(
        self, confidence: float, language: Union[Language, str] = Language.EN
    ) -> str:
        return get_confidence_message(confidence, language)

    def get_document_type_label(
        self, document_type: Union[DocumentType, str], language: Union[Language, str] = Language.EN
    ) -> str:
        return get_document_type_label(document_type, language)

    def get_field_templates(self, document_type: Union[DocumentType, str]) -> Mapping[str, FieldTemplate]:
        return get_field_templates(document_type)
