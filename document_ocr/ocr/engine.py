"""
Tesseract engine adapter.

Engine sessions are scoped resources: acquired with a language and
segmentation configuration, released on every exit path.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import pytesseract
import structlog
from PIL import Image

from document_ocr.core.config import Settings, get_settings

from .types import DocumentType, Language, OCRProcessingError

logger = structlog.get_logger(__name__)


# Page segmentation modes
PSM_AUTO_OSD = 1
PSM_AUTO = 3
PSM_SINGLE_BLOCK = 6

# Engine modes
OEM_LSTM_ONLY = 1
OEM_DEFAULT = 3


@dataclass(frozen=True)
class EngineConfig:
    """Language plus Tesseract segmentation and engine modes."""
    language: Language
    psm: int
    oem: int

    def to_tesseract_args(self) -> str:
        return f"--oem {self.oem} --psm {self.psm}"


# Cards mix photo, labels and values; the SSN card is one plain block
FULL_PASS_PSM = {
    DocumentType.DRIVERS_LICENSE: PSM_AUTO_OSD,
    DocumentType.STATE_ID: PSM_AUTO_OSD,
    DocumentType.PASSPORT: PSM_AUTO_OSD,
    DocumentType.WORK_AUTHORIZATION: PSM_AUTO_OSD,
    DocumentType.SSN: PSM_SINGLE_BLOCK,
}


def detection_config() -> EngineConfig:
    """Fast English pass used only to detect the document language."""
    return EngineConfig(language=Language.EN, psm=PSM_AUTO, oem=OEM_LSTM_ONLY)


def full_pass_config(document_type: DocumentType, language: Language) -> EngineConfig:
    return EngineConfig(
        language=language,
        psm=FULL_PASS_PSM.get(document_type, PSM_AUTO),
        oem=OEM_DEFAULT,
    )


def enhanced_pass_config(language: Language) -> EngineConfig:
    return EngineConfig(language=language, psm=PSM_SINGLE_BLOCK, oem=OEM_LSTM_ONLY)


@dataclass
class Recognition:
    """Raw engine output."""
    text: str
    confidence: float  # 0-100


@lru_cache(maxsize=4)
def _available_languages(tesseract_cmd: Optional[str]) -> Tuple[str, ...]:
    return tuple(pytesseract.get_languages(config=""))


class EngineSession:
    """An initialized engine handle bound to one configuration."""

    def __init__(self, config: EngineConfig, timeout: int = 0):
        self.config = config
        self.timeout = timeout
        self.released = False
        self._images: List[Image.Image] = []
        self.logger = logger.bind(
            component="EngineSession",
            language=config.language.value,
            psm=config.psm,
            oem=config.oem,
        )

    def recognize(self, image_path: Union[str, Path]) -> Recognition:
        """
        Recognize text in an image.

        Raises:
            OCRProcessingError: If the engine fails or the session was released
        """
        if self.released:
            raise OCRProcessingError("OCR engine session already released")

        try:
            image = Image.open(image_path)
        except (OSError, ValueError) as e:
            raise OCRProcessingError(f"Unable to load image for OCR: {str(e)}")
        self._images.append(image)

        try:
            data = pytesseract.image_to_data(
                image,
                lang=self.config.language.tesseract_code,
                config=self.config.to_tesseract_args(),
                output_type=pytesseract.Output.DICT,
                timeout=self.timeout,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise OCRProcessingError(f"Tesseract is not installed: {str(e)}")
        except (pytesseract.TesseractError, RuntimeError) as e:
            # pytesseract signals timeouts with RuntimeError
            raise OCRProcessingError(f"OCR engine failed: {str(e)}")

        text, confidence = self._organize_output(data)

        self.logger.debug(
            "OCR recognition completed",
            characters=len(text),
            confidence=round(confidence, 2),
        )
        return Recognition(text=text, confidence=confidence)

    def _organize_output(self, data: Dict[str, List[Any]]) -> Tuple[str, float]:
        """Rebuild line-ordered text and the mean word confidence."""
        lines: Dict[Tuple[int, int, int], List[str]] = {}
        confidences = []

        for i, word in enumerate(data.get("text", [])):
            word = (word or "").strip()
            if not word:
                continue

            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(word)

            conf = float(data["conf"][i])
            if conf >= 0:
                confidences.append(conf)

        text = "\n".join(" ".join(words) for words in lines.values())
        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return text, max(0.0, min(100.0, confidence))

    def release(self) -> None:
        for image in self._images:
            image.close()
        self._images.clear()
        self.released = True


class TesseractEngine:
    """
    Tesseract OCR adapter.

    Sessions are acquired through ``session()``, which guarantees release.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger = logger.bind(component="TesseractEngine")

        if self.settings.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.settings.tesseract_cmd

    def _verify_language(self, language: Language) -> None:
        """Verify Tesseract is installed with data for the language."""
        try:
            languages = _available_languages(self.settings.tesseract_cmd)
        except pytesseract.TesseractNotFoundError as e:
            raise OCRProcessingError(f"Tesseract is not installed: {str(e)}")
        except (pytesseract.TesseractError, OSError) as e:
            raise OCRProcessingError(f"Tesseract verification failed: {str(e)}")

        if language.tesseract_code not in languages:
            raise OCRProcessingError(
                f"Required language '{language.tesseract_code}' not available in Tesseract"
            )

    @contextmanager
    def session(self, config: EngineConfig) -> Iterator[EngineSession]:
        """Acquire an engine session, releasing it on every exit path."""
        self._verify_language(config.language)
        engine_session = EngineSession(config, timeout=self.settings.ocr_timeout)

        try:
            yield engine_session
        finally:
            engine_session.release()
            self.logger.debug(
                "OCR engine session released",
                language=config.language.value,
                psm=config.psm,
            )

    def recognize(self, image_path: Union[str, Path], config: EngineConfig) -> Recognition:
        """Run one recognition in its own session."""
        with self.session(config) as engine_session:
            return engine_session.recognize(image_path)
