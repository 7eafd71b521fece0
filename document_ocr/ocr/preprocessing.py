"""
Image preprocessing pipeline for identity document photos.
Applies document-type specific transform chains, optionally overridden from YAML.
"""

import dataclasses
import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

import cv2
import numpy as np
import structlog
import yaml
from PIL import Image, ImageOps

from document_ocr.core.config import Settings, get_settings

from .quality import assess_image
from .types import DocumentType, ImagePreprocessingError, QualityMetrics

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PreprocessingProfile:
    """Transform parameters for one document type."""
    threshold: int = 128
    sharpen_sigma: float = 1.0
    gamma: Optional[float] = None
    max_side: int = 2000
    contrast_cutoff: float = 1.0


# Security overprinting on ID cards lowers contrast, so they binarize below
# the plain-paper SSN threshold.
DEFAULT_PROFILES: Mapping[DocumentType, PreprocessingProfile] = MappingProxyType({
    DocumentType.DRIVERS_LICENSE: PreprocessingProfile(threshold=120, sharpen_sigma=1.5),
    DocumentType.STATE_ID: PreprocessingProfile(threshold=120, sharpen_sigma=1.5),
    DocumentType.PASSPORT: PreprocessingProfile(threshold=130, sharpen_sigma=2.0, gamma=1.2),
    DocumentType.SSN: PreprocessingProfile(threshold=128, sharpen_sigma=1.0),
    DocumentType.WORK_AUTHORIZATION: PreprocessingProfile(threshold=125, sharpen_sigma=1.8),
})


@dataclass
class PreprocessedImage:
    """
    Scratch image produced for OCR.

    Use as a context manager so the scratch file is removed on every exit path.
    """
    path: Path
    quality_metrics: QualityMetrics
    applied_steps: List[str] = field(default_factory=list)

    def cleanup(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Error removing preprocessed image", path=str(self.path), error=str(e))

    def __enter__(self) -> "PreprocessedImage":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.cleanup()
        return False


class ImagePreprocessor:
    """
    Preprocessing pipeline: grayscale, contrast normalization, sharpening,
    binarization and bounded resize, encoded losslessly for the OCR engine.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        profiles_path: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize image preprocessor.

        Args:
            settings: Application settings
            profiles_path: YAML file with per-document-type profile overrides
        """
        self.settings = settings or get_settings()
        self.logger = logger.bind(component="ImagePreprocessor")

        profiles = {
            document_type: dataclasses.replace(profile, max_side=self.settings.max_image_side)
            for document_type, profile in DEFAULT_PROFILES.items()
        }

        profiles_path = profiles_path or self.settings.preprocessing_profiles_path
        if profiles_path:
            profiles.update(self._load_profile_overrides(Path(profiles_path), profiles))

        self.profiles: Mapping[DocumentType, PreprocessingProfile] = MappingProxyType(profiles)
        self.enhanced_profile = PreprocessingProfile(
            threshold=self.settings.enhanced_threshold,
            sharpen_sigma=self.settings.enhanced_sharpen_sigma,
            max_side=self.settings.enhanced_max_image_side,
        )

    def _load_profile_overrides(
        self, profiles_path: Path, base: Mapping[DocumentType, PreprocessingProfile]
    ) -> Dict[DocumentType, PreprocessingProfile]:
        """Load per-document-type profile overrides from a YAML file."""
        if not profiles_path.exists():
            self.logger.warning("Preprocessing profiles file not found", path=str(profiles_path))
            return {}

        try:
            with open(profiles_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(
                "Error loading preprocessing profiles", path=str(profiles_path), error=str(e)
            )
            return {}

        overrides = {}
        for type_name, values in data.items():
            try:
                document_type = DocumentType(type_name)
                if document_type not in base:
                    raise ValueError(f"{type_name} is not an OCR document type")
                overrides[document_type] = dataclasses.replace(base[document_type], **(values or {}))
                self.logger.info("Loaded preprocessing profile override", document_type=type_name)
            except (ValueError, TypeError) as e:
                self.logger.error(
                    "Invalid preprocessing profile override", document_type=type_name, error=str(e)
                )

        return overrides

    def get_profile(self, document_type: DocumentType, enhanced: bool = False) -> PreprocessingProfile:
        if enhanced:
            return self.enhanced_profile
        return self.profiles.get(document_type, PreprocessingProfile(max_side=self.settings.max_image_side))

    def preprocess(
        self,
        image_path: Union[str, Path],
        document_type: DocumentType,
        enhanced: bool = False,
    ) -> PreprocessedImage:
        """
        Assess and preprocess a document image.

        Args:
            image_path: Source image
            document_type: Document type selecting the transform profile
            enhanced: Use the stronger retry profile

        Returns:
            Preprocessed scratch image with quality metrics

        Raises:
            ImagePreprocessingError: If the source cannot be decoded or transformed
        """
        start_time = time.time()
        source = Path(image_path)
        profile = self.get_profile(document_type, enhanced)

        quality_metrics = assess_image(source)

        try:
            with Image.open(source) as image:
                image.load()
                gray = image.convert("L")
        except (OSError, ValueError) as e:
            raise ImagePreprocessingError(f"Unable to decode image {source.name}: {str(e)}")

        try:
            img_array, applied_steps = self._apply_pipeline(gray, profile)
        except (cv2.error, ValueError) as e:
            raise ImagePreprocessingError(f"Image preprocessing failed: {str(e)}")

        output_path = self._write_scratch_image(img_array, enhanced)

        self.logger.debug(
            "Image preprocessing completed",
            document_type=document_type.value,
            enhanced=enhanced,
            applied_steps=applied_steps,
            estimated_quality=quality_metrics.estimated_quality,
            processing_time=time.time() - start_time,
        )

        return PreprocessedImage(
            path=output_path,
            quality_metrics=quality_metrics,
            applied_steps=applied_steps,
        )

    def _apply_pipeline(self, gray: Image.Image, profile: PreprocessingProfile):
        applied_steps = ["grayscale"]

        normalized = ImageOps.autocontrast(gray, cutoff=profile.contrast_cutoff)
        img_array = np.array(normalized)
        applied_steps.append("contrast_normalize")

        img_array = self._sharpen(img_array, profile.sharpen_sigma)
        applied_steps.append(f"sharpen_sigma_{profile.sharpen_sigma}")

        if profile.gamma:
            img_array = self._adjust_gamma(img_array, profile.gamma)
            applied_steps.append(f"gamma_{profile.gamma}")

        _, img_array = cv2.threshold(img_array, profile.threshold, 255, cv2.THRESH_BINARY)
        applied_steps.append(f"threshold_{profile.threshold}")

        resized = self._bounded_resize(img_array, profile.max_side)
        if resized.shape != img_array.shape:
            applied_steps.append(f"resize_{resized.shape[1]}x{resized.shape[0]}")

        return resized, applied_steps

    def _sharpen(self, img_array: np.ndarray, sigma: float) -> np.ndarray:
        """Unsharp mask with a Gaussian of the given sigma."""
        blurred = cv2.GaussianBlur(img_array, (0, 0), sigma)
        return cv2.addWeighted(img_array, 1.5, blurred, -0.5, 0)

    def _adjust_gamma(self, img_array: np.ndarray, gamma: float) -> np.ndarray:
        inverse = 1.0 / gamma
        table = np.array(
            [((value / 255.0) ** inverse) * 255 for value in range(256)]
        ).astype("uint8")
        return cv2.LUT(img_array, table)

    def _bounded_resize(self, img_array: np.ndarray, max_side: int) -> np.ndarray:
        """Cap the longest side, preserving aspect ratio; never upscale."""
        height, width = img_array.shape[:2]
        longest = max(height, width)
        if longest <= max_side:
            return img_array

        scale = max_side / float(longest)
        new_size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
        return cv2.resize(img_array, new_size, interpolation=cv2.INTER_AREA)

    def _write_scratch_image(self, img_array: np.ndarray, enhanced: bool) -> Path:
        prefix = "enhanced_" if enhanced else "preprocessed_"
        temp_dir = self.settings.temp_directory
        if temp_dir:
            Path(temp_dir).mkdir(parents=True, exist_ok=True)

        fd, temp_name = tempfile.mkstemp(prefix=prefix, suffix=".png", dir=temp_dir)
        os.close(fd)
        output_path = Path(temp_name)

        try:
            Image.fromarray(img_array).save(output_path, format="PNG")
        except (OSError, ValueError) as e:
            output_path.unlink(missing_ok=True)
            raise ImagePreprocessingError(f"Unable to write preprocessed image: {str(e)}")

        return output_path
