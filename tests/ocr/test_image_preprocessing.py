"""
Unit tests for the image preprocessing pipeline.
"""

import numpy as np
import pytest
import yaml
from PIL import Image

from document_ocr.core.config import Settings
from document_ocr.ocr.preprocessing import DEFAULT_PROFILES, ImagePreprocessor
from document_ocr.ocr.types import DocumentType, ImagePreprocessingError


@pytest.mark.unit
class TestPreprocessingProfiles:
    """Test profile selection and overrides."""

    def test_default_profiles(self, settings):
        preprocessor = ImagePreprocessor(settings)

        license_profile = preprocessor.get_profile(DocumentType.DRIVERS_LICENSE)
        passport_profile = preprocessor.get_profile(DocumentType.PASSPORT)

        assert license_profile.threshold == 120
        assert license_profile.sharpen_sigma == 1.5
        assert passport_profile.gamma == 1.2
        assert passport_profile.max_side == settings.max_image_side

    def test_enhanced_profile_comes_from_settings(self, settings):
        preprocessor = ImagePreprocessor(settings)

        profile = preprocessor.get_profile(DocumentType.SSN, enhanced=True)

        assert profile.threshold == 128
        assert profile.sharpen_sigma == 2.0
        assert profile.max_side == 2500

    def test_yaml_overrides(self, settings, tmp_path):
        profiles_path = tmp_path / "profiles.yaml"
        profiles_path.write_text(yaml.safe_dump({
            "passport": {"threshold": 100},
            "w4": {"threshold": 90},
            "ssn": {"unknown_option": 1},
        }))

        preprocessor = ImagePreprocessor(settings, profiles_path=profiles_path)

        passport_profile = preprocessor.get_profile(DocumentType.PASSPORT)
        assert passport_profile.threshold == 100
        assert passport_profile.gamma == 1.2
        assert preprocessor.get_profile(DocumentType.SSN) == DEFAULT_PROFILES[DocumentType.SSN]
        assert DocumentType.W4 not in preprocessor.profiles

    def test_missing_override_file_keeps_defaults(self, settings, tmp_path):
        preprocessor = ImagePreprocessor(settings, profiles_path=tmp_path / "missing.yaml")

        assert preprocessor.get_profile(DocumentType.STATE_ID).threshold == 120


@pytest.mark.unit
class TestPreprocess:
    """Test the transform chain on real images."""

    def test_produces_binarized_png(self, settings, make_image, temp_directory):
        source = make_image("license.jpg", image_format="JPEG")
        preprocessor = ImagePreprocessor(settings)

        with preprocessor.preprocess(source, DocumentType.DRIVERS_LICENSE) as preprocessed:
            assert preprocessed.path.exists()
            assert preprocessed.path.parent == temp_directory
            assert preprocessed.path.name.startswith("preprocessed_")
            assert preprocessed.applied_steps[:2] == ["grayscale", "contrast_normalize"]
            assert "threshold_120" in preprocessed.applied_steps
            assert preprocessed.quality_metrics.resolution == (640, 400)

            with Image.open(preprocessed.path) as image:
                assert image.format == "PNG"
                assert image.mode == "L"
                assert set(np.unique(np.array(image))) <= {0, 255}

        assert not preprocessed.path.exists()

    def test_enhanced_scratch_file(self, settings, make_image):
        preprocessor = ImagePreprocessor(settings)

        with preprocessor.preprocess(make_image(), DocumentType.SSN, enhanced=True) as preprocessed:
            assert preprocessed.path.name.startswith("enhanced_")

    def test_gamma_applied_for_passport(self, settings, make_image):
        preprocessor = ImagePreprocessor(settings)

        with preprocessor.preprocess(make_image(), DocumentType.PASSPORT) as preprocessed:
            assert "gamma_1.2" in preprocessed.applied_steps

    def test_longest_side_is_bounded(self, temp_directory, make_image):
        settings = Settings(_env_file=None, temp_directory=str(temp_directory), max_image_side=300)
        preprocessor = ImagePreprocessor(settings)

        with preprocessor.preprocess(make_image(size=(640, 400)), DocumentType.SSN) as preprocessed:
            with Image.open(preprocessed.path) as image:
                assert max(image.size) == 300

    def test_small_images_are_not_upscaled(self, settings, make_image):
        preprocessor = ImagePreprocessor(settings)

        with preprocessor.preprocess(make_image(size=(320, 200)), DocumentType.SSN) as preprocessed:
            with Image.open(preprocessed.path) as image:
                assert image.size == (320, 200)

    def test_scratch_file_removed_on_error(self, settings, make_image, temp_directory):
        preprocessor = ImagePreprocessor(settings)

        with pytest.raises(RuntimeError):
            with preprocessor.preprocess(make_image(), DocumentType.SSN):
                raise RuntimeError("OCR failed")

        assert list(temp_directory.iterdir()) == []

    def test_undecodable_source(self, settings, tmp_path, temp_directory):
        source = tmp_path / "broken.jpg"
        source.write_bytes(b"\xff\xd8 truncated")
        preprocessor = ImagePreprocessor(settings)

        with pytest.raises(ImagePreprocessingError):
            preprocessor.preprocess(source, DocumentType.DRIVERS_LICENSE)

        assert list(temp_directory.iterdir()) == []
