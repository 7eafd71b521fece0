"""
Unit tests for image quality assessment.
"""

import pytest
from PIL import Image

from document_ocr.ocr import quality
from document_ocr.ocr.quality import (
    RECOMMEND_COMPRESSION_TOO_HIGH,
    RECOMMEND_FORMAT,
    RECOMMEND_HIGHER_RESOLUTION,
    RECOMMEND_LESS_COMPRESSION,
    RECOMMEND_RESOLUTION_TOO_LOW,
    RECOMMEND_RETAKE,
    assess_image,
    assess_image_quality,
)
from document_ocr.ocr.types import ImagePreprocessingError


@pytest.mark.unit
class TestAssessImageQuality:
    """Test the metadata scoring."""

    def test_large_png_is_high_quality(self):
        metrics = assess_image_quality(2000, 1500, 7_000_000, "PNG")

        assert metrics.estimated_quality == "high"
        assert metrics.recommendations == []
        assert metrics.resolution == (2000, 1500)

    def test_small_compressed_jpeg_is_low_quality(self):
        metrics = assess_image_quality(800, 600, 50_000, "JPEG", density=72)

        assert metrics.estimated_quality == "low"
        assert metrics.recommendations == [
            RECOMMEND_RESOLUTION_TOO_LOW,
            RECOMMEND_COMPRESSION_TOO_HIGH,
            RECOMMEND_FORMAT,
            RECOMMEND_RETAKE,
        ]

    def test_dense_jpeg_is_medium_quality(self):
        metrics = assess_image_quality(1200, 800, 1_500_000, "JPEG", density=300)

        assert metrics.estimated_quality == "medium"
        assert metrics.recommendations == [
            RECOMMEND_HIGHER_RESOLUTION,
            RECOMMEND_LESS_COMPRESSION,
        ]

    def test_jpeg_without_density_gets_format_advice(self):
        metrics = assess_image_quality(2000, 1500, 7_000_000, "JPEG")

        assert metrics.estimated_quality == "high"
        assert metrics.recommendations == [RECOMMEND_FORMAT]

    def test_zero_pixels(self):
        metrics = assess_image_quality(0, 0, 1000, "PNG")

        assert metrics.estimated_quality == "low"
        assert RECOMMEND_COMPRESSION_TOO_HIGH in metrics.recommendations

    def test_to_dict(self):
        metrics = assess_image_quality(2000, 1500, 7_000_000, "PNG")

        assert metrics.to_dict() == {
            "resolution": {"width": 2000, "height": 1500},
            "file_size": 7_000_000,
            "estimated_quality": "high",
            "recommendations": [],
        }


@pytest.mark.unit
class TestAssessImage:
    """Test assessment of files on disk."""

    def test_png_file(self, make_image):
        path = make_image("card.png", size=(640, 400))

        metrics = assess_image(path)

        assert metrics.resolution == (640, 400)
        assert metrics.file_size == path.stat().st_size
        assert metrics.estimated_quality in ("low", "medium")

    def test_jpeg_density_is_read(self, make_image):
        path = make_image("card.jpg", image_format="JPEG", dpi=(300, 300))

        with Image.open(path) as image:
            assert quality._image_density(image) == 300

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")

        with pytest.raises(ImagePreprocessingError):
            assess_image(path)
