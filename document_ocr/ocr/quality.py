"""
Image quality assessment ahead of OCR.

Scores resolution, compression density and file format, and produces
advisory recommendations for the person capturing the document.
"""

from pathlib import Path
from typing import Optional, Union

import structlog
from PIL import Image

from .types import ImagePreprocessingError, QualityMetrics

logger = structlog.get_logger(__name__)

RECOMMEND_HIGHER_RESOLUTION = "Higher resolution image would improve OCR accuracy"
RECOMMEND_RESOLUTION_TOO_LOW = "Image resolution is too low for optimal OCR results"
RECOMMEND_LESS_COMPRESSION = "Image appears to be heavily compressed"
RECOMMEND_COMPRESSION_TOO_HIGH = "Image compression is too high, affecting text clarity"
RECOMMEND_FORMAT = "PNG format or high-quality JPEG recommended for OCR"
RECOMMEND_RETAKE = "Consider retaking the photo with better lighting and focus"

HIGH_QUALITY_SCORE = 5
MEDIUM_QUALITY_SCORE = 3
MIN_JPEG_DENSITY = 150


def assess_image_quality(
    width: int,
    height: int,
    file_size: int,
    image_format: Optional[str],
    density: Optional[float] = None,
) -> QualityMetrics:
    """
    Estimate OCR suitability of an image from its metadata.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        file_size: Encoded size in bytes
        image_format: Codec name, e.g. "PNG" or "JPEG"
        density: Horizontal DPI if the file records one

    Returns:
        Quality metrics with ordered recommendations
    """
    recommendations = []
    score = 0

    # Resolution tier
    if width >= 1500 and height >= 1000:
        score += 3
    elif width >= 1000 and height >= 700:
        score += 2
        recommendations.append(RECOMMEND_HIGHER_RESOLUTION)
    else:
        score += 1
        recommendations.append(RECOMMEND_RESOLUTION_TOO_LOW)

    # Bytes per pixel as a proxy for compression quality
    pixel_count = width * height
    bytes_per_pixel = file_size / pixel_count if pixel_count > 0 else 0.0

    if bytes_per_pixel > 2:
        score += 2
    elif bytes_per_pixel > 1:
        score += 1
        recommendations.append(RECOMMEND_LESS_COMPRESSION)
    else:
        recommendations.append(RECOMMEND_COMPRESSION_TOO_HIGH)

    fmt = (image_format or "").lower()
    if fmt == "png":
        score += 1
    elif fmt in ("jpeg", "jpg") and density and density >= MIN_JPEG_DENSITY:
        score += 1
    else:
        recommendations.append(RECOMMEND_FORMAT)

    if score >= HIGH_QUALITY_SCORE:
        estimated_quality = "high"
    elif score >= MEDIUM_QUALITY_SCORE:
        estimated_quality = "medium"
    else:
        estimated_quality = "low"

    if estimated_quality == "low":
        recommendations.append(RECOMMEND_RETAKE)

    return QualityMetrics(
        resolution=(width, height),
        file_size=file_size,
        estimated_quality=estimated_quality,
        recommendations=recommendations,
    )


def _image_density(image: Image.Image) -> Optional[float]:
    dpi = image.info.get("dpi")
    if dpi:
        return float(dpi[0])
    # JFIF headers without a dpi entry
    jfif_density = image.info.get("jfif_density")
    if jfif_density and image.info.get("jfif_unit") == 1:
        return float(jfif_density[0])
    return None


def assess_image(image_path: Union[str, Path]) -> QualityMetrics:
    """
    Assess an image file on disk.

    Raises:
        ImagePreprocessingError: If the file cannot be decoded
    """
    path = Path(image_path)

    try:
        with Image.open(path) as image:
            width, height = image.size
            image_format = image.format
            density = _image_density(image)
    except (OSError, ValueError) as e:
        raise ImagePreprocessingError(f"Unable to read image {path.name}: {str(e)}")

    metrics = assess_image_quality(
        width, height, path.stat().st_size, image_format, density
    )

    logger.debug(
        "Image quality assessed",
        image=path.name,
        width=width,
        height=height,
        estimated_quality=metrics.estimated_quality,
    )
    return metrics
