from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Tesseract
    tesseract_cmd: Optional[str] = None
    ocr_timeout: int = 0  # seconds, 0 disables the timeout

    # Scratch files
    temp_directory: Optional[str] = None  # system temp dir when unset

    # Batch processing
    batch_max_workers: int = 4

    # Manual review routing
    manual_review_confidence_threshold: float = 70.0
    manual_review_field_threshold: float = 60.0

    # Preprocessing
    max_image_side: int = 2000
    enhanced_max_image_side: int = 2500
    enhanced_threshold: int = 128
    enhanced_sharpen_sigma: float = 2.0
    preprocessing_profiles_path: Optional[str] = None

    # Enhanced retry keeps the stored result when it scored higher
    keep_best_enhanced_result: bool = True

    class Config:
        env_file = ".env"
        env_prefix = "DOCUMENT_OCR_"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
