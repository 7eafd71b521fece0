import shutil
from pathlib import Path
from typing import Callable, Optional, Tuple
from unittest.mock import Mock

import pytest
from PIL import Image, ImageDraw

from document_ocr.core.config import Settings
from document_ocr.ocr.engine import Recognition, TesseractEngine


@pytest.fixture
def temp_directory(tmp_path) -> Path:
    """Scratch directory for preprocessed images."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return scratch


@pytest.fixture
def settings(temp_directory) -> Settings:
    """Settings isolated from the environment, writing scratch files under tmp."""
    return Settings(
        _env_file=None,
        temp_directory=str(temp_directory),
        batch_max_workers=2,
    )


@pytest.fixture
def make_image(tmp_path) -> Callable[..., Path]:
    """Factory writing a small document-like image to disk."""

    def _make_image(
        name: str = "document.png",
        size: Tuple[int, int] = (640, 400),
        image_format: Optional[str] = None,
        text: str = "NAME: JOHN DOE",
        **save_kwargs,
    ) -> Path:
        path = tmp_path / name
        image = Image.new("RGB", size, color=(235, 235, 235))
        draw = ImageDraw.Draw(image)
        draw.rectangle([20, 20, size[0] - 20, size[1] - 20], outline=(40, 40, 40), width=3)
        draw.text((40, 40), text, fill=(0, 0, 0))
        image.save(path, format=image_format, **save_kwargs)
        return path

    return _make_image


@pytest.fixture
def mock_engine() -> Mock:
    """Engine double returning fixed recognition output."""
    engine = Mock(spec=TesseractEngine)
    engine.recognize.return_value = Recognition(text="", confidence=0.0)
    return engine


@pytest.fixture
def sample_ssn_text() -> str:
    return "SOCIAL SECURITY\n123-45-6789\nNAME: JOHN DOE"


@pytest.fixture
def sample_license_text() -> str:
    return (
        "DRIVER LICENSE\n"
        "NAME: JOHN DOE\n"
        "LICENSE: D1234567\n"
        "DOB: 01/15/1985\n"
        "EXP: 01/15/2099\n"
        "ADDRESS: 123 MAIN STREET\n"
        "STATE: CA\n"
        "ZIP: 90210\n"
    )


@pytest.fixture
def sample_license_text_es() -> str:
    return (
        "LICENCIA DE CONDUCIR\n"
        "NOMBRE: MARIA GARCIA\n"
        "LICENCIA: B7654321\n"
        "FECHA DE NACIMIENTO: 3/7/90\n"
        "VENCE: 03/07/2099\n"
        "DIRECCION: CALLE MAYOR 5\n"
        "ESTADO: TX\n"
        "CODIGO POSTAL: 75001\n"
    )


def tesseract_available() -> bool:
    return shutil.which("tesseract") is not None


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
