import base64
from io import BytesIO

import pytest
from PIL import Image

from carousel.models import FontSpec
from carousel.services.fonts import FontRegistry
from carousel.services.image_renderer import SlideCompositor


def fake_measure(text: str, spec: FontSpec) -> float:
    """Monospace stand-in: every character is half the font size wide."""
    return len(text) * spec.size * 0.5


def png_bytes(color=(255, 0, 0), size=(40, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return buffer.getvalue()


def png_data_uri(color=(255, 0, 0), size=(40, 30)) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(color, size)).decode()


@pytest.fixture
def measure():
    return fake_measure


@pytest.fixture
def fonts(tmp_path):
    # Empty font directory: system or built-in fallback fonts only
    return FontRegistry(tmp_path / "fonts")


@pytest.fixture
def compositor(fonts):
    return SlideCompositor(fonts=fonts)


@pytest.fixture
def red_png_uri():
    return png_data_uri((255, 0, 0))
