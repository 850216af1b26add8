import asyncio
import logging
import shutil
from pathlib import Path

import pytest

from carousel.models import FontSpec
from carousel.services.fonts import SYSTEM_FONTS_BOLD, SYSTEM_FONTS_REGULAR, FontRegistry

DEJAVU = Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf")


@pytest.fixture
def family_dir(tmp_path):
    if not DEJAVU.exists():
        pytest.skip("DejaVu Sans is not installed")
    root = tmp_path / "fonts"
    (root / "TestSans").mkdir(parents=True)
    shutil.copy(DEJAVU, root / "TestSans" / "TestSans-Bold.ttf")
    shutil.copy(DEJAVU, root / "TestSans-Regular.ttf")
    return root


def test_weight_falls_back_to_sibling(family_dir):
    fonts = FontRegistry(family_dir)
    assert fonts.resolve_file("Test Sans", "black") == str(family_dir / "TestSans" / "TestSans-Bold.ttf")
    assert fonts.resolve_file("Test Sans", "regular") == str(family_dir / "TestSans-Regular.ttf")


def test_unknown_family_uses_system_font(tmp_path):
    fonts = FontRegistry(tmp_path)
    regular = next((p for p in SYSTEM_FONTS_REGULAR if Path(p).exists()), None)
    bold = next((p for p in SYSTEM_FONTS_BOLD if Path(p).exists()), None)
    assert fonts.resolve_file("Nope", "regular") == regular
    assert fonts.resolve_file("Nope", "black") == bold


def test_measure_grows_with_text_and_size(fonts):
    small = FontSpec("Nope", "regular", 20)
    large = FontSpec("Nope", "regular", 40)
    assert fonts.measure("", small) == 0
    assert fonts.measure("abc", small) < fonts.measure("abcdef", small)
    assert fonts.measure("abc", small) < fonts.measure("abc", large)


def test_fonts_are_cached(fonts):
    spec = FontSpec("Nope", "bold", 30)
    assert fonts.get_font(spec) is fonts.get_font(spec)


def test_wait_until_ready(fonts, caplog):
    assert not fonts.is_ready("Manrope")
    with caplog.at_level(logging.WARNING, logger="carousel.services.fonts"):
        asyncio.run(fonts.wait_until_ready(["Manrope", "Manrope", "Montserrat"]))
    assert fonts.is_ready("Manrope") and fonts.is_ready("Montserrat")
    assert sum("Manrope" in r.message for r in caplog.records) == 1

    caplog.clear()
    asyncio.run(fonts.wait_until_ready(["Manrope"]))
    assert not caplog.records
