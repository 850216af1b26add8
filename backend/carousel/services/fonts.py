"""
Font loading and text measurement.

Fonts live under ``settings.font_path`` as ``<Family>/<Family>-<Weight>.ttf``
(spaces removed from the family name), the same layout the Montserrat assets
use. Missing weights fall back to heavier/lighter siblings, then to system
fonts, then to Pillow's built-in scalable font.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from PIL import ImageFont

from carousel.config import get_settings
from carousel.models import FontSpec

logger = logging.getLogger(__name__)

settings = get_settings()

WEIGHT_FILES = {
    "regular": "Regular",
    "medium": "Medium",
    "semibold": "SemiBold",
    "bold": "Bold",
    "extrabold": "ExtraBold",
    "black": "Black",
}

# Tried in order when a weight file is missing
WEIGHT_FALLBACKS = {
    "regular": ["regular", "medium"],
    "medium": ["medium", "regular"],
    "semibold": ["semibold", "bold", "medium"],
    "bold": ["bold", "semibold", "extrabold"],
    "extrabold": ["extrabold", "black", "bold"],
    "black": ["black", "extrabold", "bold"],
}

BOLD_WEIGHTS = {"semibold", "bold", "extrabold", "black"}

SYSTEM_FONTS_REGULAR = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "C:\\Windows\\Fonts\\arial.ttf",
]
SYSTEM_FONTS_BOLD = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "C:\\Windows\\Fonts\\arialbd.ttf",
]


class FontRegistry:
    """Resolves (family, weight, size) to Pillow fonts and measures text."""

    def __init__(self, font_path: Optional[str | Path] = None):
        self.font_path = Path(font_path if font_path is not None else settings.font_path)
        self._files: Dict[Tuple[str, str], Optional[str]] = {}
        self._fonts: Dict[Tuple[str, str, float], ImageFont.FreeTypeFont] = {}
        self._ready: set = set()

    def _family_file(self, family: str, weight: str) -> Optional[Path]:
        stem = family.replace(" ", "")
        suffix = WEIGHT_FILES.get(weight, "Regular")
        for path in (
            self.font_path / stem / f"{stem}-{suffix}.ttf",
            self.font_path / f"{stem}-{suffix}.ttf",
        ):
            if path.exists():
                return path
        return None

    def resolve_file(self, family: str, weight: str) -> Optional[str]:
        """Path of the TTF used for a family/weight, or None for Pillow's default font."""
        key = (family, weight)
        if key in self._files:
            return self._files[key]

        resolved = None
        for candidate in WEIGHT_FALLBACKS.get(weight, [weight, "regular"]):
            path = self._family_file(family, candidate)
            if path is not None:
                resolved = str(path)
                break

        if resolved is None:
            system_fonts = SYSTEM_FONTS_BOLD if weight in BOLD_WEIGHTS else SYSTEM_FONTS_REGULAR
            resolved = next((p for p in system_fonts if Path(p).exists()), None)

        self._files[key] = resolved
        return resolved

    def get_font(self, spec: FontSpec) -> ImageFont.FreeTypeFont:
        """Get font with specified family, weight and size."""
        key = (spec.family, spec.weight, spec.size)
        font = self._fonts.get(key)
        if font is None:
            path = self.resolve_file(spec.family, spec.weight)
            if path:
                font = ImageFont.truetype(path, spec.size)
            else:
                font = ImageFont.load_default(spec.size)
            self._fonts[key] = font
        return font

    def measure(self, text: str, spec: FontSpec) -> float:
        """Advance width of text in pixels, trailing spaces included."""
        return self.get_font(spec).getlength(text)

    def _preload(self, families: Iterable[str]):
        for family in families:
            missing = [
                weight for weight in ("regular", "bold", "black")
                if self._family_file(family, weight) is None
            ]
            for weight in ("regular", "bold", "black"):
                self.resolve_file(family, weight)
            if missing:
                logger.warning(f"Font '{family}' has no {', '.join(missing)} file under {self.font_path}, using fallback")
            self._ready.add(family)

    async def wait_until_ready(self, families: Iterable[str]):
        """Resolve font files for every family before any text is measured."""
        pending = [f for f in dict.fromkeys(families) if f not in self._ready]
        if pending:
            await asyncio.to_thread(self._preload, pending)

    def is_ready(self, family: str) -> bool:
        return family in self._ready
