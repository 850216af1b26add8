"""
Static design catalogue for carousel rendering.

Three lookup tables:
1. FORMATS - output pixel size, minimum font size and padding
2. TEMPLATES - background variant and colors (flat, gradient, image, card, ruled)
3. FONT PAIRS - header family + body family
"""

from dataclasses import dataclass
from typing import Literal, Optional

from carousel.exceptions import UnknownFontPairError, UnknownFormatError, UnknownTemplateError
from carousel.models import FontPair


TemplateKind = Literal["flat", "gradient", "image", "card", "ruled"]


@dataclass(frozen=True)
class FormatSpec:
    width: int
    height: int
    min_font_size: float
    padding: int


@dataclass(frozen=True)
class TemplateConfig:
    id: str
    name: str
    kind: TemplateKind
    bg_color: tuple
    text_color: tuple
    secondary_color: Optional[tuple] = None  # Gradient end, card fill or rule color
    extra_padding: int = 0  # Added to the format padding for text placement


# ============================================
# FORMATS
# ============================================
FORMAT_SPECS = {
    "1080x1080": FormatSpec(width=1080, height=1080, min_font_size=30, padding=80),
    "1080x1350": FormatSpec(width=1080, height=1350, min_font_size=36, padding=100),
}


# ============================================
# TEMPLATES
# ============================================
TEMPLATES = {
    "black": TemplateConfig("black", "Черный", "flat", (18, 18, 18), (255, 255, 255)),
    "white": TemplateConfig("white", "Белый", "flat", (255, 255, 255), (26, 26, 26)),
    "red": TemplateConfig("red", "Темно-красный", "flat", (102, 8, 16), (241, 235, 235)),
    "green": TemplateConfig("green", "Темно-зеленый", "flat", (70, 89, 64), (253, 251, 240)),
    "navy": TemplateConfig("navy", "Глубокий синий", "flat", (16, 46, 74), (255, 247, 230)),
    "blue": TemplateConfig("blue", "Королевский", "flat", (0, 17, 102), (240, 240, 231)),
    "sunset": TemplateConfig(
        "sunset", "Закат", "gradient", (38, 20, 71), (255, 255, 255),
        secondary_color=(190, 60, 90),
    ),
    "card": TemplateConfig(
        "card", "Карточка", "card", (229, 229, 229), (26, 26, 26),
        secondary_color=(255, 255, 255), extra_padding=40,
    ),
    "notebook": TemplateConfig(
        "notebook", "Тетрадь", "ruled", (250, 248, 240), (30, 30, 30),
        secondary_color=(180, 200, 220),
    ),
    "custom-color": TemplateConfig("custom-color", "Свой цвет", "flat", (115, 115, 115), (255, 255, 255)),
    "custom-image": TemplateConfig("custom-image", "Свое фото", "image", (0, 0, 0), (255, 255, 255)),
}


# ============================================
# FONT PAIRS
# ============================================
FONT_PAIRS = {
    "gilroy": FontPair(id="gilroy", name="Gilroy ExtraBold + Manrope", header_font="Montserrat", body_font="Manrope"),
    "mont-alt": FontPair(id="mont-alt", name="Montserrat Alternates + Manrope", header_font="Montserrat Alternates", body_font="Manrope"),
    "dmsans": FontPair(id="dmsans", name="DM Sans Bold + Manrope", header_font="DM Sans", body_font="Manrope"),
    "humanist": FontPair(id="humanist", name="Bold Humanist Sans", header_font="Golos Text", body_font="Manrope"),
    "experimental": FontPair(id="experimental", name="Experimental + Neutral", header_font="Unbounded", body_font="Inter"),
}

SELECTABLE_FONTS = [
    "Inter", "Manrope", "Montserrat", "Montserrat Alternates",
    "Unbounded", "Golos Text", "DM Sans", "Plus Jakarta Sans",
    "Oswald", "Ubuntu", "Playfair Display", "Rubik", "Sora",
    "Raleway", "Work Sans", "Cabin", "Archivo",
]


def get_format(format_id: str) -> FormatSpec:
    """Get output format by ID."""
    try:
        return FORMAT_SPECS[format_id]
    except KeyError:
        raise UnknownFormatError(format_id, list(FORMAT_SPECS)) from None


def get_template(template_id: str) -> TemplateConfig:
    """Get a template by ID."""
    try:
        return TEMPLATES[template_id]
    except KeyError:
        raise UnknownTemplateError(template_id, list(TEMPLATES)) from None


def get_font_pair(pair_id: str) -> FontPair:
    """Get a font pair by ID."""
    try:
        return FONT_PAIRS[pair_id]
    except KeyError:
        raise UnknownFontPairError(pair_id, list(FONT_PAIRS)) from None


def custom_font_pair(header_font: str, body_font: str) -> FontPair:
    """Font pair built from two freely selected families."""
    return FontPair(id="custom", name="Свой шрифт", header_font=header_font, body_font=body_font)


def list_templates():
    """List all templates."""
    return [{"id": t.id, "name": t.name, "kind": t.kind} for t in TEMPLATES.values()]


def list_font_pairs():
    """List all font pairs."""
    return [{"id": p.id, "name": p.name, "header_font": p.header_font, "body_font": p.body_font} for p in FONT_PAIRS.values()]
