"""Low-level Pillow helpers shared by the background painter and the compositor."""

import logging
import re
from contextlib import contextmanager
from typing import Optional

from PIL import Image, ImageChops, ImageColor, ImageDraw

logger = logging.getLogger(__name__)

BARE_HEX = re.compile(r"[0-9a-fA-F]{3,8}")


def parse_color(value, default: tuple = (255, 255, 255)) -> tuple:
    """Color tuple from '#rgb', '#rrggbb', 'rrggbb', '#rrggbbaa', CSS names, or a tuple."""
    if value is None:
        return default
    if isinstance(value, tuple):
        return value

    text = value.strip()
    if BARE_HEX.fullmatch(text):
        text = "#" + text
    try:
        return ImageColor.getrgb(text)
    except ValueError:
        logger.warning(f"Unrecognised color '{value}', using {default}")
        return default


def fit_image_cover(img: Image.Image, width: int, height: int) -> Image.Image:
    """Resize + crop image to fully cover a target rectangle, centered."""
    src_w, src_h = img.size
    if src_w <= 0 or src_h <= 0:
        return img.resize((width, height), Image.Resampling.LANCZOS)

    scale = max(width / src_w, height / src_h)
    new_w = max(width, round(src_w * scale))
    new_h = max(height, round(src_h * scale))
    resized = img.resize((new_w, new_h), Image.Resampling.LANCZOS)

    left = (new_w - width) // 2
    top = (new_h - height) // 2
    return resized.crop((left, top, left + width, top + height))


def paste_avatar(canvas: Image.Image, avatar: Image.Image, x: float, y: float, size: float):
    """Paste avatar as a circle whose bounding box starts at (x, y)."""
    size = round(size)
    if size <= 0:
        return
    fitted = fit_image_cover(avatar.convert("RGBA"), size, size)

    mask = Image.new("L", (size, size), 0)
    ImageDraw.Draw(mask).ellipse([(0, 0), (size - 1, size - 1)], fill=255)
    mask = ImageChops.multiply(mask, fitted.getchannel("A"))

    canvas.paste(fitted, (round(x), round(y)), mask)


@contextmanager
def faded_layer(canvas: Image.Image, opacity: float):
    """Draw onto a transparent layer that is composited onto canvas at reduced opacity."""
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    yield layer
    if opacity < 1.0:
        alpha = layer.getchannel("A").point(lambda a: round(a * opacity))
        layer.putalpha(alpha)
    canvas.alpha_composite(layer)


def with_alpha(color: tuple, alpha: int) -> tuple:
    return (*color[:3], alpha)


def stadium_box(center_x: float, center_y: float, width: float, height: float) -> tuple:
    return (
        center_x - width / 2,
        center_y - height / 2,
        center_x + width / 2,
        center_y + height / 2,
    )


def draw_stadium(
    draw: ImageDraw.ImageDraw,
    box: tuple,
    color: tuple,
    line_width: int = 5,
    radius: float = 100,
    filled: bool = False,
    fill: Optional[tuple] = None,
):
    """Rounded pill outline (or filled pill) inside box."""
    height = box[3] - box[1]
    radius = min(radius, height / 2)
    if filled:
        draw.rounded_rectangle(box, radius=radius, fill=fill or color)
    else:
        draw.rounded_rectangle(box, radius=radius, outline=color, width=line_width)
