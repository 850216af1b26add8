"""Background painting for each template kind (flat, gradient, image, card, ruled)."""

import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFilter

from carousel.design_templates import FormatSpec, TemplateConfig
from carousel.services.drawing import fit_image_cover, with_alpha

logger = logging.getLogger(__name__)

IMAGE_OVERLAY = (0, 0, 0, 115)  # rgba(0, 0, 0, 0.45)
CARD_RADIUS = 40
CARD_SHADOW_OFFSET = 12
CARD_SHADOW_BLUR = 18
RULE_SPACING = 54
RULE_ALPHA = 110


class BackgroundGenerator:
    """Generates slide backgrounds from a template."""

    @staticmethod
    def create_base(width: int, height: int, color: tuple) -> Image.Image:
        """Create base image with a flat color."""
        return Image.new("RGBA", (width, height), with_alpha(color, 255))

    @staticmethod
    def add_gradient(img: Image.Image, top: tuple, bottom: tuple):
        """Vertical linear gradient, one line per row."""
        width, height = img.size
        draw = ImageDraw.Draw(img)
        for y in range(height):
            ratio = y / max(1, height - 1)
            r = int(top[0] + (bottom[0] - top[0]) * ratio)
            g = int(top[1] + (bottom[1] - top[1]) * ratio)
            b = int(top[2] + (bottom[2] - top[2]) * ratio)
            draw.line([(0, y), (width, y)], fill=(r, g, b, 255))

    @staticmethod
    def add_image_cover(img: Image.Image, source: Image.Image):
        """Cover the canvas with source and darken it for legibility."""
        width, height = img.size
        covered = fit_image_cover(source.convert("RGBA"), width, height)
        img.alpha_composite(covered)
        img.alpha_composite(Image.new("RGBA", (width, height), IMAGE_OVERLAY))

    @staticmethod
    def add_card(img: Image.Image, inset: int, fill: tuple):
        """Rounded card with a soft drop shadow, inset from every edge."""
        width, height = img.size
        box = [inset, inset, width - inset, height - inset]

        shadow = Image.new("RGBA", img.size, (0, 0, 0, 0))
        shadow_box = [c + CARD_SHADOW_OFFSET if i % 2 else c for i, c in enumerate(box)]
        ImageDraw.Draw(shadow).rounded_rectangle(shadow_box, radius=CARD_RADIUS, fill=(0, 0, 0, 70))
        shadow = shadow.filter(ImageFilter.GaussianBlur(CARD_SHADOW_BLUR))
        img.alpha_composite(shadow)

        ImageDraw.Draw(img).rounded_rectangle(box, radius=CARD_RADIUS, fill=with_alpha(fill, 255))

    @staticmethod
    def add_rules(img: Image.Image, color: tuple, margin: int):
        """Faint horizontal lines like ruled notebook paper."""
        width, height = img.size
        layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for y in range(margin, height - margin // 2, RULE_SPACING):
            draw.line([(0, y), (width, y)], fill=with_alpha(color, RULE_ALPHA), width=2)
        img.alpha_composite(layer)

    @classmethod
    def create_background(
        cls,
        spec: FormatSpec,
        template: TemplateConfig,
        bg_color: tuple,
        background_image: Optional[Image.Image] = None,
    ) -> Image.Image:
        """Create the complete background for one slide."""
        img = cls.create_base(spec.width, spec.height, bg_color)

        if template.kind == "gradient":
            cls.add_gradient(img, bg_color, template.secondary_color or bg_color)
        elif template.kind == "image":
            if background_image is not None:
                cls.add_image_cover(img, background_image)
            else:
                logger.debug("No background image decoded, using flat template color")
        elif template.kind == "card":
            cls.add_card(img, spec.padding // 2, template.secondary_color or (255, 255, 255))
        elif template.kind == "ruled":
            cls.add_rules(img, template.secondary_color or (200, 200, 200), spec.padding)

        return img
