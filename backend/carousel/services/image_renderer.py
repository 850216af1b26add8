"""
Slide Compositor for carousel images.

Draws one slide onto a Pillow canvas in a fixed order:
- Background for the template (flat, gradient, image, card, ruled)
- Either the bonus call-to-action layout or the fitted rich-text block
- Nickname / avatar branding and the slide counter (content slides only)
- PNG encoding

Asset decoding and font loading happen before the draw pass; drawing
itself is synchronous.
"""

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, ImageDraw

from carousel.config import get_settings
from carousel.design_templates import FormatSpec, TemplateConfig, get_format, get_template
from carousel.models import FontSpec, LayoutLine, LayoutResult, RenderConfiguration, RenderResult, Slide, ValidationResult
from carousel.services.assets import ImageLoader, ResolvedAssets, resolve_assets
from carousel.services.backgrounds import BackgroundGenerator
from carousel.services.drawing import draw_stadium, faded_layer, parse_color, paste_avatar, stadium_box
from carousel.services.fonts import FontRegistry
from carousel.services.text_layout import LayoutHints, fit_text, font_for, resolve_alignment, wrap_plain

logger = logging.getLogger(__name__)

settings = get_settings()

FIT_ERROR = "Text does not fit on the slide even at the minimum font size"
SURFACE_ERROR = "Drawing surface could not be created"

# Text block geometry
MAX_HEIGHT_PADDINGS = 3.5  # Text box height = canvas height - 3.5 paddings
COVER_VERTICAL_BIAS = 0.48
VERTICAL_BIAS = 0.5

# Branding overlay
BRANDING_OPACITY = 0.8
COUNTER_OPACITY = 0.6
BRANDING_FONT_RATIO = 0.028
BRANDING_AVATAR_RATIO = 0.06
BRANDING_GAP = 20

# Bonus slide, all ratios of the canvas width unless noted
FINAL_TEXT_RATIO = 0.045
FINAL_LINE_STEP = 0.06
FINAL_CODE_RATIO = 0.07
FINAL_OVAL_PADDING_H = 70
FINAL_OVAL_PADDING_V = 35
FINAL_OVAL_MIN_WIDTH = 200
FINAL_OVAL_LINE_WIDTH = 5
FINAL_TEXT_BAND = (0.15, 0.45)  # Fractions of the canvas height
FINAL_BRAND_BAND = (0.65, 0.25)
FINAL_AVATAR_RATIO = 0.16
FINAL_NICK_RATIO = 0.05
FINAL_TOPIC_RATIO = 0.035
FINAL_TOPIC_STEP = 0.045
FINAL_TOPIC_OPACITY = 0.6


class SlideCompositor:
    """Renders single slides to PNG bytes."""

    def __init__(self, fonts: Optional[FontRegistry] = None, loader: Optional[ImageLoader] = None):
        self.fonts = fonts or FontRegistry()
        self.loader = loader or ImageLoader()

    async def render(
        self,
        slide: Slide,
        index: int,
        total: int,
        config: RenderConfiguration,
        assets: Optional[ResolvedAssets] = None,
    ) -> RenderResult:
        """Render one slide; assets are decoded here unless the caller already did."""
        await self.fonts.wait_until_ready([config.font_pair.header_font, config.font_pair.body_font])
        if assets is None:
            assets = await resolve_assets(config, self.loader)
        return self.draw(slide, index, total, config, assets)

    def draw(
        self,
        slide: Slide,
        index: int,
        total: int,
        config: RenderConfiguration,
        assets: ResolvedAssets,
    ) -> RenderResult:
        """Synchronous draw pass over already decoded assets."""
        spec = get_format(config.format)
        template = get_template(config.template_id)
        bg_color, text_color = self._template_colors(template, config)

        try:
            canvas = BackgroundGenerator.create_background(spec, template, bg_color, assets.background)
        except (ValueError, MemoryError) as e:
            logger.error(f"Slide {slide.id}: {SURFACE_ERROR.lower()}: {e}")
            return RenderResult(image=None, validation=ValidationResult(slide.id, False, error=SURFACE_ERROR))

        layout = None
        if slide.is_special_final:
            self._draw_final_slide(canvas, spec, config, text_color, bg_color, assets.avatar)
            validation = ValidationResult(slide.id, True)
        else:
            layout = self._draw_content(canvas, slide, index, total, spec, template, config, text_color)
            self._draw_branding(canvas, spec, config, text_color, assets.avatar)
            if config.show_slide_count:
                self._draw_slide_count(canvas, spec, config, text_color, index, total)
            validation = ValidationResult(
                slide_id=slide.id,
                is_valid=layout.is_valid,
                error=None if layout.is_valid else FIT_ERROR,
                font_size_used=layout.font_size_used,
            )
            if not layout.is_valid:
                logger.info(f"Slide {slide.id} overflows, rendered at {layout.font_size_used}px")

        return RenderResult(image=self._encode(canvas), validation=validation, layout=layout)

    @staticmethod
    def _template_colors(template: TemplateConfig, config: RenderConfiguration) -> tuple:
        if template.id == "custom-color":
            return (
                parse_color(config.custom_bg_color, template.bg_color),
                parse_color(config.custom_text_color, template.text_color),
            )
        return template.bg_color, template.text_color

    @staticmethod
    def _encode(canvas: Image.Image) -> bytes:
        buffer = BytesIO()
        canvas.convert("RGB").save(buffer, "PNG")
        return buffer.getvalue()

    # ============================================
    # CONTENT SLIDES
    # ============================================

    def _draw_content(
        self,
        canvas: Image.Image,
        slide: Slide,
        index: int,
        total: int,
        spec: FormatSpec,
        template: TemplateConfig,
        config: RenderConfiguration,
        text_color: tuple,
    ) -> LayoutResult:
        is_cover = index == 0
        content_count = total - 1 if config.final_slide.enabled else total
        is_last = index == content_count - 1
        override = config.override_for(slide)

        padding = spec.padding + template.extra_padding
        max_width = spec.width - padding * 2
        max_height = spec.height - padding * MAX_HEIGHT_PADDINGS

        hints = LayoutHints.for_slide(is_cover, is_last, config.carousel_type, config.font_pair, settings.header_max_chars)
        layout = fit_text(
            slide.text.split("\n"),
            start_font_size=settings.base_font_size * override.font_size_scale,
            min_font_size=spec.min_font_size,
            max_width=max_width,
            max_height=max_height,
            line_height_scale=override.line_height_scale,
            is_cover=is_cover,
            hints=hints,
            measure=self.fonts.measure,
            step=settings.shrink_step_px,
        )

        align = resolve_alignment(override.text_align or config.text_align, config.carousel_type, is_cover)
        bias = COVER_VERTICAL_BIAS if is_cover else VERTICAL_BIAS
        start_y = (spec.height - layout.total_height) * bias

        draw = ImageDraw.Draw(canvas)
        for line in layout.lines:
            center_y = start_y + line.top + line.line_height / 2
            self._paint_line(draw, line, center_y, align, padding, max_width, spec.width, hints, text_color)
        return layout

    def _paint_line(
        self,
        draw: ImageDraw.ImageDraw,
        line: LayoutLine,
        center_y: float,
        align: str,
        padding: float,
        max_width: float,
        canvas_width: int,
        hints: LayoutHints,
        text_color: tuple,
    ):
        """Paint word pieces left to right, each with its own weight and color."""
        x = padding
        if align == "center":
            x = (canvas_width - line.width) / 2

        gap_extra = 0.0
        if align == "justify" and not line.ends_paragraph:
            gaps = sum(1 for seg in line.segments[:-1] if seg.text.endswith(" "))
            if gaps:
                last = line.segments[-1]
                last_spec = font_for(line.is_header, last.is_bold, line.font_size, hints)
                trailing = self.fonts.measure(last.text, last_spec) - self.fonts.measure(last.text.rstrip(), last_spec)
                gap_extra = max(0.0, max_width - (line.width - trailing)) / gaps

        for i, seg in enumerate(line.segments):
            font_spec = font_for(line.is_header, seg.is_bold, line.font_size, hints)
            fill = parse_color(seg.color, text_color) if seg.color else text_color
            draw.text((x, center_y), seg.text, font=self.fonts.get_font(font_spec), fill=fill, anchor="lm")
            x += self.fonts.measure(seg.text, font_spec)
            if gap_extra and i < len(line.segments) - 1 and seg.text.endswith(" "):
                x += gap_extra

    # ============================================
    # BRANDING OVERLAY
    # ============================================

    def _draw_branding(
        self,
        canvas: Image.Image,
        spec: FormatSpec,
        config: RenderConfiguration,
        text_color: tuple,
        avatar: Optional[Image.Image],
    ):
        """Nickname and/or avatar at one of six anchors."""
        nick = config.display_nickname()
        if not nick and avatar is None:
            return

        vertical, horizontal = config.nickname_position.split("-")
        y = spec.padding / 1.1 if vertical == "top" else spec.height - spec.padding / 1.1
        avatar_size = spec.width * BRANDING_AVATAR_RATIO
        avatar_width = avatar_size + BRANDING_GAP if avatar is not None else 0

        font_spec = FontSpec(config.font_pair.body_font, "bold", spec.width * BRANDING_FONT_RATIO)
        font = self.fonts.get_font(font_spec)
        text_width = self.fonts.measure(nick, font_spec) if nick else 0

        with faded_layer(canvas, BRANDING_OPACITY) as layer:
            draw = ImageDraw.Draw(layer)
            if horizontal == "center":
                start_x = (spec.width - (text_width + avatar_width)) / 2
                if avatar is not None:
                    paste_avatar(layer, avatar, start_x, y - avatar_size / 2, avatar_size)
                if nick:
                    draw.text((start_x + avatar_width + text_width / 2, y), nick, font=font, fill=text_color, anchor="mm")
            elif horizontal == "left":
                if avatar is not None:
                    paste_avatar(layer, avatar, spec.padding, y - avatar_size / 2, avatar_size)
                if nick:
                    draw.text((spec.padding + avatar_width, y), nick, font=font, fill=text_color, anchor="lm")
            else:
                if nick:
                    draw.text((spec.width - spec.padding, y), nick, font=font, fill=text_color, anchor="rm")
                if avatar is not None:
                    avatar_x = spec.width - spec.padding - text_width - avatar_size - BRANDING_GAP
                    paste_avatar(layer, avatar, avatar_x, y - avatar_size / 2, avatar_size)

    def _draw_slide_count(
        self,
        canvas: Image.Image,
        spec: FormatSpec,
        config: RenderConfiguration,
        text_color: tuple,
        index: int,
        total: int,
    ):
        """'N/total' counter, right aligned."""
        y = spec.padding / 1.1 if config.slide_count_position == "top-right" else spec.height - spec.padding / 1.1
        font = self.fonts.get_font(FontSpec(config.font_pair.body_font, "bold", spec.width * BRANDING_FONT_RATIO))
        with faded_layer(canvas, COUNTER_OPACITY) as layer:
            ImageDraw.Draw(layer).text(
                (spec.width - spec.padding, y), f"{index + 1}/{total}", font=font, fill=text_color, anchor="rm"
            )

    # ============================================
    # BONUS FINAL SLIDE
    # ============================================

    def _draw_final_slide(
        self,
        canvas: Image.Image,
        spec: FormatSpec,
        config: RenderConfiguration,
        text_color: tuple,
        bg_color: tuple,
        avatar: Optional[Image.Image],
    ):
        """Before-text, code word in a stadium, after-text, then avatar + nickname + topic."""
        final = config.final_slide
        width, height = spec.width, spec.height
        header_font = config.font_pair.header_font
        body_font = config.font_pair.body_font
        safe_width = width - spec.padding * 2
        measure = self.fonts.measure

        draw = ImageDraw.Draw(canvas)
        body_spec = FontSpec(body_font, "regular", width * FINAL_TEXT_RATIO)
        body = self.fonts.get_font(body_spec)

        band_start, band_size = FINAL_TEXT_BAND
        current_y = height * band_start + height * band_size * (final.vertical_offset / 100)
        for line in wrap_plain(final.text_before, body_spec, safe_width, measure):
            draw.text((width / 2, current_y), line, font=body, fill=text_color, anchor="ms")
            current_y += width * FINAL_LINE_STEP

        # Code word inside the stadium
        current_y += width * 0.05
        code_spec = FontSpec(header_font, "black", width * FINAL_CODE_RATIO)
        word_width = measure(final.code_word, code_spec)
        oval_height = width * 0.08 + FINAL_OVAL_PADDING_V * 2
        oval_width = max(word_width + FINAL_OVAL_PADDING_H * 2, FINAL_OVAL_MIN_WIDTH)
        box = stadium_box(width / 2, current_y, oval_width, oval_height)

        if final.design_variant == 2:
            draw_stadium(draw, box, text_color, filled=True)
            word_color = bg_color
        else:
            draw_stadium(draw, box, text_color, line_width=FINAL_OVAL_LINE_WIDTH)
            word_color = text_color
        draw.text((width / 2, current_y), final.code_word, font=self.fonts.get_font(code_spec), fill=word_color, anchor="mm")

        current_y += oval_height / 2 + width * 0.08
        for line in wrap_plain(final.text_after, body_spec, safe_width, measure):
            draw.text((width / 2, current_y), line, font=body, fill=text_color, anchor="ms")
            current_y += width * FINAL_LINE_STEP

        # Branding row
        band_start, band_size = FINAL_BRAND_BAND
        brand_y = height * band_start + height * band_size * (final.branding_offset / 100)
        avatar_size = width * FINAL_AVATAR_RATIO
        brand_x = spec.padding
        if avatar is not None:
            paste_avatar(canvas, avatar, brand_x, brand_y, avatar_size)

        text_x = brand_x + (avatar_size + 40 if avatar is not None else 0)
        text_safe_width = width - text_x - spec.padding
        nick_y = brand_y + avatar_size / 2 - 5

        draw = ImageDraw.Draw(canvas)
        nick_font = self.fonts.get_font(FontSpec(header_font, "black", width * FINAL_NICK_RATIO))
        draw.text((text_x, nick_y), config.nickname or "username", font=nick_font, fill=text_color, anchor="ls")

        topic_spec = FontSpec(body_font, "regular", width * FINAL_TOPIC_RATIO)
        topic_font = self.fonts.get_font(topic_spec)
        topic_y = nick_y + 45
        with faded_layer(canvas, FINAL_TOPIC_OPACITY) as layer:
            layer_draw = ImageDraw.Draw(layer)
            for line in wrap_plain(final.topic_sentence(), topic_spec, text_safe_width, measure):
                layer_draw.text((text_x, topic_y), line, font=topic_font, fill=text_color, anchor="ls")
                topic_y += width * FINAL_TOPIC_STEP


def get_compositor(fonts: Optional[FontRegistry] = None, loader: Optional[ImageLoader] = None) -> SlideCompositor:
    """Get compositor instance with the given font registry and image loader."""
    return SlideCompositor(fonts, loader)
