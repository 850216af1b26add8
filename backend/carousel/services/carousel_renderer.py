"""
Carousel Renderer - drives the compositor over a whole slide sequence.

- Assets are decoded once per batch, then slides render strictly in order
- One bad slide never fails the batch: it gets a failing ValidationResult
- CarouselSession debounces edits and drops results from superseded batches
"""

import asyncio
import logging
from types import MappingProxyType
from typing import List, Optional, Sequence, Tuple

from carousel.config import get_settings
from carousel.design_templates import get_format, get_template
from carousel.models import RenderConfiguration, Slide, SlideOverride, SplitMethod, ValidationResult
from carousel.services.assets import ImageLoader, resolve_assets
from carousel.services.image_renderer import SlideCompositor
from carousel.services.slide_splitter import build_slide_sequence

logger = logging.getLogger(__name__)

settings = get_settings()


class CarouselRenderer:
    """Renders every slide of a carousel with one configuration snapshot."""

    def __init__(self, compositor: Optional[SlideCompositor] = None, loader: Optional[ImageLoader] = None):
        self.compositor = compositor or SlideCompositor(loader=loader)
        self.loader = loader or self.compositor.loader

    async def render_all(
        self,
        slides: Sequence[Slide],
        config: RenderConfiguration,
    ) -> Tuple[List[Optional[bytes]], List[ValidationResult]]:
        """Render all slides in order.

        Returns PNG bytes (None where no surface could be created) and one
        ValidationResult per slide, both in slide order.
        """
        # Structural problems surface before any work is done
        get_template(config.template_id)
        get_format(config.format)

        assets = await resolve_assets(config, self.loader)

        images: List[Optional[bytes]] = []
        validations: List[ValidationResult] = []
        total = len(slides)

        for index, slide in enumerate(slides):
            try:
                result = await self.compositor.render(slide, index, total, config, assets)
            except OSError as e:
                logger.error(f"Slide {slide.id} failed to render: {e}")
                images.append(None)
                validations.append(ValidationResult(slide.id, False, error=str(e)))
                continue
            images.append(result.image)
            validations.append(result.validation)

        invalid = [v.slide_id for v in validations if not v.is_valid]
        if invalid:
            logger.warning(f"Rendered {total} slides, {len(invalid)} invalid: {invalid}")
        else:
            logger.info(f"Rendered {total} slides")
        return images, validations


def with_slide_override(
    config: RenderConfiguration,
    slides: Sequence[Slide],
    slide_id: int,
    font_size_scale: Optional[float] = None,
    line_height_scale: Optional[float] = None,
    text_align: Optional[str] = None,
) -> RenderConfiguration:
    """New configuration with a per-slide override applied.

    Editing the second slide of a carousel with more than two content slides
    applies the value to the whole middle group (every content slide between
    the cover and the last one). The bonus slide cannot be targeted.
    """
    content = [s for s in slides if not s.is_special_final]
    position = next((i for i, s in enumerate(content) if s.id == slide_id), None)
    if position is None:
        raise ValueError(f"Slide {slide_id} is not a content slide of this carousel")

    if position == 1 and len(content) > 2:
        targets = content[1:len(content) - 1]
    else:
        targets = [content[position]]

    update = {}
    if font_size_scale is not None:
        update["font_size_scale"] = round(font_size_scale, 1)
    if line_height_scale is not None:
        update["line_height_scale"] = round(line_height_scale, 2)
    if text_align is not None:
        update["text_align"] = text_align

    overrides = dict(config.slide_overrides)
    for slide in targets:
        current = overrides.get(slide.id, SlideOverride())
        overrides[slide.id] = SlideOverride(**{**current.model_dump(), **update})

    return config.model_copy(update={"slide_overrides": MappingProxyType(overrides)})


class CarouselSession:
    """Recomputes the whole carousel whenever text or configuration change.

    Calls to ``update`` are debounced; a call that has been superseded by a
    newer one (before or after its render) never commits its results.
    """

    def __init__(self, renderer: Optional[CarouselRenderer] = None, debounce: Optional[float] = None):
        self.renderer = renderer or CarouselRenderer()
        self.debounce = settings.render_debounce if debounce is None else debounce
        self._generation = 0
        self.slides: List[Slide] = []
        self.images: List[Optional[bytes]] = []
        self.validations: List[ValidationResult] = []

    @property
    def generation(self) -> int:
        return self._generation

    async def update(self, text: str, method: SplitMethod | str, config: RenderConfiguration) -> bool:
        """Re-render from scratch; returns False when a newer update superseded this one."""
        self._generation += 1
        generation = self._generation

        if self.debounce:
            await asyncio.sleep(self.debounce)
        if generation != self._generation:
            logger.debug(f"Update {generation} superseded before rendering")
            return False

        slides = build_slide_sequence(text, method, config.final_slide)
        if not any(not s.is_special_final for s in slides):
            slides, images, validations = [], [], []
        else:
            images, validations = await self.renderer.render_all(slides, config)

        if generation != self._generation:
            logger.debug(f"Update {generation} superseded, discarding {len(images)} images")
            return False

        self.slides = slides
        self.images = images
        self.validations = validations
        return True

    @property
    def is_valid(self) -> bool:
        return all(v.is_valid for v in self.validations)
