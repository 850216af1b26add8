"""Split raw carousel text into an ordered list of slides."""

import logging
import re
from typing import List, Optional

from carousel.config import get_settings
from carousel.models import FinalSlideConfig, Slide, SplitMethod

logger = logging.getLogger(__name__)

settings = get_settings()

EMPTY_LINE_PATTERN = re.compile(r"\n\s*\n")
SEPARATOR = "---"
# "Слайд 3:" as typed by Russian-speaking authors, "Slide 3:" otherwise
SLIDE_LABEL_PATTERN = re.compile(r"(?:Слайд|Slide)\s*\d+\s*:", re.IGNORECASE)


def split_text_to_slides(text: str, method: SplitMethod | str) -> List[Slide]:
    """Divide text into slides; ids are 1-based positions of the non-empty chunks."""
    trimmed = text.strip()
    if not trimmed:
        return []

    method = SplitMethod(method)
    if method is SplitMethod.EMPTY_LINE:
        chunks = EMPTY_LINE_PATTERN.split(trimmed)
    elif method is SplitMethod.SEPARATOR_LINE:
        chunks = trimmed.split(SEPARATOR)
    else:
        chunks = SLIDE_LABEL_PATTERN.split(trimmed)
        if chunks and chunks[0].strip() == "":
            chunks.pop(0)

    texts = [c.strip() for c in chunks]
    return [Slide(id=i, text=t) for i, t in enumerate((t for t in texts if t), 1)]


def build_slide_sequence(
    text: str,
    method: SplitMethod | str,
    final_slide: Optional[FinalSlideConfig] = None,
    max_slides: Optional[int] = None,
) -> List[Slide]:
    """Slides for one carousel: capped content slides plus the optional bonus slide."""
    limit = settings.max_slides if max_slides is None else max_slides
    slides = split_text_to_slides(text, method)
    if len(slides) > limit:
        logger.info(f"Text produced {len(slides)} slides, keeping the first {limit}")
        slides = slides[:limit]

    if final_slide is not None and final_slide.enabled:
        slides.append(Slide(id=settings.bonus_slide_id, text="Special Final Slide", is_special_final=True))

    return slides
