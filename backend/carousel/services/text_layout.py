"""
Text Layout Engine for carousel slides.

Word-wraps rich-text paragraphs into lines and shrinks the font size until
the wrapped block fits the text box:
- First paragraph may render as a header (header family, black weight, larger scale)
- Every other paragraph renders as body text
- Search is linear from the start size downwards; a larger size never
  produces a shorter block, so the first fitting candidate is the largest one
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from carousel.models import FontPair, FontSpec, LayoutLine, LayoutResult, TextSegment
from carousel.services.rich_text import parse_rich_text_segments

logger = logging.getLogger(__name__)

Measure = Callable[[str, FontSpec], float]

HEADER_WEIGHT = "black"
BODY_WEIGHT = "regular"

# Scale of the header / body lines relative to the base font size
COVER_HEADER_SCALE = 1.6
COVER_BODY_SCALE = 1.0
HEADER_SCALE = 1.1
BODY_SCALE = 0.75

HEADER_MAX_CHARS = 80
PARAGRAPH_SPACING = 0.3  # Fraction of the paragraph font size added after it

# These content types read as lists, so they are never centered or justified
LEFT_ALIGNED_TYPES = {"daily-plan", "list", "bullets"}


@dataclass(frozen=True)
class LayoutHints:
    """Per-slide context that decides header detection and fonts."""
    carousel_type: str = "standard"
    is_last: bool = False
    header_font: str = "Montserrat"
    body_font: str = "Manrope"
    header_scale: float = HEADER_SCALE
    body_scale: float = BODY_SCALE
    header_max_chars: int = HEADER_MAX_CHARS
    paragraph_spacing: float = PARAGRAPH_SPACING

    @classmethod
    def for_slide(
        cls,
        is_cover: bool,
        is_last: bool,
        carousel_type: str,
        font_pair: FontPair,
        header_max_chars: int = HEADER_MAX_CHARS,
    ) -> "LayoutHints":
        return cls(
            carousel_type=carousel_type,
            is_last=is_last,
            header_font=font_pair.header_font,
            body_font=font_pair.body_font,
            header_scale=COVER_HEADER_SCALE if is_cover else HEADER_SCALE,
            body_scale=COVER_BODY_SCALE if is_cover else BODY_SCALE,
            header_max_chars=header_max_chars,
        )


def is_header_paragraph(paragraph: str, index: int, is_cover: bool, hints: LayoutHints) -> bool:
    """Only the first paragraph can be a header; the rule depends on slide and content type."""
    if index != 0:
        return False
    if is_cover:
        return len(paragraph) < hints.header_max_chars
    if hints.carousel_type == "bullets" and not hints.is_last:
        return True
    return len(paragraph) < hints.header_max_chars and hints.carousel_type == "standard"


def resolve_alignment(text_align: str, carousel_type: str, is_cover: bool) -> str:
    if not is_cover and carousel_type in LEFT_ALIGNED_TYPES:
        return "left"
    return text_align


def font_for(is_header: bool, is_bold: bool, size: float, hints: LayoutHints) -> FontSpec:
    """Font of one word piece on a header or body line."""
    weight = HEADER_WEIGHT if (is_bold or is_header) else BODY_WEIGHT
    family = hints.header_font if is_header else hints.body_font
    return FontSpec(family=family, weight=weight, size=size)


def split_words(segment: TextSegment) -> List[TextSegment]:
    """Explode a segment into word pieces; every word but the segment's last keeps its space."""
    words = segment.text.split(" ")
    pieces = []
    for i, word in enumerate(words):
        piece = word if i == len(words) - 1 else word + " "
        if piece:
            pieces.append(TextSegment(piece, is_bold=segment.is_bold, color=segment.color))
    return pieces


def compute_layout(
    paragraphs: Sequence[str],
    font_size: float,
    max_width: float,
    line_height_scale: float,
    is_cover: bool,
    hints: LayoutHints,
    measure: Measure,
) -> Tuple[List[LayoutLine], float, bool]:
    """Wrap all paragraphs at one base size.

    Returns the lines, the total block height and whether any single word is
    wider than ``max_width`` on its own.
    """
    lines: List[LayoutLine] = []
    total_height = 0.0
    overflow = False

    for p_idx, paragraph in enumerate(paragraphs):
        is_header = is_header_paragraph(paragraph, p_idx, is_cover, hints)
        size = font_size * (hints.header_scale if is_header else hints.body_scale)
        line_height = size * line_height_scale
        first_line = len(lines)

        current: List[TextSegment] = []
        current_width = 0.0

        for segment in parse_rich_text_segments(paragraph):
            spec = font_for(is_header, segment.is_bold, size, hints)
            for piece in split_words(segment):
                if not current and not piece.text.strip():
                    continue
                piece_width = measure(piece.text, spec)

                if current_width + piece_width > max_width and current:
                    lines.append(LayoutLine(current, is_header, current_width, size, line_height, top=total_height))
                    total_height += line_height
                    current = []
                    current_width = 0.0
                    if not piece.text.strip():
                        continue

                if not current and measure(piece.text.rstrip(), spec) > max_width:
                    overflow = True
                current.append(piece)
                current_width += piece_width

        # A blank paragraph still takes one full line
        if current or len(lines) == first_line:
            lines.append(LayoutLine(current, is_header, current_width, size, line_height, top=total_height))
            total_height += line_height
        if len(lines) > first_line:
            lines[-1].ends_paragraph = True

        if p_idx < len(paragraphs) - 1:
            total_height += size * hints.paragraph_spacing

    return lines, total_height, overflow


def fit_text(
    paragraphs: Sequence[str],
    start_font_size: float,
    min_font_size: float,
    max_width: float,
    max_height: float,
    line_height_scale: float,
    is_cover: bool,
    hints: LayoutHints,
    measure: Measure,
    step: float = 2.0,
) -> LayoutResult:
    """Largest base size (stepping down from ``start_font_size``) whose layout fits the box.

    The floor itself is always the last candidate, even when it is not on the
    step grid. When nothing fits down to the floor, the layout at the floor is
    returned with ``is_valid=False`` so the slide can still be drawn.
    """
    if step <= 0:
        raise ValueError(f"Shrink step must be positive, got {step}")

    # A start size already under the minimum is its own floor
    floor = min(min_font_size, start_font_size)

    attempt = 0
    size = start_font_size
    while True:
        lines, total_height, overflow = compute_layout(
            paragraphs, size, max_width, line_height_scale, is_cover, hints, measure
        )
        if total_height <= max_height and not overflow:
            return LayoutResult(lines=lines, is_valid=True, font_size_used=size, total_height=total_height)
        if size <= floor:
            break
        attempt += 1
        size = max(floor, round(start_font_size - attempt * step, 4))

    logger.debug(f"Text does not fit at {floor}px (height {total_height:.0f} > {max_height:.0f})")
    return LayoutResult(lines=lines, is_valid=False, font_size_used=floor, total_height=total_height)


def wrap_plain(text: str, spec: FontSpec, max_width: float, measure: Measure) -> List[str]:
    """Greedy single-font wrap used for the call-to-action texts."""
    words = text.split(" ")
    if not text.strip():
        return []

    lines = []
    current_line = words[0]
    for word in words[1:]:
        if measure(current_line + " " + word, spec) < max_width:
            current_line += " " + word
        else:
            lines.append(current_line)
            current_line = word
    lines.append(current_line)
    return lines
