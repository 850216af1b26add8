"""Inline markup parser: ``**bold**`` and ``[label](#RRGGBB)`` runs."""

import re
from typing import List

from carousel.models import TextSegment

# Both marker kinds in one alternation so they are matched in source order.
# A colour marker only matches with its (#hex) part, otherwise it stays literal.
MARKUP_PATTERN = re.compile(r"(\*\*.*?\*\*|\[[^\[\]]*\]\(#?[a-fA-F0-9]{3,8}\))")
COLOR_MARKER_PATTERN = re.compile(r"\[([^\[\]]*)\]\((#?[a-fA-F0-9]{3,8})\)")


def parse_rich_text_segments(text: str) -> List[TextSegment]:
    """Split one paragraph into plain, bold and coloured segments."""
    segments = []
    last_index = 0

    for match in MARKUP_PATTERN.finditer(text):
        if match.start() > last_index:
            segments.append(TextSegment(text[last_index:match.start()]))

        part = match.group(0)
        if part.startswith("**"):
            segments.append(TextSegment(part[2:-2], is_bold=True))
        else:
            color_match = COLOR_MARKER_PATTERN.fullmatch(part)
            segments.append(TextSegment(color_match.group(1), color=color_match.group(2)))
        last_index = match.end()

    if last_index < len(text):
        segments.append(TextSegment(text[last_index:]))

    return segments


def strip_markup(text: str) -> str:
    """Paragraph text with marker delimiters removed."""
    return "".join(s.text for s in parse_rich_text_segments(text))
