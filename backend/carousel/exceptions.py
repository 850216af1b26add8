"""Exceptions raised for structural misuse of the rendering engine.

Recoverable conditions (text that does not fit, assets that fail to decode,
a canvas that cannot be created) are never raised; they are reported through
``ValidationResult`` instead.
"""

from __future__ import annotations


class CarouselError(Exception):
    """Base class for carousel engine errors."""


class UnknownTemplateError(CarouselError, KeyError):
    """Raised when a template id is not part of the catalogue."""

    def __init__(self, template_id: str, known: list[str]):
        self.template_id = template_id
        self.known = known
        super().__init__(template_id)

    def __str__(self) -> str:
        return f"Unknown template '{self.template_id}'. Known templates: {', '.join(self.known)}"


class UnknownFormatError(CarouselError, KeyError):
    """Raised when a carousel format is not one of the fixed pixel sizes."""

    def __init__(self, format_id: str, known: list[str]):
        self.format_id = format_id
        self.known = known
        super().__init__(format_id)

    def __str__(self) -> str:
        return f"Unknown format '{self.format_id}'. Known formats: {', '.join(self.known)}"


class UnknownFontPairError(CarouselError, KeyError):
    """Raised when a font pair id is not part of the catalogue."""

    def __init__(self, pair_id: str, known: list[str]):
        self.pair_id = pair_id
        self.known = known
        super().__init__(pair_id)

    def __str__(self) -> str:
        return f"Unknown font pair '{self.pair_id}'. Known font pairs: {', '.join(self.known)}"
