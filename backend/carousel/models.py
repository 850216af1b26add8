"""
Data model for the carousel rendering engine.

Configuration values the caller hands in are immutable pydantic models.
Records produced while rendering (slides, segments, layout lines, results)
are plain dataclasses.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from types import MappingProxyType
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from carousel.config import get_settings


CarouselFormat = Literal["1080x1080", "1080x1350"]
CarouselType = Literal["standard", "daily-plan", "bullets", "list"]
NicknamePosition = Literal["bottom-left", "bottom-right", "bottom-center", "top-right", "top-center", "top-left"]
TextAlign = Literal["left", "center", "justify"]
SlideCountPosition = Literal["top-right", "bottom-right"]


class SplitMethod(str, Enum):
    """How raw text is divided into slides."""
    EMPTY_LINE = "empty-line"
    SEPARATOR_LINE = "separator-line"
    SLIDE_NUMBER_LABEL = "slide-number"


# ============================================
# TRANSIENT RECORDS
# ============================================

@dataclass(frozen=True)
class Slide:
    id: int
    text: str
    is_special_final: bool = False


@dataclass(frozen=True)
class TextSegment:
    text: str
    is_bold: bool = False
    color: Optional[str] = None


@dataclass(frozen=True)
class FontSpec:
    """Family, weight name and pixel size of one run of text."""
    family: str
    weight: str
    size: float


@dataclass
class LayoutLine:
    segments: List[TextSegment]
    is_header: bool
    width: float
    font_size: float
    line_height: float = 0.0
    top: float = 0.0  # Offset from the top of the text block
    ends_paragraph: bool = False


@dataclass
class LayoutResult:
    lines: List[LayoutLine]
    is_valid: bool
    font_size_used: float
    total_height: float = 0.0


@dataclass
class ValidationResult:
    slide_id: int
    is_valid: bool
    error: Optional[str] = None
    font_size_used: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RenderResult:
    image: Optional[bytes]
    validation: ValidationResult
    layout: Optional[LayoutResult] = field(default=None, repr=False)


# ============================================
# RENDER CONFIGURATION
# ============================================

class FontPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = "custom"
    name: str = ""
    header_font: str
    body_font: str


class SlideOverride(BaseModel):
    model_config = ConfigDict(frozen=True)

    font_size_scale: float = Field(1.0, ge=0.5, le=2.5)
    line_height_scale: float = Field(default_factory=lambda: get_settings().default_line_height, ge=1.0, le=2.0)
    text_align: Optional[TextAlign] = None  # None = use the global alignment


class FinalSlideConfig(BaseModel):
    """Bonus call-to-action slide appended after the content slides."""
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    text_before: str = "Пиши в комментариях"
    code_word: str = "СЛОВО"
    text_after: str = "и я отправлю тебе бонус в директ!"
    blog_topic: str = ""
    vertical_offset: int = Field(50, ge=0, le=100)
    branding_offset: int = Field(50, ge=0, le=100)
    design_variant: int = Field(1, ge=1, le=2)  # 1 = outlined stadium, 2 = filled stadium
    topic_template: str = "у меня в блоге все про {topic}"
    topic_fallback: str = "Подписывайся!"

    def topic_sentence(self) -> str:
        topic = self.blog_topic.strip()
        if topic:
            return self.topic_template.format(topic=topic)
        return self.topic_fallback


class RenderConfiguration(BaseModel):
    """Immutable snapshot of everything that affects how a carousel looks."""
    model_config = ConfigDict(frozen=True)

    format: CarouselFormat = "1080x1350"
    carousel_type: CarouselType = "standard"
    template_id: str = "black"
    custom_bg_color: str = "#121212"  # Used by the custom-color template
    custom_text_color: str = "#ffffff"
    bg_image: Optional[str] = None  # Data URI, file path or URL for the custom-image template
    font_pair: FontPair = FontPair(id="gilroy", name="Gilroy ExtraBold + Manrope", header_font="Montserrat", body_font="Manrope")
    nickname: str = ""
    nickname_position: NicknamePosition = "bottom-right"
    avatar: Optional[str] = None  # Data URI, file path or URL
    text_align: TextAlign = "left"
    show_slide_count: bool = True
    slide_count_position: SlideCountPosition = "bottom-right"
    slide_overrides: Mapping[int, SlideOverride] = Field(default_factory=dict, validate_default=True)
    final_slide: FinalSlideConfig = FinalSlideConfig()

    @field_validator("slide_overrides", mode="after")
    @classmethod
    def _freeze_overrides(cls, value: Mapping[int, SlideOverride]) -> Mapping[int, SlideOverride]:
        return MappingProxyType(dict(value))

    @field_serializer("slide_overrides")
    def _dump_overrides(self, value: Mapping[int, SlideOverride]) -> dict:
        return {slide_id: override.model_dump() for slide_id, override in value.items()}

    def override_for(self, slide: Slide) -> SlideOverride:
        """Per-slide scales; the bonus slide always gets the defaults."""
        if slide.is_special_final:
            return SlideOverride()
        return self.slide_overrides.get(slide.id, SlideOverride())

    def display_nickname(self) -> str:
        if not self.nickname:
            return ""
        return self.nickname if self.nickname.startswith("@") else f"@{self.nickname}"
