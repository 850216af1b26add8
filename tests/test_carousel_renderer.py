"""Tests for batch rendering, slide overrides and the live session."""

import asyncio

import pytest
from pydantic import ValidationError

from carousel.exceptions import UnknownFormatError, UnknownTemplateError
from carousel.models import FinalSlideConfig, RenderConfiguration, RenderResult, Slide, SlideOverride, ValidationResult
from carousel.services.assets import ImageLoader
from carousel.services.carousel_renderer import CarouselRenderer, CarouselSession, with_slide_override
from carousel.services.image_renderer import SlideCompositor
from carousel.services.slide_splitter import build_slide_sequence


class CountingLoader(ImageLoader):
    def __init__(self):
        super().__init__()
        self.sources = []

    async def load(self, source):
        if source:
            self.sources.append(source)
        return await super().load(source)


class FlakyCompositor:
    """Fails with a disk error on one slide id."""

    def __init__(self, failing_id):
        self.failing_id = failing_id

    async def render(self, slide, index, total, config, assets=None):
        if slide.id == self.failing_id:
            raise OSError("disk full")
        return RenderResult(image=b"png", validation=ValidationResult(slide.id, True, font_size_used=64))


class FakeRenderer:
    def __init__(self, gate=None):
        self.gate = gate
        self.calls = 0

    async def render_all(self, slides, config):
        self.calls += 1
        if self.gate is not None and self.calls == 1:
            await self.gate.wait()
        return [b"png"] * len(slides), [ValidationResult(s.id, True) for s in slides]


def content_slides(count):
    return [Slide(i, f"slide {i}") for i in range(1, count + 1)]


class TestRenderAll:
    def test_one_result_per_slide_in_order(self, compositor):
        config = RenderConfiguration(final_slide=FinalSlideConfig(enabled=True))
        slides = build_slide_sequence("Title\n\n" + "word " * 3000 + "\n\nEnd", "empty-line", config.final_slide)
        images, validations = asyncio.run(CarouselRenderer(compositor).render_all(slides, config))

        assert len(images) == len(validations) == 4
        assert [v.slide_id for v in validations] == [1, 2, 3, 999]
        assert all(img is not None for img in images)
        assert [v.is_valid for v in validations] == [True, False, True, True]

    def test_assets_decoded_once_per_batch(self, fonts, red_png_uri):
        loader = CountingLoader()
        renderer = CarouselRenderer(SlideCompositor(fonts=fonts, loader=loader), loader)
        config = RenderConfiguration(avatar=red_png_uri, nickname="author")

        asyncio.run(renderer.render_all(content_slides(3), config))
        assert loader.sources == [red_png_uri]

    def test_unknown_template_raises_before_rendering(self):
        renderer = CarouselRenderer(FlakyCompositor(failing_id=None), ImageLoader())
        with pytest.raises(UnknownTemplateError):
            asyncio.run(renderer.render_all(content_slides(2), RenderConfiguration(template_id="nope")))

    def test_unknown_format_raises(self):
        config = RenderConfiguration().model_copy(update={"format": "640x480"})
        renderer = CarouselRenderer(FlakyCompositor(failing_id=None), ImageLoader())
        with pytest.raises(UnknownFormatError):
            asyncio.run(renderer.render_all(content_slides(2), config))

    def test_slide_error_is_captured(self):
        renderer = CarouselRenderer(FlakyCompositor(failing_id=2), ImageLoader())
        images, validations = asyncio.run(renderer.render_all(content_slides(3), RenderConfiguration()))

        assert images == [b"png", None, b"png"]
        assert not validations[1].is_valid
        assert validations[1].error == "disk full"
        assert validations[0].is_valid and validations[2].is_valid


class TestSlideOverrides:
    slides = content_slides(5) + [Slide(999, "Special Final Slide", True)]

    def test_second_slide_applies_to_middle_group(self):
        config = with_slide_override(RenderConfiguration(), self.slides, 2, font_size_scale=1.23)
        assert set(config.slide_overrides) == {2, 3, 4}
        assert all(o.font_size_scale == 1.2 for o in config.slide_overrides.values())

    def test_other_slides_are_individual(self):
        config = with_slide_override(RenderConfiguration(), self.slides, 3, line_height_scale=1.234)
        assert config.slide_overrides == {3: SlideOverride(line_height_scale=1.23)}

    def test_two_content_slides_no_group(self):
        config = with_slide_override(RenderConfiguration(), content_slides(2), 2, font_size_scale=0.8)
        assert set(config.slide_overrides) == {2}

    def test_overrides_merge(self):
        config = with_slide_override(RenderConfiguration(), self.slides, 5, font_size_scale=1.5)
        config = with_slide_override(config, self.slides, 5, text_align="center")
        assert config.slide_overrides[5] == SlideOverride(font_size_scale=1.5, text_align="center")

    def test_original_configuration_untouched(self):
        original = RenderConfiguration()
        with_slide_override(original, self.slides, 1, font_size_scale=2.0)
        assert original.slide_overrides == {}

    def test_updated_overrides_stay_read_only(self):
        config = with_slide_override(RenderConfiguration(), self.slides, 3, font_size_scale=0.8)
        with pytest.raises(TypeError):
            config.slide_overrides[4] = SlideOverride()

    @pytest.mark.parametrize("slide_id", [999, 42])
    def test_rejects_non_content_slides(self, slide_id):
        with pytest.raises(ValueError):
            with_slide_override(RenderConfiguration(), self.slides, slide_id, font_size_scale=1.0)

    def test_out_of_range_scale(self):
        with pytest.raises(ValidationError):
            with_slide_override(RenderConfiguration(), self.slides, 1, font_size_scale=3.0)

    def test_bonus_slide_ignores_overrides(self):
        config = RenderConfiguration(slide_overrides={999: SlideOverride(font_size_scale=2.0)})
        assert config.override_for(self.slides[-1]) == SlideOverride()


class TestCarouselSession:
    config = RenderConfiguration()

    def test_update_commits(self):
        session = CarouselSession(FakeRenderer(), debounce=0)
        assert asyncio.run(session.update("a\n\nb", "empty-line", self.config))
        assert [s.text for s in session.slides] == ["a", "b"]
        assert session.images == [b"png", b"png"]
        assert session.is_valid

    def test_superseded_during_debounce(self):
        renderer = FakeRenderer()
        session = CarouselSession(renderer, debounce=0.01)

        async def scenario():
            return await asyncio.gather(
                session.update("old", "empty-line", self.config),
                session.update("new", "empty-line", self.config),
            )

        assert asyncio.run(scenario()) == [False, True]
        assert renderer.calls == 1
        assert [s.text for s in session.slides] == ["new"]

    def test_superseded_during_render(self):
        async def scenario():
            gate = asyncio.Event()
            session = CarouselSession(FakeRenderer(gate), debounce=0)
            first = asyncio.create_task(session.update("old", "empty-line", self.config))
            await asyncio.sleep(0)
            second = await session.update("new", "empty-line", self.config)
            gate.set()
            return await first, second, session

        first, second, session = asyncio.run(scenario())
        assert (first, second) == (False, True)
        assert [s.text for s in session.slides] == ["new"]

    def test_empty_text_clears(self):
        renderer = FakeRenderer()
        session = CarouselSession(renderer, debounce=0)
        config = RenderConfiguration(final_slide=FinalSlideConfig(enabled=True))

        asyncio.run(session.update("a", "empty-line", config))
        assert asyncio.run(session.update("   ", "empty-line", config))
        assert session.slides == []
        assert session.images == [] and session.validations == []
        assert renderer.calls == 1
