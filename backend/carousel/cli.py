"""
Command-line carousel renderer.

Usage:
    carousel-render post.txt -o carousel.zip

Or with custom settings:
    carousel-render post.txt --template sunset --format 1080x1080 --nickname myblog --bonus СЛОВО
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from carousel.config import get_settings
from carousel.design_templates import (
    FORMAT_SPECS, FONT_PAIRS, SELECTABLE_FONTS, custom_font_pair, get_font_pair, list_font_pairs, list_templates,
)
from carousel.exceptions import CarouselError
from carousel.models import FinalSlideConfig, RenderConfiguration, SplitMethod
from carousel.services.carousel_renderer import CarouselRenderer
from carousel.services.exporter import save_archive, save_images
from carousel.services.slide_splitter import build_slide_sequence

logger = logging.getLogger("carousel")


class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(level: str):
    handler = logging.StreamHandler()
    handler.setFormatter(ColoredFormatter(
        '%(asctime)s │ %(levelname)s │ %(message)s',
        datefmt='%H:%M:%S'
    ))
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), handlers=[handler], force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carousel-render",
        description="Render a text file into carousel slide images",
    )
    parser.add_argument("input", nargs="?", help="Text file with the carousel content ('-' for stdin)")
    parser.add_argument("-o", "--output", help="Zip bundle path (default carousel.zip), or a directory with --png")
    parser.add_argument("--png", action="store_true", help="Write carousel_<n>.png files instead of a zip")
    parser.add_argument("--split", choices=[m.value for m in SplitMethod], default=SplitMethod.EMPTY_LINE.value)
    parser.add_argument("--format", choices=list(FORMAT_SPECS), default="1080x1350")
    parser.add_argument("--type", dest="carousel_type", choices=["standard", "daily-plan", "bullets", "list"], default="standard")
    parser.add_argument("--template", default="black")
    parser.add_argument("--bg-color", help="Background color for the custom-color template")
    parser.add_argument("--text-color", help="Text color for the custom-color template")
    parser.add_argument("--background", help="Background image (path, URL or data URI) for the custom-image template")
    parser.add_argument("--font-pair", choices=list(FONT_PAIRS), default="gilroy")
    parser.add_argument("--header-font", choices=SELECTABLE_FONTS, help="Custom header font family (overrides --font-pair)")
    parser.add_argument("--body-font", choices=SELECTABLE_FONTS, help="Custom body font family (overrides --font-pair)")
    parser.add_argument("--nickname", default="")
    parser.add_argument("--nickname-position", default="bottom-right",
                        choices=["bottom-left", "bottom-right", "bottom-center", "top-right", "top-center", "top-left"])
    parser.add_argument("--avatar", help="Avatar image (path, URL or data URI)")
    parser.add_argument("--align", choices=["left", "center", "justify"], default="left")
    parser.add_argument("--no-count", action="store_true", help="Hide the N/total slide counter")
    parser.add_argument("--count-position", choices=["top-right", "bottom-right"], default="bottom-right")
    parser.add_argument("--bonus", metavar="CODE_WORD", help="Append the bonus final slide with this code word")
    parser.add_argument("--bonus-topic", default="", help="Blog topic shown on the bonus slide")
    parser.add_argument("--bonus-variant", type=int, choices=[1, 2], default=1)
    parser.add_argument("--strict", action="store_true", help="Exit with status 1 when any slide does not fit")
    parser.add_argument("--list-templates", action="store_true", help="List templates and font pairs, then exit")
    parser.add_argument("--log-level", default=None)
    return parser


def build_config(args: argparse.Namespace) -> RenderConfiguration:
    if args.header_font or args.body_font:
        base = get_font_pair(args.font_pair)
        font_pair = custom_font_pair(args.header_font or base.header_font, args.body_font or base.body_font)
    else:
        font_pair = get_font_pair(args.font_pair)

    final_slide = FinalSlideConfig()
    if args.bonus:
        final_slide = FinalSlideConfig(
            enabled=True,
            code_word=args.bonus,
            blog_topic=args.bonus_topic,
            design_variant=args.bonus_variant,
        )

    options = dict(
        format=args.format,
        carousel_type=args.carousel_type,
        template_id=args.template,
        bg_image=args.background,
        font_pair=font_pair,
        nickname=args.nickname,
        nickname_position=args.nickname_position,
        avatar=args.avatar,
        text_align=args.align,
        show_slide_count=not args.no_count,
        slide_count_position=args.count_position,
        final_slide=final_slide,
    )
    if args.bg_color:
        options["custom_bg_color"] = args.bg_color
    if args.text_color:
        options["custom_text_color"] = args.text_color
    return RenderConfiguration(**options)


def read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


async def run(args: argparse.Namespace) -> int:
    config = build_config(args)
    text = read_input(args.input)

    slides = build_slide_sequence(text, args.split, config.final_slide)
    if not any(not s.is_special_final for s in slides):
        logger.error("Input text is empty, nothing to render")
        return 1

    renderer = CarouselRenderer()
    images, validations = await renderer.render_all(slides, config)

    for validation in validations:
        if not validation.is_valid:
            logger.warning(f"Slide {validation.slide_id}: {validation.error}")

    if args.png:
        output = args.output or get_settings().output_dir
        paths = save_images(images, output)
        logger.info(f"Wrote {len(paths)} images to {output}")
    else:
        save_archive(images, args.output or "carousel.zip")

    if args.strict and not all(v.is_valid for v in validations):
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level or get_settings().log_level)

    if args.list_templates:
        for t in list_templates():
            print(f"{t['id']:<14} {t['kind']:<9} {t['name']}")
        print()
        for p in list_font_pairs():
            print(f"{p['id']:<14} {p['header_font']} + {p['body_font']}")
        return 0

    if not args.input:
        parser.error("input file is required")

    try:
        return asyncio.run(run(args))
    except (CarouselError, ValidationError) as e:
        logger.error(str(e))
        return 2
    except OSError as e:
        logger.error(f"Could not read or write files: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
