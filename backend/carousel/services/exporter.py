"""Packaging rendered slides as PNG files or a single zip bundle."""

import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


def entry_name(position: int) -> str:
    """Bundle entry name for the 1-based slide position."""
    return f"carousel_{position}.png"


def build_archive(images: Sequence[Optional[bytes]]) -> bytes:
    """Zip bytes with one carousel_<n>.png per rendered image; missing images are skipped."""
    buffer = BytesIO()
    rendered = [img for img in images if img is not None]
    if len(rendered) < len(images):
        logger.warning(f"Skipping {len(images) - len(rendered)} slides without an image")

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for position, image in enumerate(rendered, 1):
            archive.writestr(entry_name(position), image)
    return buffer.getvalue()


def save_archive(images: Sequence[Optional[bytes]], path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_archive(images))
    logger.info(f"Saved carousel bundle to {path}")
    return path


def save_images(images: Sequence[Optional[bytes]], directory: str | Path) -> List[Path]:
    """Write each rendered image as carousel_<n>.png into directory."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    paths = []
    for position, image in enumerate((img for img in images if img is not None), 1):
        filepath = directory / entry_name(position)
        filepath.write_bytes(image)
        paths.append(filepath)
    return paths
