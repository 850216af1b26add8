"""
Image decoding for avatars and custom backgrounds.

Sources can be data URIs (what a browser file input produces), http(s) URLs,
local file paths or raw bytes. Any failure is logged and returns None: a
missing asset never stops a render.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote_to_bytes

import httpx
from PIL import Image

from carousel.config import get_settings
from carousel.design_templates import get_template
from carousel.models import RenderConfiguration

logger = logging.getLogger(__name__)

settings = get_settings()

ImageSource = Union[str, bytes, None]


def _describe(source: ImageSource) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    if source.startswith("data:"):
        return source[:30] + "..."
    return source


def decode_data_uri(uri: str) -> bytes:
    """Payload bytes of a ``data:`` URI."""
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ValueError("Malformed data URI")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


def decode_image(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img.convert("RGBA")


class ImageLoader:
    """Turns an image source into a decoded RGBA bitmap."""

    def __init__(self, timeout: Optional[float] = None, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout if timeout is not None else settings.asset_timeout
        self._client = client

    async def _fetch(self, url: str) -> bytes:
        if self._client is not None:
            response = await self._client.get(url)
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url)
        response.raise_for_status()
        return response.content

    async def _read_bytes(self, source: Union[str, bytes]) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)
        if source.startswith("data:"):
            return decode_data_uri(source)
        if source.startswith(("http://", "https://")):
            return await self._fetch(source)
        return await asyncio.to_thread(Path(source).read_bytes)

    async def load(self, source: ImageSource) -> Optional[Image.Image]:
        """Decoded image, or None when the source is empty or cannot be decoded."""
        if not source:
            return None
        try:
            data = await self._read_bytes(source)
            return await asyncio.to_thread(decode_image, data)
        except (httpx.HTTPError, OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning(f"Failed to load image {_describe(source)}: {e}")
            return None


@dataclass
class ResolvedAssets:
    """Decoded bitmaps consumed by the synchronous draw pass."""
    avatar: Optional[Image.Image] = None
    background: Optional[Image.Image] = None


async def resolve_assets(config: RenderConfiguration, loader: Optional[ImageLoader] = None) -> ResolvedAssets:
    """Decode the avatar and (for image templates) the background concurrently."""
    loader = loader or ImageLoader()
    template = get_template(config.template_id)
    background_source = config.bg_image if template.kind == "image" else None

    avatar, background = await asyncio.gather(
        loader.load(config.avatar),
        loader.load(background_source),
    )
    return ResolvedAssets(avatar=avatar, background=background)
