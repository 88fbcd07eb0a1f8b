"""Pillow rendering of a ``PreviewLayout`` into an RGBA bitmap."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont

from resume_builder.services.preview_layout import PreviewLayout

logger = logging.getLogger(__name__)

__all__ = ["RASTER_SCALE", "PillowTextMeasurer", "rasterize_layout"]

# Bitmap pixels per layout pixel.
RASTER_SCALE = 2


@lru_cache(maxsize=32)
def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=max(size, 1))


class PillowTextMeasurer:
    """Measures text with the font the rasterizer draws with.

    Widths are taken at the bitmap font size and divided back down so the
    layout matches what ends up in the bitmap.
    """

    def __init__(self, scale: int = RASTER_SCALE) -> None:
        self.scale = scale

    def measure(self, text: str, size: float, bold: bool = False) -> float:
        font = _load_font(round(size * self.scale))
        width = font.getlength(text) / self.scale
        # Bold is faked by drawing twice one bitmap pixel apart.
        return width + (1 / self.scale if bold else 0)


def _paste_image(canvas: Image.Image, data: bytes, box: tuple[int, int, int, int]) -> None:
    x, y, width, height = box
    try:
        with Image.open(BytesIO(data)) as source:
            picture = source.convert("RGBA").resize((width, height))
    except (OSError, ValueError) as exc:
        logger.warning("Skipping unreadable profile image: %s", exc)
        return
    canvas.alpha_composite(picture, dest=(x, y))


def rasterize_layout(layout: PreviewLayout, scale: int = RASTER_SCALE) -> Image.Image:
    """Draw *layout* on a transparent bitmap *scale* times its pixel size."""
    size = (math.ceil(layout.width * scale), math.ceil(layout.height * scale))
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)

    for rule in layout.rules:
        y = rule.y * scale
        draw.line(
            [(rule.x * scale, y), ((rule.x + rule.width) * scale, y)],
            fill=rule.color,
            width=max(1, scale),
        )

    for image in layout.images:
        box = (
            round(image.x * scale),
            round(image.y * scale),
            round(image.width * scale),
            round(image.height * scale),
        )
        _paste_image(canvas, image.data, box)

    for run in layout.texts:
        font = _load_font(round(run.size * scale))
        origin = (run.x * scale, run.baseline * scale)
        draw.text(origin, run.text, font=font, fill=run.color, anchor="ls")
        if run.bold:
            draw.text((origin[0] + 1, origin[1]), run.text, font=font, fill=run.color, anchor="ls")

    return canvas
