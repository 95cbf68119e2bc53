"""Downsampling images into grayscale sample grids.

Steps for :func:`sample`:

1) Area-average the full RGB image down to size x size (Pillow BOX filter).
2) Blend it 50/50 with a plain nearest-neighbour size x size copy. This
   changes bits on noisy images, so it is part of the hash definition.
3) Walk the grid row by row, remap each cell through the requested
   rotation, read that thumbnail pixel and convert it to luma
   (0.299 R + 0.587 G + 0.114 B, rounded half-up).
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

import structlog
from PIL import Image

from .exceptions import ConfigError
from .rotation import RotationAngle
from .similarity import Color, round_half_up

logger = structlog.get_logger(__name__)

_LUMA_R = Decimal("0.299")
_LUMA_G = Decimal("0.587")
_LUMA_B = Decimal("0.114")


def luma(r: int, g: int, b: int) -> int:
    """Rec. 601 luma of an RGB triple, as an integer in [0, 255]."""
    value = _LUMA_R * r + _LUMA_G * g + _LUMA_B * b
    return int(round_half_up(value))


def make_thumbnail(image: Image.Image, size: int) -> Image.Image:
    """Blended size x size RGB thumbnail of *image*."""
    if size < 2:
        raise ConfigError(f"size must be >= 2, got {size}")
    image = image if image.mode == "RGB" else image.convert("RGB")
    area = image.resize((size, size), resample=Image.Resampling.BOX)
    direct = image.resize((size, size), resample=Image.Resampling.NEAREST)
    return Image.blend(area, direct, 0.5)


def sample(
    image: Image.Image,
    size: int = 8,
    rotation: RotationAngle = RotationAngle.D0,
) -> List[int]:
    """Return the row-major grayscale grid (``size * size`` values)."""

    thumb = make_thumbnail(image, size)
    width, height = thumb.size
    px = thumb.load()

    pixels: List[int] = []
    for y in range(size):
        for x in range(size):
            rx, ry = rotation.rotate_pixel(x, y, height, width)
            r, g, b = px[rx, ry]
            pixels.append(luma(r, g, b))
    return pixels


def average_color(image: Image.Image, size: int = 8) -> Color:
    """Mean colour of a bilinear size x size reduction of *image*."""

    if size < 1:
        raise ConfigError(f"color sample size must be >= 1, got {size}")
    image = image if image.mode == "RGB" else image.convert("RGB")
    reduced = image.resize((size, size), resample=Image.Resampling.BILINEAR)
    px = reduced.load()
    data = [px[x, y] for y in range(size) for x in range(size)]
    count = len(data)

    totals = [sum(p[channel] for p in data) for channel in range(3)]
    color = Color(*(int(round_half_up(Decimal(t) / count)) for t in totals))
    logger.debug("average_color", size=size, color=tuple(color))
    return color
