"""Pad a rectangular image onto a square white canvas.

The canvas side is the longer of the two dimensions. The original pixels are
not rescaled; they are pasted with the shorter axis offset by
half the difference (rounded half-up), which centres the content and leaves
white bands on both sides of that axis.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Tuple

import structlog
from PIL import Image

from .similarity import round_half_up

logger = structlog.get_logger(__name__)

WHITE = (255, 255, 255)


def square_offset(width: int, height: int) -> Tuple[int, int]:
    """Top-left paste position of a width x height image on its square canvas."""
    gap = int(round_half_up(Decimal(abs(width - height)) / 2))
    if width > height:
        return 0, gap
    return gap, 0


def square_image(image: Image.Image) -> Image.Image:
    """Return a new square RGB image with *image* centred on white."""

    image = image if image.mode == "RGB" else image.convert("RGB")
    width, height = image.size
    side = max(width, height)

    canvas = Image.new("RGB", (side, side), WHITE)
    canvas.paste(image, square_offset(width, height))
    logger.debug("image_squared", width=width, height=height, side=side)
    return canvas
