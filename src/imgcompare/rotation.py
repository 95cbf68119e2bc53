"""Rotation emulation by coordinate remapping.

Instead of rotating a thumbnail, the sampler reads each grid cell from the
position it would come from if the image had been rotated. This gives a hash
that can be compared against a rotated copy without building a second image.
Only the four right angles are supported.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple, Union

from .exceptions import ConfigError


class RotationAngle(IntEnum):
    """Clockwise right-angle rotations."""

    D0 = 0
    D90 = 90
    D180 = 180
    D270 = 270

    @classmethod
    def coerce(cls, value: Union["RotationAngle", int]) -> "RotationAngle":
        """Return the member for ``value`` (an enum member or degrees)."""
        try:
            return cls(int(value))
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                f"Unsupported rotation: {value!r}. Use 0|90|180|270."
            ) from exc

    def rotate_pixel(self, x: int, y: int, height: int, width: int) -> Tuple[int, int]:
        """Map a sample coordinate to the source coordinate to read from.

        ``height`` and ``width`` are the dimensions of the grid being sampled.
        """
        if self is RotationAngle.D90:
            return (height - 1) - y, x
        if self is RotationAngle.D180:
            return (width - 1) - x, (height - 1) - y
        if self is RotationAngle.D270:
            return y, (height - 1) - x
        return x, y
