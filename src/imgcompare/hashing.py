"""Bit encoders for imgcompare.

A hash is built from a size x size grid of grayscale samples (see
:mod:`imgcompare.thumbnail`) and has exactly one bit per sample, in the same
row-major order as the grid.

Implementation notes
--------------------
Two encoders are available:

AVERAGE (aHash)
    1) threshold = floor(sum(grid) / len(grid)), computed on integers
    2) bit = 1 if sample > threshold else 0 (ties give 0)

GRADIENT (dHash, linearised)
    bit[i] = 1 if grid[i] > grid[i + 1] else 0, where the successor of the
    last sample is the first one. This is the 8x8 variant, not the classic
    9x8 adjacent-column one, so the wraparound must be kept as is.

The Hamming distance between two hashes is the number of different bits.
Smaller distance => more visually similar.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence

from .exceptions import ConfigError

Hash = List[int]


def average_hash(pixels: Sequence[int]) -> Hash:
    """Threshold every sample against the integer mean of the grid."""

    threshold = sum(pixels) // len(pixels)
    return [1 if p > threshold else 0 for p in pixels]


def difference_hash(pixels: Sequence[int]) -> Hash:
    """Compare every sample with its successor, wrapping at the end."""

    n = len(pixels)
    return [1 if pixels[i] > pixels[(i + 1) % n] else 0 for i in range(n)]


class HashStrategy(Enum):
    """The two supported encoders."""

    AVERAGE = "average"
    GRADIENT = "gradient"

    @classmethod
    def coerce(cls, value: "HashStrategy | str") -> "HashStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ConfigError(
                f"Unknown hash strategy: {value!r}. Use average|gradient."
            ) from exc

    def encode(self, pixels: Sequence[int]) -> Hash:
        """Turn a grayscale grid into a bit list."""
        if self is HashStrategy.GRADIENT:
            return difference_hash(pixels)
        return average_hash(pixels)


def hash_to_string(bits: Sequence[int]) -> str:
    """Render a hash as a string of '0'/'1' characters, one per bit."""
    return "".join(str(int(b)) for b in bits)


def string_to_hash(text: str) -> Hash:
    """Parse a string produced by :func:`hash_to_string`."""
    bad = set(text) - {"0", "1"}
    if bad:
        raise ValueError(f"Hash strings may only contain 0 and 1, got {sorted(bad)!r}")
    return [int(c) for c in text]
