"""Similarity scoring.

Percentages are computed with :class:`decimal.Decimal` and rounded half-up,
so the same inputs give the same digits on every platform. Floats only
appear in the returned values.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal
from typing import NamedTuple, Sequence, Union

from .exceptions import ConfigError, HashLengthMismatchError

# Guard digits on top of the requested precision; percentages have at most
# three integer digits.
_GUARD_DIGITS = 50
_HUNDRED = Decimal(100)
_MAX_RGB_SQUARED = Decimal(3) * Decimal(255) ** 2

Number = Union[Decimal, int, str]


class Color(NamedTuple):
    """Average colour of an image."""

    r: int
    g: int
    b: int


def _context(precision: int) -> Context:
    """Decimal context wide enough to keep *precision* fractional digits exact."""
    return Context(prec=precision + _GUARD_DIGITS, rounding=ROUND_HALF_UP)


def round_half_up(value: Number, precision: int = 0) -> Decimal:
    """Round *value* to *precision* decimal places, halves away from zero."""
    if precision < 0:
        raise ConfigError(f"precision must be >= 0, got {precision}")
    return _context(precision).quantize(Decimal(value), Decimal(1).scaleb(-precision))


def hamming_distance(a: Sequence[int], b: Sequence[int]) -> int:
    """Number of positions where ``a`` and ``b`` differ."""

    if len(a) != len(b):
        raise HashLengthMismatchError(
            f"Hashes must be of the same length ({len(a)} != {len(b)})."
        )
    return sum(1 for x, y in zip(a, b) if x != y)


def _hamming_percentage(a: Sequence[int], b: Sequence[int], precision: int) -> Decimal:
    length = len(a)
    if length != len(b) or length == 0:
        raise HashLengthMismatchError(
            f"Hashes must be non-empty and of the same length ({len(a)} != {len(b)})."
        )
    matching = length - hamming_distance(a, b)
    ratio = _context(precision).divide(Decimal(matching) * _HUNDRED, Decimal(length))
    return round_half_up(ratio, precision)


def hamming_similarity(a: Sequence[int], b: Sequence[int], precision: int = 3) -> float:
    """Share of equal bits as a percentage in [0, 100]."""
    return float(_hamming_percentage(a, b, precision))


def color_similarity(c1: Sequence[int], c2: Sequence[int], precision: int = 0) -> Decimal:
    """1 minus the RGB euclidean distance, normalised to [0, 1].

    ``precision`` widens the working context for callers that round the
    result to many decimal places.
    """

    ctx = _context(precision)
    squared = sum((Decimal(int(p)) - Decimal(int(q))) ** 2 for p, q in zip(c1, c2))
    distance = Decimal(squared).sqrt(ctx)
    return ctx.subtract(Decimal(1), ctx.divide(distance, _MAX_RGB_SQUARED.sqrt(ctx)))


def blended_similarity(
    a: Sequence[int],
    b: Sequence[int],
    color_a: Sequence[int],
    color_b: Sequence[int],
    precision: int = 3,
) -> float:
    """Hamming similarity dampened by the average-colour similarity.

    Two images with matching hashes but very different average colours
    score low.
    """

    percentage = _hamming_percentage(a, b, precision)
    weight = color_similarity(color_a, color_b, precision)
    return float(round_half_up(_context(precision).multiply(percentage, weight), precision))
