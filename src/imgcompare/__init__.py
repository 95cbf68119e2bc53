"""imgcompare package.

Perceptual image hashing (average and gradient hashes over a blended
thumbnail) and similarity scoring with right-angle rotation emulation and
average-colour weighting.
"""

from .comparator import ImageComparator
from .config import ComparatorConfig, ComparisonMode
from .exceptions import (
    ConfigError,
    HashLengthMismatchError,
    ImageComparatorError,
    ImageSourceError,
)
from .hashing import HashStrategy
from .rotation import RotationAngle

__all__ = [
    "ComparatorConfig",
    "ComparisonMode",
    "ConfigError",
    "HashLengthMismatchError",
    "HashStrategy",
    "ImageComparator",
    "ImageComparatorError",
    "ImageSourceError",
    "RotationAngle",
]
__version__ = "0.1.0"
