"""Exception types raised by imgcompare."""

from __future__ import annotations


class ImageComparatorError(Exception):
    """Base class for every error raised by this package."""


class ImageSourceError(ImageComparatorError):
    """An input could not be resolved into a pixel source.

    Raised for missing files, failed downloads, non-image content and
    unsupported input types. The original exception is chained.
    """


class HashLengthMismatchError(ImageComparatorError, ValueError):
    """Two hashes of different length were compared."""


class ConfigError(ImageComparatorError, ValueError):
    """An invalid option (rotation, size, precision, strategy, workers)."""
