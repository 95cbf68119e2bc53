"""Comparator configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .exceptions import ConfigError
from .hashing import HashStrategy
from .io_utils import DEFAULT_TIMEOUT


class ComparisonMode(Enum):
    """How :class:`ImageComparator` builds and scores hashes.

    STANDARD: blended thumbnail, rotation support, colour-weighted score.
    LEGACY: single-pass resize + grayscale + average threshold, plain Hamming
    similarity, no rotation.
    """

    STANDARD = "standard"
    LEGACY = "legacy"

    @classmethod
    def coerce(cls, value: "ComparisonMode | str") -> "ComparisonMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ConfigError(f"Unknown mode: {value!r}. Use standard|legacy.") from exc


@dataclass(frozen=True)
class ComparatorConfig:
    """Options shared by every call made through one comparator.

    ``workers`` controls the batch helpers: 1 runs sequentially, 0 lets the
    thread pool pick, anything else is the pool size.
    """

    hash_strategy: HashStrategy = HashStrategy.AVERAGE
    mode: ComparisonMode = ComparisonMode.STANDARD
    size: int = 8
    precision: int = 3
    color_sample_size: int = 8
    workers: int = 1
    request_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash_strategy", HashStrategy.coerce(self.hash_strategy))
        object.__setattr__(self, "mode", ComparisonMode.coerce(self.mode))
        self.validate()

    @property
    def legacy(self) -> bool:
        return self.mode is ComparisonMode.LEGACY

    def validate(self) -> None:
        """Raise :class:`ConfigError` on out-of-range values."""
        if self.size < 2:
            raise ConfigError(f"size must be >= 2, got {self.size}")
        if self.precision < 0:
            raise ConfigError(f"precision must be >= 0, got {self.precision}")
        if self.color_sample_size < 1:
            raise ConfigError(f"color_sample_size must be >= 1, got {self.color_sample_size}")
        if self.workers < 0:
            raise ConfigError(f"workers must be >= 0, got {self.workers}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be > 0, got {self.request_timeout}")
