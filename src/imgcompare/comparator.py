"""Comparison entry points.

:class:`ImageComparator` wires the pieces together:

    input -> load_image -> thumbnail.sample (+ rotation) -> HashStrategy.encode
    two hashes (+ average colours) -> similarity -> percentage

Every image argument accepts whatever :func:`imgcompare.io_utils.load_image`
accepts. Each input is decoded once per call, and the source image once per
batch.
"""

from __future__ import annotations

import concurrent.futures
from typing import Callable, Dict, Hashable, Iterable, Mapping, Optional, Sequence, Union

import structlog
from PIL import Image

from . import similarity
from .config import ComparatorConfig
from .exceptions import ConfigError
from .hashing import Hash, HashStrategy, average_hash, hash_to_string, string_to_hash
from .io_utils import ImageInput, load_image
from .rotation import RotationAngle
from .similarity import Color
from .squaring import square_image
from .thumbnail import average_color, sample

logger = structlog.get_logger(__name__)

Rotation = Union[RotationAngle, int]
Loader = Callable[..., Image.Image]
Progress = Callable[[Hashable], None]


class ImageComparator:
    """Hash images and score their similarity as a percentage."""

    def __init__(self, config: Optional[ComparatorConfig] = None, loader: Loader = load_image):
        self.config = config or ComparatorConfig()
        self._strategy = self.config.hash_strategy
        self._loader = loader

    @property
    def hash_strategy(self) -> HashStrategy:
        return self._strategy

    @hash_strategy.setter
    def hash_strategy(self, value: Union[HashStrategy, str]) -> None:
        self._strategy = HashStrategy.coerce(value)

    def load(self, image: ImageInput) -> Image.Image:
        """Resolve an input into an RGB image (raises ImageSourceError)."""
        return self._loader(image, timeout=self.config.request_timeout)

    def _precision(self, precision: Optional[int]) -> int:
        precision = self.config.precision if precision is None else int(precision)
        if precision < 0:
            raise ConfigError(f"precision must be >= 0, got {precision}")
        return precision

    def _size(self, size: Optional[int]) -> int:
        size = self.config.size if size is None else int(size)
        if size < 2:
            raise ConfigError(f"size must be >= 2, got {size}")
        return size

    def hash_image(
        self,
        image: ImageInput,
        rotation: Rotation = RotationAngle.D0,
        size: Optional[int] = None,
        strategy: Optional[Union[HashStrategy, str]] = None,
    ) -> Hash:
        """Build a perceptual hash of ``size * size`` bits.

        The hash is computed as if the image were rotated clockwise by
        ``rotation`` (0, 90, 180 or 270). ``strategy`` overrides the
        comparator's current strategy for this call only.
        """

        img = self.load(image)
        strategy = self._strategy if strategy is None else HashStrategy.coerce(strategy)
        return self._hash(img, RotationAngle.coerce(rotation), self._size(size), strategy)

    def _hash(self, img: Image.Image, rotation: RotationAngle, size: int, strategy: HashStrategy) -> Hash:
        bits = strategy.encode(sample(img, size, rotation))
        logger.debug(
            "image_hashed",
            strategy=strategy.value,
            rotation=int(rotation),
            size=size,
            hash=hash_to_string(bits),
        )
        return bits

    def fast_hash_image(self, image: ImageInput, size: Optional[int] = None) -> Hash:
        """Single-pass average hash: resize, grayscale, threshold.

        No blend step and no rotation. Used by the legacy comparison mode.
        """

        return self._fast_hash(self.load(image), self._size(size))

    @staticmethod
    def _fast_hash(img: Image.Image, size: int) -> Hash:
        if size < 2:
            raise ConfigError(f"size must be >= 2, got {size}")
        small = img.convert("L").resize((size, size), resample=Image.Resampling.BILINEAR)
        px = small.load()
        return average_hash([px[x, y] for y in range(size) for x in range(size)])

    def average_color(self, image: ImageInput, size: Optional[int] = None) -> Color:
        """Average RGB colour over a reduced sampling grid."""
        size = self.config.color_sample_size if size is None else size
        return average_color(self.load(image), size)

    @staticmethod
    def convert_hash_to_string(bits: Sequence[int]) -> str:
        """Return the hash as a string of '0'/'1' characters."""
        return hash_to_string(bits)

    def compare_hash_strings(self, hash_a: str, hash_b: str, precision: Optional[int] = None) -> float:
        """Hamming similarity of two hash strings (no rotation, no colour term)."""
        return similarity.hamming_similarity(
            string_to_hash(hash_a), string_to_hash(hash_b), self._precision(precision)
        )

    def compare(
        self,
        image_a: ImageInput,
        image_b: ImageInput,
        rotation: Rotation = RotationAngle.D0,
        precision: Optional[int] = None,
    ) -> float:
        """Hash both images and return their similarity as a percentage.

        ``image_a`` is never rotated; ``image_b`` is hashed as if rotated by
        ``rotation``.
        """

        return self._compare_images(
            self.load(image_a),
            self.load(image_b),
            RotationAngle.coerce(rotation),
            self._precision(precision),
        )

    def detect(self, image_a: ImageInput, image_b: ImageInput, precision: Optional[int] = None) -> float:
        """Best :meth:`compare` score over the four right-angle rotations."""

        return self._detect_images(self.load(image_a), self.load(image_b), self._precision(precision))

    def compare_array(
        self,
        image_a: ImageInput,
        images: Mapping[Hashable, ImageInput],
        rotation: Rotation = RotationAngle.D0,
        precision: Optional[int] = None,
        progress: Optional[Progress] = None,
    ) -> Dict[Hashable, float]:
        """:meth:`compare` the source against every value of ``images``.

        The result keeps the keys (and their order) of ``images``.
        ``progress`` is called with each key once its score is known.
        """

        source = self.load(image_a)
        rotation = RotationAngle.coerce(rotation)
        precision = self._precision(precision)
        return self._map_images(
            images, lambda img: self._compare_images(source, img, rotation, precision), progress
        )

    def detect_array(
        self,
        image_a: ImageInput,
        images: Mapping[Hashable, ImageInput],
        precision: Optional[int] = None,
        progress: Optional[Progress] = None,
    ) -> Dict[Hashable, float]:
        """:meth:`detect` the source against every value of ``images``."""

        source = self.load(image_a)
        precision = self._precision(precision)
        return self._map_images(
            images, lambda img: self._detect_images(source, img, precision), progress
        )

    def square_image(self, image: ImageInput) -> Image.Image:
        """Pad the image onto a white square canvas."""
        return square_image(self.load(image))

    def _compare_images(
        self,
        img_a: Image.Image,
        img_b: Image.Image,
        rotation: RotationAngle,
        precision: int,
    ) -> float:
        size = self.config.size

        if self.config.legacy:
            if rotation is not RotationAngle.D0:
                raise ConfigError("Legacy mode does not support rotation.")
            score = similarity.hamming_similarity(
                self._fast_hash(img_a, size), self._fast_hash(img_b, size), precision
            )
        else:
            hash_a = self._hash(img_a, RotationAngle.D0, size, self._strategy)
            hash_b = self._hash(img_b, rotation, size, self._strategy)
            color_size = self.config.color_sample_size
            score = similarity.blended_similarity(
                hash_a,
                hash_b,
                average_color(img_a, color_size),
                average_color(img_b, color_size),
                precision,
            )

        logger.debug("comparison_done", rotation=int(rotation), precision=precision, similarity=score)
        return score

    def _detect_images(self, img_a: Image.Image, img_b: Image.Image, precision: int) -> float:
        if self.config.legacy:
            raise ConfigError("Legacy mode does not support rotation detection.")
        return max(self._compare_images(img_a, img_b, angle, precision) for angle in RotationAngle)

    def _map_images(
        self,
        images: Mapping[Hashable, ImageInput],
        score: Callable[[Image.Image], float],
        progress: Optional[Progress] = None,
    ) -> Dict[Hashable, float]:
        keys = list(images)

        def run(key: Hashable) -> float:
            return score(self.load(images[key]))

        def collect(values: Iterable[float]) -> Dict[Hashable, float]:
            results: Dict[Hashable, float] = {}
            for key, value in zip(keys, values):
                results[key] = value
                if progress is not None:
                    progress(key)
            return results

        workers = self.config.workers
        if workers == 1 or len(keys) <= 1:
            return collect(run(key) for key in keys)

        max_workers = None if workers == 0 else workers
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as ex:
            return collect(ex.map(run, keys))
