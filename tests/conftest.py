"""Shared fixtures: small synthetic images, no binary files committed."""

from __future__ import annotations

from pathlib import Path

import pytest
import structlog
from PIL import Image


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo global structlog configuration made by a test (e.g. configure_logging)."""
    yield
    structlog.reset_defaults()


def make_pattern(width: int, height: int) -> Image.Image:
    """Deterministic, busy RGB image."""
    img = Image.new("RGB", (width, height))
    img.putdata(
        [
            ((x * 37 + y * 11) % 256, (x * x + y * 5) % 256, (x * y * 3) % 256)
            for y in range(height)
            for x in range(width)
        ]
    )
    return img


def make_solid(color, size=(32, 32)) -> Image.Image:
    return Image.new("RGB", size, color)


@pytest.fixture
def pattern() -> Image.Image:
    return make_pattern(64, 48)


@pytest.fixture
def tile() -> Image.Image:
    """8x8 image: thumbnailing at size 8 leaves it untouched."""
    return make_pattern(8, 8)


@pytest.fixture
def black() -> Image.Image:
    return make_solid((0, 0, 0))


@pytest.fixture
def white() -> Image.Image:
    return make_solid((255, 255, 255))


@pytest.fixture
def pattern_path(tmp_path: Path, pattern: Image.Image) -> Path:
    path = tmp_path / "pattern.png"
    pattern.save(path)
    return path
