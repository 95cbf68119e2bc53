"""I/O helpers for imgcompare.

This module handles:
- resolving inputs (paths, URLs, raw bytes, PIL images, pixel sources) into
  an RGB ``PIL.Image.Image``
- scanning folders for image files
- report generation (CSV and optional XLSX)

The hashing and scoring modules never open files themselves; everything goes
through :func:`load_image`.
"""

from __future__ import annotations

import csv
import io
import os
from pathlib import Path
from typing import Any, Iterator, List, Protocol, Sequence, Tuple, Union, runtime_checkable

import requests
import structlog
from PIL import Image

from .exceptions import ImageSourceError

logger = structlog.get_logger(__name__)


# Common extensions in real-world photo pipelines. Add more if you need.
DEFAULT_EXTS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".bmp",
    ".gif",
    ".tiff",
    ".tif",
    ".webp",
    ".jfif",
}

DEFAULT_TIMEOUT = 10.0
_URL_PREFIXES = ("http://", "https://")
_REPORT_HEADERS = ["source", "candidate", "similarity", "mode"]


@runtime_checkable
class PixelSource(Protocol):
    """Anything that can hand out RGB triples by coordinate."""

    width: int
    height: int

    def get_rgb(self, x: int, y: int) -> Tuple[int, int, int]:
        ...


ImageInput = Union[Image.Image, PixelSource, str, Path, bytes, bytearray]


def is_url(value: Any) -> bool:
    """True if *value* is an http(s) URL string."""
    return isinstance(value, str) and value.lower().startswith(_URL_PREFIXES)


def _from_pixel_source(source: PixelSource) -> Image.Image:
    width, height = int(source.width), int(source.height)
    if width < 1 or height < 1:
        raise ImageSourceError(f"Pixel source has invalid size {width}x{height}")
    img = Image.new("RGB", (width, height))
    img.putdata([tuple(source.get_rgb(x, y)) for y in range(height) for x in range(width)])
    return img


def _decode(stream: Any, label: str) -> Image.Image:
    try:
        with Image.open(stream) as img:
            return img.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("image_source_failed", source=label, error=str(exc))
        raise ImageSourceError(f"Could not create an image from {label}") from exc


def _fetch(url: str, timeout: float) -> bytes:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("image_download_failed", url=url, error=str(exc))
        raise ImageSourceError(f"Could not download image: {url}") from exc
    return response.content


def load_image(image: ImageInput, timeout: float = DEFAULT_TIMEOUT) -> Image.Image:
    """Resolve *image* into an RGB ``PIL.Image.Image``.

    Parameters
    ----------
    image:
        A PIL image (returned as-is when already RGB), an object following
        :class:`PixelSource`, raw encoded bytes, a filesystem path, or an
        http(s) URL.
    timeout:
        Seconds to wait for a URL download.

    Raises
    ------
    ImageSourceError
        If the input can't be read or decoded. Nothing is retried.
    """

    if isinstance(image, Image.Image):
        return image if image.mode == "RGB" else image.convert("RGB")
    if isinstance(image, (bytes, bytearray)):
        return _decode(io.BytesIO(bytes(image)), "<bytes>")
    if is_url(image):
        return _decode(io.BytesIO(_fetch(image, timeout)), image)
    if isinstance(image, (str, Path)):
        path = Path(image).expanduser()
        if not path.is_file():
            logger.warning("image_source_failed", source=str(path), error="not a file")
            raise ImageSourceError(f"Image file not found: {path}")
        return _decode(path, str(path))
    if isinstance(image, PixelSource):
        return _from_pixel_source(image)
    raise ImageSourceError(f"Unsupported image input: {type(image).__name__}")


def iter_images(root: Path, exts: Sequence[str] = tuple(DEFAULT_EXTS)) -> Iterator[Path]:
    """Recursively yield image file paths under *root*, sorted per folder.

    Extensions are compared case-insensitively.
    """

    root = root.expanduser().resolve()
    exts_lc = {e.lower() for e in exts}
    for folder, dirs, files in os.walk(root):
        dirs.sort()
        for name in sorted(files):
            if Path(name).suffix.lower() in exts_lc:
                yield Path(folder) / name


def write_report_csv(rows: List[dict], out_csv: Path) -> None:
    """Write the similarity report as CSV."""

    out_csv.parent.mkdir(parents=True, exist_ok=True)
    headers = list(rows[0].keys()) if rows else _REPORT_HEADERS
    with out_csv.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=headers)
        writer.writeheader()
        if rows:
            writer.writerows(rows)


def write_report_xlsx(rows: List[dict], out_xlsx: Path) -> bool:
    """Write the similarity report as XLSX.

    Returns False if openpyxl isn't installed.
    """

    try:
        from openpyxl import Workbook  # type: ignore
    except ImportError:
        return False

    out_xlsx.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    ws = wb.active
    ws.title = "similarity"

    headers = list(rows[0].keys()) if rows else _REPORT_HEADERS
    ws.append(headers)
    for r in rows:
        ws.append([r.get(h, "") for h in headers])

    wb.save(out_xlsx)
    return True
