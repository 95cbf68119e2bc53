import io

import pytest
import requests
from PIL import Image

from imgcompare import ImageSourceError
from imgcompare import io_utils
from imgcompare.io_utils import is_url, iter_images, load_image, write_report_csv


def _png_bytes(img):
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class _Response:
    def __init__(self, content=b"", status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


def test_load_image_passes_rgb_through(pattern):
    assert load_image(pattern) is pattern


def test_load_image_converts_mode():
    img = load_image(Image.new("RGBA", (4, 4), (1, 2, 3, 4)))
    assert img.mode == "RGB"


def test_load_image_from_bytes(pattern):
    assert load_image(_png_bytes(pattern)).tobytes() == pattern.tobytes()


def test_load_image_from_path(pattern, pattern_path):
    assert load_image(pattern_path).tobytes() == pattern.tobytes()


def test_load_image_errors(tmp_path):
    with pytest.raises(ImageSourceError):
        load_image(tmp_path / "missing.png")
    with pytest.raises(ImageSourceError):
        load_image(tmp_path)
    with pytest.raises(ImageSourceError):
        load_image(b"definitely not an image")
    with pytest.raises(ImageSourceError):
        load_image(42)


def test_load_image_from_url(monkeypatch, pattern):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _Response(_png_bytes(pattern))

    monkeypatch.setattr(io_utils.requests, "get", fake_get)
    img = load_image("https://example.com/a.png", timeout=2.5)
    assert img.tobytes() == pattern.tobytes()
    assert calls == [("https://example.com/a.png", 2.5)]


def test_load_image_url_failures(monkeypatch):
    def refused(url, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(io_utils.requests, "get", refused)
    with pytest.raises(ImageSourceError):
        load_image("http://example.com/a.png")

    monkeypatch.setattr(io_utils.requests, "get", lambda url, timeout: _Response(status=404))
    with pytest.raises(ImageSourceError):
        load_image("http://example.com/a.png")


def test_is_url():
    assert is_url("HTTPS://example.com/x.jpg")
    assert not is_url("/tmp/x.jpg")
    assert not is_url(b"http://")


def test_iter_images(tmp_path, pattern):
    (tmp_path / "sub").mkdir()
    pattern.save(tmp_path / "b.PNG")
    pattern.save(tmp_path / "sub" / "a.jpg")
    (tmp_path / "notes.txt").write_text("x")
    found = [p.relative_to(tmp_path.resolve()).as_posix() for p in iter_images(tmp_path)]
    assert found == ["b.PNG", "sub/a.jpg"]


def test_write_report_csv(tmp_path):
    out = tmp_path / "reports" / "r.csv"
    write_report_csv([{"source": "a", "candidate": "b", "similarity": 99.5, "mode": "detect"}], out)
    assert out.read_text(encoding="utf-8").splitlines() == [
        "source,candidate,similarity,mode",
        "a,b,99.5,detect",
    ]


def test_write_empty_report_csv(tmp_path):
    out = tmp_path / "r.csv"
    write_report_csv([], out)
    assert out.read_text(encoding="utf-8").splitlines() == ["source,candidate,similarity,mode"]
