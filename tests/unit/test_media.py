"""Unit tests for data-URL helpers and JPEG re-encoding."""

from __future__ import annotations

import base64
import io
import os

import pytest
from PIL import Image

from toolbench.utils.media import compress_image, estimate_base64_size, parse_data_url, to_data_url


def _png_bytes(size: tuple[int, int] = (64, 64), mode: str = "RGBA") -> bytes:
    img = Image.new(mode, size, (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _noisy_png(size: tuple[int, int] = (256, 256)) -> bytes:
    img = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class TestDataUrls:
    def test_parse(self) -> None:
        assert parse_data_url("data:image/png;base64,AAAA") == ("image/png", "AAAA")

    def test_parse_rejects_non_data_url(self) -> None:
        with pytest.raises(ValueError):
            parse_data_url("https://example.com/a.png")

    def test_parse_rejects_non_base64(self) -> None:
        with pytest.raises(ValueError):
            parse_data_url("data:text/plain,hello")

    def test_to_data_url(self) -> None:
        assert to_data_url("audio/mpeg", b"abc") == "data:audio/mpeg;base64,YWJj"

    def test_estimate_size(self) -> None:
        payload = base64.b64encode(b"x" * 300).decode()
        assert estimate_base64_size(f"data:image/png;base64,{payload}") == 300


class TestCompressImage:
    def test_returns_jpeg_data_url(self) -> None:
        data_url = compress_image(_png_bytes())
        mime_type, payload = parse_data_url(data_url)
        assert mime_type == "image/jpeg"
        with Image.open(io.BytesIO(base64.b64decode(payload))) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"

    def test_lowers_quality_to_fit(self) -> None:
        source = _noisy_png()
        generous = compress_image(source, max_size_bytes=10 * 1024 * 1024)
        tight = compress_image(source, max_size_bytes=estimate_base64_size(generous) // 2)
        assert estimate_base64_size(tight) < estimate_base64_size(generous)

    def test_gives_up_at_lowest_quality(self) -> None:
        data_url = compress_image(_noisy_png(), max_size_bytes=1)
        assert data_url.startswith("data:image/jpeg;base64,")

    def test_rejects_garbage(self) -> None:
        with pytest.raises(OSError):
            compress_image(b"not an image")
