"""Data-URL helpers and JPEG re-encoding for uploaded images.

Browser clients exchange images as ``data:<mime>;base64,<payload>`` strings.
These helpers convert between that form and raw bytes, estimate decoded
size without decoding, and shrink oversized uploads before they are sent
to a vendor.
"""

from __future__ import annotations

import base64
import io
import math

from PIL import Image

DEFAULT_MAX_SIZE_BYTES = 3 * 1024 * 1024


def parse_data_url(data_url: str) -> tuple[str, str]:
    """Split a data URL into ``(mime_type, base64_payload)``.

    Raises
    ------
    ValueError
        If *data_url* is not a base64 data URL.
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Invalid data URL")
    header, payload = data_url.split(",", 1)
    meta = header[len("data:"):]
    if not meta.endswith(";base64"):
        raise ValueError("Data URL is not base64 encoded")
    mime_type = meta[: -len(";base64")] or "application/octet-stream"
    return mime_type, payload


def to_data_url(mime_type: str, data: bytes) -> str:
    """Encode raw bytes as a base64 data URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def estimate_base64_size(data_url: str) -> int:
    """Approximate decoded byte size of a data URL's payload."""
    payload = data_url.split(",", 1)[1] if "," in data_url else data_url
    return math.ceil(len(payload) * 0.75)


def compress_image(
    image_data: bytes,
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
    max_quality: float = 0.9,
) -> str:
    """Re-encode *image_data* as JPEG until it fits under *max_size_bytes*.

    Quality starts at *max_quality* and drops in 0.1 steps.  At quality 0.1
    the result is returned whatever its size.

    Returns
    -------
    str
        A ``data:image/jpeg;base64,...`` URL.
    """
    with Image.open(io.BytesIO(image_data)) as img:
        # JPEG has no alpha channel.
        rgb = img.convert("RGB") if img.mode not in ("RGB", "L") else img.copy()

    # Integer tenths avoid float drift when stepping down.
    quality_tenths = max(1, min(10, round(max_quality * 10)))
    encoded = b""
    while True:
        buf = io.BytesIO()
        rgb.save(buf, format="JPEG", quality=quality_tenths * 10)
        encoded = buf.getvalue()
        if len(encoded) <= max_size_bytes or quality_tenths <= 1:
            break
        quality_tenths -= 1

    return to_data_url("image/jpeg", encoded)
