"""TinyPNG (Tinify) image compression adapter."""

from __future__ import annotations

import base64
import math
from typing import Any

import httpx
import structlog

from toolbench.utils.errors import ConfigurationError, ProviderError
from toolbench.utils.media import to_data_url

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "tinypng"
_SHRINK_URL = "https://api.tinify.com/shrink"


def _percent_saved(ratio: float) -> int:
    # Halves round up: a 0.875 ratio saves 13%.
    return math.floor((1 - ratio) * 100 + 0.5)


class TinyPNGProvider:
    """Upload an image to Tinify, then download the optimised result."""

    def __init__(self, http_client: httpx.AsyncClient, api_key: str) -> None:
        self._http = http_client
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ConfigurationError(message="TinyPNG API key not configured", provider_name=_PROVIDER)
        token = base64.b64encode(f"api:{self._api_key}".encode()).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    async def compress(self, image_data: bytes) -> dict[str, Any]:
        """Compress *image_data* and describe the result.

        Returns
        -------
        dict
            ``success``, ``input{size,type}``, ``output{size,type,ratio,width,height}``,
            ``dataUrl`` and ``compressionPercent``.
        """
        headers = self._headers()
        upload = await self._http.post(_SHRINK_URL, content=image_data, headers=headers)
        if not upload.is_success:
            try:
                message = upload.json().get("message")
            except ValueError:
                message = None
            raise ProviderError(
                message=message or f"TinyPNG error: {upload.status_code}",
                provider_name=_PROVIDER,
                status_code=upload.status_code,
            )

        result = upload.json()
        source = result.get("input") or {}
        output = result.get("output") or {}
        output_url = output.get("url")
        if not output_url:
            raise ProviderError(message="No output URL from TinyPNG", provider_name=_PROVIDER, status_code=500)

        download = await self._http.get(output_url, headers=headers)
        if not download.is_success:
            raise ProviderError(
                message="Failed to download optimized image", provider_name=_PROVIDER, status_code=500
            )

        ratio = output.get("ratio")
        logger.info(
            "tinypng_compressed",
            input_size=source.get("size"),
            output_size=output.get("size"),
            ratio=ratio,
        )
        return {
            "success": True,
            "input": {"size": source.get("size"), "type": source.get("type")},
            "output": {
                "size": output.get("size"),
                "type": output.get("type"),
                "ratio": ratio,
                "width": output.get("width"),
                "height": output.get("height"),
            },
            "dataUrl": to_data_url(output.get("type") or "image/png", download.content),
            "compressionPercent": _percent_saved(ratio) if ratio else 0,
        }
