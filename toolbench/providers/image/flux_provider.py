"""Black Forest Labs Flux 2 Klein text-to-image.

BFL requests are asynchronous: the create call returns a ``polling_url``
that reports ``Pending`` until the image is ``Ready``, then carries a
signed ``result.sample`` URL to download.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Awaitable, Callable

import httpx
import structlog

from toolbench.interfaces.image_provider import GeneratedImage, IImageProvider, ImageReference
from toolbench.utils.errors import (
    ConfigurationError,
    GenerationFailedError,
    GenerationTimeoutError,
    ProviderError,
)

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "bfl"
_ENDPOINT = "https://api.bfl.ai/v1/flux-2-klein-9b"

# Width x height per aspect ratio; unknown ratios fall back to square.
FLUX_DIMENSIONS: dict[str, tuple[int, int]] = {
    "1:1": (1024, 1024),
    "16:9": (1344, 768),
    "9:16": (768, 1344),
    "4:3": (1152, 896),
    "3:4": (896, 1152),
}


class FluxImageProvider(IImageProvider):
    """Generate images with Flux 2 Klein 9B.  Reference images are not supported."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        poll_interval: float = 0.5,
        max_attempts: int = 120,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ConfigurationError(
                message="Black Forest Labs API key not configured", provider_name=_PROVIDER
            )
        return {"accept": "application/json", "x-key": self._api_key}

    async def generate(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        image_size: str | None = None,
        reference: ImageReference | None = None,
    ) -> GeneratedImage:
        headers = self._headers()
        width, height = FLUX_DIMENSIONS.get(aspect_ratio, FLUX_DIMENSIONS["1:1"])

        response = await self._http.post(
            _ENDPOINT,
            headers=headers,
            json={
                "prompt": prompt,
                "width": width,
                "height": height,
                "guidance": 3.0,
                "steps": 28,
                "output_format": "jpeg",
                "safety_tolerance": 2,
            },
        )
        if not response.is_success:
            raise ProviderError(
                message=f"BFL API error: {response.text}",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )

        created = response.json()
        polling_url = created["polling_url"]
        logger.info("flux_request_created", id=created.get("id"))

        for attempt in range(self._max_attempts):
            await self._sleep(self._poll_interval)
            poll = await self._http.get(polling_url, headers=headers)
            if not poll.is_success:
                raise ProviderError(
                    message=f"BFL polling error: {poll.text}",
                    provider_name=_PROVIDER,
                    status_code=poll.status_code,
                )
            data = poll.json()
            status = data.get("status")
            logger.debug("flux_poll", attempt=attempt + 1, status=status)

            if status == "Ready":
                sample = (data.get("result") or {}).get("sample")
                if not sample:
                    raise ProviderError(message="BFL result has no image URL", provider_name=_PROVIDER)
                image = await self._http.get(sample)
                if not image.is_success:
                    raise ProviderError(
                        message="Failed to download BFL image",
                        provider_name=_PROVIDER,
                        status_code=image.status_code,
                    )
                return GeneratedImage(
                    mime_type="image/jpeg", data=base64.b64encode(image.content).decode("ascii")
                )
            if status in ("Error", "Failed"):
                raise GenerationFailedError(
                    message=data.get("error") or "Generation failed", provider_name=_PROVIDER
                )

        raise GenerationTimeoutError(
            message="Generation timed out - request took too long to complete",
            provider_name=_PROVIDER,
        )

    def supports_references(self) -> bool:
        return False

    def get_provider_name(self) -> str:
        return _PROVIDER
