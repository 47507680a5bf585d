"""ByteDance SeeDream 4.5 on Replicate."""

from __future__ import annotations

import base64

import httpx
import structlog

from toolbench.interfaces.image_provider import GeneratedImage, IImageProvider, ImageReference
from toolbench.providers.replicate.replicate_client import ReplicateClient
from toolbench.utils.errors import GenerationFailedError, ProviderError

logger = structlog.get_logger(logger_name=__name__)

_MODEL = "bytedance/seedream-4.5"
_SUPPORTED_RATIOS = frozenset({"1:1", "16:9", "9:16", "4:3", "3:4"})


class SeedreamImageProvider(IImageProvider):
    """Start a SeeDream prediction, poll it, and download the first output."""

    def __init__(
        self,
        replicate: ReplicateClient,
        http_client: httpx.AsyncClient,
        poll_interval: float = 2.0,
        max_attempts: int = 60,
    ) -> None:
        self._replicate = replicate
        self._http = http_client
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts

    async def generate(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        image_size: str | None = None,
        reference: ImageReference | None = None,
    ) -> GeneratedImage:
        model_input = {
            "prompt": prompt,
            "aspect_ratio": aspect_ratio if aspect_ratio in _SUPPORTED_RATIOS else "1:1",
            "num_outputs": 1,
        }
        if reference is not None:
            model_input["image"] = reference.to_data_url()

        prediction = await self._replicate.create_prediction(model_input, model=_MODEL, wait=False)
        result = await self._replicate.wait_for(
            prediction, poll_interval=self._poll_interval, max_attempts=self._max_attempts
        )

        output = result.get("output")
        if isinstance(output, str):
            output = [output]
        if not output:
            raise GenerationFailedError(message="No output from Replicate", provider_name="replicate")

        response = await self._http.get(output[0])
        if not response.is_success:
            raise ProviderError(
                message=f"Failed to download SeeDream output: {response.status_code}",
                provider_name="replicate",
                status_code=response.status_code,
            )
        logger.info("seedream_image_generated", id=result.get("id"))
        return GeneratedImage(
            mime_type="image/png", data=base64.b64encode(response.content).decode("ascii")
        )

    def supports_references(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "replicate"
