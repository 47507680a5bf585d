"""Google Veo video generation through the google-genai SDK.

Veo runs as a long-running operation.  ``start`` returns the operation name
immediately; the browser polls ``get_status`` with that name until the
operation reports ``done``.
"""

from __future__ import annotations

from typing import Any

import structlog
from google import genai
from google.genai import types

from toolbench.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "google-veo"
DEFAULT_VEO_MODEL = "veo-3.1-generate-preview"


class VeoProvider:
    """Start Veo generations and check their operations.

    Parameters
    ----------
    api_key:
        Google AI key.  Empty means not configured.
    client:
        Pre-built ``genai.Client``; built lazily from *api_key* when omitted.
    """

    def __init__(self, api_key: str, client: genai.Client | None = None) -> None:
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    message="Google AI API key not configured", provider_name=_PROVIDER
                )
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def is_configured(self) -> bool:
        return bool(self._api_key) or self._client is not None

    async def start(
        self,
        prompt: str,
        model: str | None = None,
        aspect_ratio: str | None = None,
        resolution: str | None = None,
    ) -> dict[str, Any]:
        """Kick off a generation; returns ``{success, operationName, done}``."""
        client = self._get_client()
        config = types.GenerateVideosConfig(
            number_of_videos=1,
            aspect_ratio=aspect_ratio,
            resolution=resolution,
        )
        operation = await client.aio.models.generate_videos(
            model=model or DEFAULT_VEO_MODEL,
            prompt=prompt,
            config=config,
        )
        logger.info("veo_operation_started", operation=operation.name, model=model or DEFAULT_VEO_MODEL)
        return {"success": True, "operationName": operation.name, "done": bool(operation.done)}

    async def get_status(self, operation_name: str) -> dict[str, Any]:
        """Return ``{done, videos, error?}`` for a running operation."""
        client = self._get_client()
        operation = await client.aio.operations.get(types.GenerateVideosOperation(name=operation_name))

        result: dict[str, Any] = {"done": bool(operation.done), "videos": []}
        if operation.error:
            result["error"] = operation.error.get("message") or str(operation.error)
        if operation.done and operation.response and operation.response.generated_videos:
            result["videos"] = [
                generated.video.uri
                for generated in operation.response.generated_videos
                if generated.video and generated.video.uri
            ]
        logger.debug("veo_operation_polled", operation=operation_name, done=result["done"])
        return result
