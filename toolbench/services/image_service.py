"""Image generation service.

Routes a request from the image generator page to the provider behind the
chosen UI model name, wraps the call in retry with exponential backoff,
and turns failures into messages the page can show as-is.

# ─── MODEL ROUTING ─────────────────────────────────────────────────────
#
#   UI name        Provider                  Vendor model
#   ───────────────────────────────────────────────────────────────────
#   gemini-pro     GeminiImageProvider       gemini-3-pro-image-preview
#   gemini-flash   GeminiImageProvider       gemini-2.5-flash-image
#   seedream       SeedreamImageProvider     bytedance/seedream-4.5
#   flux-klein     FluxImageProvider         flux-2-klein-9b
#
# Unknown names fall back to gemini-flash.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import re
from typing import Any, Awaitable, Callable

import structlog

from toolbench.interfaces.image_provider import GeneratedImage, IImageProvider, ImageReference
from toolbench.providers.image.gemini_image_provider import GeminiImageProvider
from toolbench.utils.errors import GenerationFailedError, ToolbenchError
from toolbench.utils.logging import get_logger
from toolbench.utils.retry import retry_with_backoff

DEFAULT_MODEL_NAME = "gemini-flash"

_FLUX_REFERENCE_ERROR = (
    "Flux Klein does not support image references. "
    "Please use Gemini or SeeDream for image-to-image."
)

# Word-bounded so "generated" does not read as a rate-limit failure.
_RATE_PATTERN = re.compile(r"\b(quota|rate)\b")


def friendly_error(message: str) -> str:
    """Map a raw vendor failure message to one the UI can show."""
    if _RATE_PATTERN.search(message):
        return "Too many requests. Please wait a moment and try again."
    if "overloaded" in message or "503" in message:
        return "Service is currently overloaded. Retrying automatically..."
    if "timeout" in message:
        return "Request timed out. Please try again."
    return message or "Failed to generate image"


class ImageService:
    """Pick a provider by UI model name and generate with retries.

    Parameters
    ----------
    providers:
        Map of UI model name to provider.
    quick_provider:
        Gemini provider used by the quick image tool, which also returns
        the model's text commentary.
    max_retries, base_delay:
        Retry budget for each generation.
    """

    def __init__(
        self,
        providers: dict[str, IImageProvider],
        quick_provider: GeminiImageProvider,
        max_retries: int = 3,
        base_delay: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._providers = providers
        self._quick_provider = quick_provider
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def resolve(self, model_name: str) -> IImageProvider:
        return self._providers.get(model_name) or self._providers[DEFAULT_MODEL_NAME]

    def provider_name_for(self, model_name: str) -> str:
        return self.resolve(model_name).get_provider_name()

    async def generate(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        image_size: str | None = "2K",
        model_name: str = DEFAULT_MODEL_NAME,
        reference: ImageReference | None = None,
    ) -> dict[str, Any]:
        """Generate an image; returns ``{success, output}`` or ``{success, error}``."""
        provider = self.resolve(model_name)
        if reference is not None and not provider.supports_references():
            return {"success": False, "error": _FLUX_REFERENCE_ERROR}

        async def _attempt() -> GeneratedImage:
            return await provider.generate(
                prompt, aspect_ratio=aspect_ratio, image_size=image_size, reference=reference
            )

        retry_kwargs: dict[str, Any] = {"max_retries": self._max_retries, "base_delay": self._base_delay}
        if self._sleep is not None:
            retry_kwargs["sleep"] = self._sleep

        try:
            image = await retry_with_backoff(_attempt, **retry_kwargs)
        except ToolbenchError as exc:
            self._logger.error("image_generation_failed", model=model_name, error=str(exc))
            return {"success": False, "error": friendly_error(exc.message)}
        except Exception as exc:
            self._logger.error("image_generation_failed", model=model_name, error=str(exc))
            return {"success": False, "error": friendly_error(str(exc))}

        self._logger.info("image_generation_complete", model=model_name, provider=provider.get_provider_name())
        return {"success": True, "output": image.to_data_url()}

    async def quick_edit(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        reference: ImageReference | None = None,
    ) -> tuple[GeneratedImage | None, str]:
        """Single Gemini call returning the image (if any) and its text.

        A safety block comes back as ``(None, "")`` so the caller answers
        it like any other reply without an image.
        """
        try:
            image, text = await self._quick_provider.generate_parts(
                prompt, aspect_ratio=aspect_ratio, reference=reference, include_text=True
            )
        except GenerationFailedError as exc:
            self._logger.warning("quick_edit_blocked", error=exc.message)
            return None, ""
        if image is None:
            self._logger.warning("quick_edit_no_image", text_length=len(text))
        return image, text
