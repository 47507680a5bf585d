"""Gemini image generation via the google-genai SDK.

Serves both the quick image tool (text and image modalities, returns any
commentary the model adds) and the image generator page (image modality
only).  The SDK client is created lazily so a missing ``GOOGLE_AI_KEY`` only
fails the requests that need it.
"""

from __future__ import annotations

import base64

import structlog
from google import genai
from google.genai import types

from toolbench.interfaces.image_provider import GeneratedImage, IImageProvider, ImageReference
from toolbench.utils.errors import ConfigurationError, GenerationFailedError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "google-gemini"

DEFAULT_MODEL = "gemini-2.5-flash-image"
PRO_MODEL = "gemini-3-pro-image-preview"


class GeminiImageProvider(IImageProvider):
    """Generate or edit images with a Gemini image model.

    Parameters
    ----------
    api_key:
        Google AI key.  Empty means not configured.
    model:
        Gemini model identifier.
    client:
        Pre-built ``genai.Client``.  Built from *api_key* on first use when
        omitted.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        client: genai.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    message="Google AI API key not configured", provider_name=_PROVIDER
                )
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate_parts(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        image_size: str | None = None,
        reference: ImageReference | None = None,
        include_text: bool = False,
    ) -> tuple[GeneratedImage | None, str]:
        """Call the model and return ``(image or None, concatenated text)``.

        Raises ``GenerationFailedError`` when the response was stopped by a
        safety filter.
        """
        client = self._get_client()

        parts = [types.Part.from_text(text=prompt)]
        if reference is not None:
            parts.append(
                types.Part.from_bytes(
                    data=base64.b64decode(reference.data), mime_type=reference.mime_type
                )
            )

        # Only the pro model accepts an output resolution.
        image_config = types.ImageConfig(aspect_ratio=aspect_ratio)
        if image_size and self._model == PRO_MODEL:
            image_config = types.ImageConfig(aspect_ratio=aspect_ratio, image_size=image_size)

        if include_text:
            config = types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
                image_config=image_config,
            )
        else:
            config = types.GenerateContentConfig(
                temperature=0.9,
                top_p=0.95,
                top_k=40,
                max_output_tokens=8192,
                response_modalities=["IMAGE"],
                image_config=image_config,
            )

        response = await client.aio.models.generate_content(
            model=self._model,
            contents=[types.Content(role="user", parts=parts)],
            config=config,
        )

        candidate = response.candidates[0] if response.candidates else None
        content_parts = candidate.content.parts if candidate and candidate.content else None
        if not content_parts:
            finish_reason = getattr(candidate, "finish_reason", None) if candidate else None
            if getattr(finish_reason, "name", finish_reason) == "SAFETY":
                raise GenerationFailedError(
                    message="Image generation blocked due to safety settings.",
                    provider_name=_PROVIDER,
                )
            return None, ""

        image: GeneratedImage | None = None
        text = ""
        for part in content_parts:
            if part.text:
                text += part.text
            elif part.inline_data and part.inline_data.data:
                image = GeneratedImage(
                    mime_type=part.inline_data.mime_type or "image/png",
                    data=base64.b64encode(part.inline_data.data).decode("ascii"),
                )

        logger.info("gemini_image_generated", model=self._model, has_image=image is not None)
        if image is not None and text:
            image = GeneratedImage(mime_type=image.mime_type, data=image.data, text=text)
        return image, text

    async def generate(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        image_size: str | None = None,
        reference: ImageReference | None = None,
    ) -> GeneratedImage:
        image, _ = await self.generate_parts(prompt, aspect_ratio, image_size, reference)
        if image is None:
            raise GenerationFailedError(
                message="No image was generated. Please try again.", provider_name=_PROVIDER
            )
        return image

    def supports_references(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return _PROVIDER
