"""Abstract base class for text-to-image providers.

The image generator page lets the user pick a model by a short UI name
(``gemini-pro``, ``gemini-flash``, ``seedream``, ``flux-klein``).  Each name
maps to one implementation of this interface; the image service routes
requests and applies retry and error mapping uniformly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """An input image for image-to-image generation.

    Attributes
    ----------
    mime_type:
        MIME type of the image, e.g. ``image/png``.
    data:
        Base64-encoded image bytes (no data-URL prefix).
    """

    mime_type: str
    data: str

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class GeneratedImage:
    """A generated image plus any text the model returned alongside it."""

    mime_type: str
    data: str
    text: str = ""

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class IImageProvider(ABC):
    """Contract for services that generate an image from a prompt."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        image_size: str | None = None,
        reference: ImageReference | None = None,
    ) -> GeneratedImage:
        """Generate one image.

        Parameters
        ----------
        prompt:
            Text description of the image.
        aspect_ratio:
            Ratio string such as ``"16:9"``.
        image_size:
            Output resolution hint (``"1K"``, ``"2K"``, ``"4K"``).  Providers
            that do not support it ignore it.
        reference:
            Optional input image for editing or style reference.

        Raises
        ------
        toolbench.utils.errors.GenerationFailedError
            If the vendor refused or produced no image.
        toolbench.utils.errors.ProviderError
            If the vendor answered with a non-2xx status.
        """

    @abstractmethod
    def supports_references(self) -> bool:
        """Return ``True`` if :meth:`generate` accepts a reference image."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the analytics provider name (e.g. ``"replicate"``)."""
