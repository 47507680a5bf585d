"""Image generation providers (Gemini, SeeDream on Replicate, BFL Flux)."""

from toolbench.providers.image.flux_provider import FluxImageProvider
from toolbench.providers.image.gemini_image_provider import GeminiImageProvider
from toolbench.providers.image.seedream_provider import SeedreamImageProvider

__all__ = ["FluxImageProvider", "GeminiImageProvider", "SeedreamImageProvider"]
