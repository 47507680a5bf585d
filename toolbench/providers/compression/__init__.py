"""Image compression providers."""

from toolbench.providers.compression.tinypng_provider import TinyPNGProvider

__all__ = ["TinyPNGProvider"]
