"""Audio providers."""

from toolbench.providers.audio.elevenlabs_provider import ElevenLabsProvider

__all__ = ["ElevenLabsProvider"]
