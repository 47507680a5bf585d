"""Video generation providers (Runway, Google Veo)."""

from toolbench.providers.video.runway_provider import RunwayProvider, build_videogen_request
from toolbench.providers.video.veo_provider import VeoProvider

__all__ = ["RunwayProvider", "VeoProvider", "build_videogen_request"]
