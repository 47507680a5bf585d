"""FastAPI dependencies shared by the API routers.

# ─── DEPENDENCY INJECTION PATTERN ──────────────────────────────────────
#
# Every service is built once in main.py's ``_build_all`` and stored on
# ``app.state``.  Routes declare what they need as type-annotated params:
#
#   1. A helper reads the object off ``request.app.state``.
#   2. An Annotated alias binds the helper:  XDep = Annotated[X, Depends(helper)]
#   3. Route signature:  async def route(svc: XDep) -> ...
#
# Tests swap implementations by setting ``app.state.<name>`` to a mock.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from toolbench.api.auth_middleware import current_user
from toolbench.interfaces.feedback_provider import IFeedbackProvider
from toolbench.models.analytics import AnalyticsEvent, EventType
from toolbench.providers.compression.tinypng_provider import TinyPNGProvider
from toolbench.providers.chat.gemini_chat_provider import GeminiChatProvider
from toolbench.providers.video.runway_provider import RunwayProvider
from toolbench.providers.video.veo_provider import VeoProvider
from toolbench.services.analytics_service import AnalyticsService
from toolbench.services.audio_service import AudioService
from toolbench.services.image_service import ImageService
from toolbench.services.replicate_tools_service import ReplicateToolsService
from toolbench.utils.errors import RateLimitError
from toolbench.utils.rate_limit import RateLimitResult, get_client_ip


def _get_analytics_service(request: Request) -> AnalyticsService:
    return request.app.state.analytics_service


def _get_feedback_provider(request: Request) -> IFeedbackProvider:
    return request.app.state.feedback_provider


def _get_image_service(request: Request) -> ImageService:
    return request.app.state.image_service


def _get_chat_provider(request: Request) -> GeminiChatProvider:
    return request.app.state.chat_provider


def _get_tinypng(request: Request) -> TinyPNGProvider:
    return request.app.state.tinypng_provider


def _get_replicate_tools(request: Request) -> ReplicateToolsService:
    return request.app.state.replicate_tools_service


def _get_runway(request: Request) -> RunwayProvider:
    return request.app.state.runway_provider


def _get_veo(request: Request) -> VeoProvider:
    return request.app.state.veo_provider


def _get_audio_service(request: Request) -> AudioService:
    return request.app.state.audio_service


AnalyticsDep = Annotated[AnalyticsService, Depends(_get_analytics_service)]
FeedbackDep = Annotated[IFeedbackProvider, Depends(_get_feedback_provider)]
ImageServiceDep = Annotated[ImageService, Depends(_get_image_service)]
ChatDep = Annotated[GeminiChatProvider, Depends(_get_chat_provider)]
TinyPNGDep = Annotated[TinyPNGProvider, Depends(_get_tinypng)]
ReplicateToolsDep = Annotated[ReplicateToolsService, Depends(_get_replicate_tools)]
RunwayDep = Annotated[RunwayProvider, Depends(_get_runway)]
VeoDep = Annotated[VeoProvider, Depends(_get_veo)]
AudioDep = Annotated[AudioService, Depends(_get_audio_service)]


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


def enforce_rate_limit(request: Request) -> RateLimitResult:
    """Count this request against the caller's IP; raise 429 when over budget."""
    result = request.app.state.rate_limiter.check(get_client_ip(request))
    if not result.success:
        raise RateLimitError(
            message="Too many requests. Please try again later.",
            limit=result.limit,
            reset_at=result.reset_at,
        )
    return result


RateLimitDep = Annotated[RateLimitResult, Depends(enforce_rate_limit)]


# ---------------------------------------------------------------------------
# Provider-call tracking
# ---------------------------------------------------------------------------


class ProviderCallTracker:
    """Record a ``provider_call`` analytics event.

    Routes await it just before calling the vendor, so a call that later
    fails or times out is still counted.  ``track_event`` never raises.
    """

    def __init__(self, request: Request, analytics: AnalyticsDep) -> None:
        self._request = request
        self._analytics = analytics

    async def __call__(self, provider: str) -> None:
        event = AnalyticsEvent(
            type=EventType.PROVIDER_CALL,
            path=self._request.url.path,
            user=current_user(self._request, default="unknown"),
            provider=provider,
        )
        await self._analytics.track_event(event)


TrackerDep = Annotated[ProviderCallTracker, Depends(ProviderCallTracker)]
