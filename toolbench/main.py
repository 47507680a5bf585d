"""toolbench FastAPI application entry point.

Wires together every vendor adapter, storage backend and service via
dependency injection.  Loads configuration from ``.env`` and
``config/config.yaml``, configures structured logging, and gates every
route behind the session authentication middleware.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from toolbench import __version__
from toolbench.api.audio_routes import router as audio_router
from toolbench.api.auth_middleware import SessionAuthMiddleware
from toolbench.api.auth_routes import auth_router
from toolbench.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from toolbench.api.routes import router as api_router
from toolbench.api.tool_routes import router as tool_router
from toolbench.config.loader import load_config
from toolbench.config.settings import Settings
from toolbench.providers.audio.elevenlabs_provider import ElevenLabsProvider
from toolbench.providers.cache.memory_cache import MemoryCacheProvider
from toolbench.providers.chat.gemini_chat_provider import GeminiChatProvider
from toolbench.providers.compression.tinypng_provider import TinyPNGProvider
from toolbench.providers.identity.google_oauth_provider import GoogleOAuthProvider
from toolbench.providers.image.flux_provider import FluxImageProvider
from toolbench.providers.image.gemini_image_provider import (
    DEFAULT_MODEL,
    PRO_MODEL,
    GeminiImageProvider,
)
from toolbench.providers.image.seedream_provider import SeedreamImageProvider
from toolbench.providers.replicate.replicate_client import ReplicateClient
from toolbench.providers.storage import build_blob_store, build_feedback_provider
from toolbench.providers.video.runway_provider import RunwayProvider
from toolbench.providers.video.veo_provider import VeoProvider
from toolbench.services.analytics_service import AnalyticsService
from toolbench.services.audio_service import AudioService
from toolbench.services.image_service import ImageService
from toolbench.services.replicate_tools_service import ReplicateToolsService
from toolbench.utils.logging import configure_logging, get_logger
from toolbench.utils.rate_limit import RateLimiter

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    cfg = app_config or config
    cache_cfg = cfg["cache"]

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(60.0, connect=10.0))
    cache = MemoryCacheProvider()
    blob_store = build_blob_store(app_settings)

    # -- Vendor adapters --
    replicate = ReplicateClient(
        http_client=http_client,
        api_token=app_settings.replicate_api_token,
        cache=cache,
        poll_interval=cfg["replicate"]["poll_interval"],
        max_attempts=cfg["replicate"]["max_attempts"],
        account_ttl=cache_cfg["account_ttl"],
    )
    gemini_flash = GeminiImageProvider(api_key=app_settings.google_ai_key, model=DEFAULT_MODEL)
    gemini_pro = GeminiImageProvider(api_key=app_settings.google_ai_key, model=PRO_MODEL)
    seedream = SeedreamImageProvider(
        replicate=replicate,
        http_client=http_client,
        poll_interval=cfg["seedream"]["poll_interval"],
        max_attempts=cfg["seedream"]["max_attempts"],
    )
    flux = FluxImageProvider(
        http_client=http_client,
        api_key=app_settings.bfl_api_key,
        poll_interval=cfg["bfl"]["poll_interval"],
        max_attempts=cfg["bfl"]["max_attempts"],
    )
    runway = RunwayProvider(
        http_client=http_client,
        api_key=app_settings.runway_api_key,
        cache=cache,
        poll_interval=cfg["runway"]["poll_interval"],
        max_attempts=cfg["runway"]["max_attempts"],
        credits_ttl=cache_cfg["account_ttl"],
    )
    elevenlabs = ElevenLabsProvider(
        http_client=http_client,
        api_key=app_settings.elevenlabs_api_key,
        cache=cache,
        voices_ttl=cache_cfg["voices_ttl"],
    )

    # -- Services --
    image_service = ImageService(
        providers={
            "gemini-pro": gemini_pro,
            "gemini-flash": gemini_flash,
            "seedream": seedream,
            "flux-klein": flux,
        },
        quick_provider=gemini_flash,
        max_retries=cfg["image_retry"]["max_retries"],
        base_delay=cfg["image_retry"]["base_delay"],
    )

    vendors = app_settings.get_configured_vendors()
    provider_list: list[dict[str, Any]] = [
        {"name": "google-gemini", "type": "image", "available": vendors["gemini"]},
        {"name": "google-gemini-chat", "type": "chat", "available": vendors["gemini_chat"]},
        {"name": "google-veo", "type": "video", "available": vendors["gemini"]},
        {"name": "replicate", "type": "image", "available": vendors["replicate"]},
        {"name": "bfl", "type": "image", "available": vendors["bfl"]},
        {"name": "runway", "type": "video", "available": vendors["runway"]},
        {"name": "elevenlabs", "type": "audio", "available": vendors["elevenlabs"]},
        {"name": "tinypng", "type": "compression", "available": vendors["tinypng"]},
    ]

    return {
        "settings": app_settings,
        "http_client": http_client,
        "cache": cache,
        "blob_store": blob_store,
        "rate_limiter": RateLimiter(
            limit=app_settings.rate_limit_requests,
            window_seconds=app_settings.rate_limit_window_seconds,
        ),
        "analytics_service": AnalyticsService(blob_store=blob_store),
        "feedback_provider": build_feedback_provider(app_settings, blob_store),
        "identity_provider": GoogleOAuthProvider(
            http_client=http_client,
            client_id=app_settings.google_client_id,
            client_secret=app_settings.google_client_secret,
        ),
        "image_service": image_service,
        "chat_provider": GeminiChatProvider(http_client=http_client, api_key=app_settings.gemini_api_key),
        "tinypng_provider": TinyPNGProvider(http_client=http_client, api_key=app_settings.tinypng_api_key),
        "replicate_tools_service": ReplicateToolsService(replicate=replicate),
        "runway_provider": runway,
        "veo_provider": VeoProvider(api_key=app_settings.google_ai_key),
        "audio_service": AudioService(provider=elevenlabs),
        "provider_registry": vendors,
        "provider_list": provider_list,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await application.state.feedback_provider.initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        auth_enabled=settings.auth_enabled,
        blob_backend=components["blob_store"].get_provider_name(),
        vendors=sum(components["provider_registry"].values()),
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="toolbench API",
        version=__version__,
        description=(
            "AI-powered creative tools (image, video, audio, upscaling, face "
            "composition, compression) proxied to third-party vendor APIs, "
            "with usage analytics and a feedback board."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(
        SessionAuthMiddleware,
        secret=settings.auth_secret,
        ttl_hours=settings.session_cookie_ttl_hours,
    )
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- Routes --
    application.include_router(auth_router)
    application.include_router(api_router)
    application.include_router(tool_router)
    application.include_router(audio_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "toolbench.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
