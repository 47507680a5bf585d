"""Runway video generation API adapter.

# ─── TASK LIFECYCLE ──────────────────────────────────────────────────
#
#   POST /image_to_video | /text_to_video   → {"id": task_id}
#   GET  /tasks/{id}                        → {"status": PENDING | RUNNING |
#                                              SUCCEEDED | FAILED, ...}
#
# Every request carries ``X-Runway-Version: 2024-11-06``.  Veo models
# hosted on Runway take ``promptImage`` as a list of positioned frames;
# Gen-4 models take a single image URL.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import httpx
import structlog

from toolbench.interfaces.cache_provider import ICacheProvider
from toolbench.utils.errors import (
    ConfigurationError,
    GenerationFailedError,
    GenerationTimeoutError,
    ProviderError,
)

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "runway"
_API_BASE = "https://api.dev.runwayml.com/v1"
_API_VERSION = "2024-11-06"
_CREDITS_CACHE_KEY = "runway:credits"

VEO_MODELS = frozenset({"veo3", "veo3.1"})
_VEO_SEED = 1115473149
_GEN4_SEED = 4291861214


def build_videogen_request(
    prompt: str,
    image_url: str = "",
    model: str = "gen4_turbo",
    ratio: str = "1280:720",
    duration: int = 5,
    end_image_url: str = "",
    include_audio: bool = False,
) -> tuple[str, dict[str, Any]]:
    """Return ``(endpoint, body)`` for a video generation request."""
    endpoint = "image_to_video" if image_url else "text_to_video"
    is_veo = model in VEO_MODELS

    if is_veo:
        vendor_model = "veo3.1"
    elif model == "gen4_turbo" and endpoint == "text_to_video":
        vendor_model = "gen4.5"
    else:
        vendor_model = model

    body: dict[str, Any] = {"model": vendor_model, "promptText": prompt, "ratio": ratio}

    if is_veo:
        if endpoint == "image_to_video":
            frames = [{"uri": image_url, "position": "first"}]
            if end_image_url:
                frames.append({"uri": end_image_url, "position": "last"})
            body["promptImage"] = frames
        body["audio"] = include_audio
        body["duration"] = duration
        body["seed"] = _VEO_SEED
    else:
        if image_url:
            body["promptImage"] = image_url
        body["duration"] = duration
        body["seed"] = _GEN4_SEED

    return endpoint, body


class RunwayProvider:
    """Async client for Runway's developer API.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_key:
        Runway API key.  Calls raise ``ConfigurationError`` when empty.
    cache:
        Cache for the organisation credit balance.
    poll_interval:
        Seconds between task status polls.
    max_attempts:
        Polls before ``GenerationTimeoutError``.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        cache: ICacheProvider | None = None,
        poll_interval: float = 2.0,
        max_attempts: int = 120,
        credits_ttl: int = 3600,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._cache = cache
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._credits_ttl = credits_ttl
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ConfigurationError(message="Runway API key not configured", provider_name=_PROVIDER)
        return {"Authorization": f"Bearer {self._api_key}", "X-Runway-Version": _API_VERSION}

    async def get_task(self, task_id: str) -> dict[str, Any]:
        response = await self._http.get(f"{_API_BASE}/tasks/{task_id}", headers=self._headers())
        if not response.is_success:
            logger.warning("runway_status_failed", task_id=task_id, status=response.status_code)
            raise ProviderError(
                message=f"Failed to get task status: {response.status_code}",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )
        return response.json()

    async def create_task(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST *body* to ``/{endpoint}`` and return the created task."""
        response = await self._http.post(f"{_API_BASE}/{endpoint}", json=body, headers=self._headers())
        if not response.is_success:
            logger.error(
                "runway_generation_rejected",
                endpoint=endpoint,
                status=response.status_code,
                body=response.text[:500],
            )
            raise ProviderError(
                message=f"Failed to start generation: {response.status_code} - {response.text}",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )
        task = response.json()
        logger.info("runway_task_created", endpoint=endpoint, task_id=task.get("id"), model=body.get("model"))
        return task

    async def wait_for_task(self, task_id: str) -> Any:
        """Poll ``/tasks/{id}`` until it succeeds; return its ``output``.

        Non-2xx polls are skipped rather than treated as failures.
        """
        headers = self._headers()
        for attempt in range(self._max_attempts):
            await self._sleep(self._poll_interval)
            response = await self._http.get(f"{_API_BASE}/tasks/{task_id}", headers=headers)
            if not response.is_success:
                continue

            data = response.json()
            status = data.get("status")
            logger.debug("runway_task_polled", task_id=task_id, attempt=attempt + 1, status=status)

            if status == "SUCCEEDED":
                output = data.get("output")
                if output:
                    return output
                break
            if status == "FAILED":
                reason = data.get("failureCode") or data.get("failureReason") or "Unknown error"
                raise GenerationFailedError(
                    message=f"Video generation failed: {reason}", provider_name=_PROVIDER
                )

        raise GenerationTimeoutError(
            message="Video generation timed out or returned no valid output.",
            provider_name=_PROVIDER,
        )

    async def generate_video(
        self,
        prompt: str,
        image_url: str = "",
        model: str = "gen4_turbo",
        ratio: str = "1280:720",
        duration: int = 5,
        end_image_url: str = "",
        include_audio: bool = False,
    ) -> dict[str, Any]:
        """Start a generation and wait for it.  Returns ``{"output": [...]}``."""
        endpoint, body = build_videogen_request(
            prompt, image_url, model, ratio, duration, end_image_url, include_audio
        )
        task = await self.create_task(endpoint, body)
        output = await self.wait_for_task(task["id"])
        return {"output": output}

    async def get_credits(self) -> dict[str, Any]:
        """Return ``{"creditBalance", "tier"}`` for the organisation, cached."""
        if self._cache is not None:
            cached = await self._cache.get(_CREDITS_CACHE_KEY)
            if cached is not None:
                return cached

        response = await self._http.get(f"{_API_BASE}/organization", headers=self._headers())
        if not response.is_success:
            raise ProviderError(
                message="Failed to fetch credits",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )
        data = response.json()
        credits = {"creditBalance": data.get("creditBalance") or 0, "tier": data.get("tier") or {}}
        if self._cache is not None:
            await self._cache.set(_CREDITS_CACHE_KEY, credits, ttl=self._credits_ttl)
        return credits
