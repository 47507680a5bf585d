"""Replicate predictions API client.

Used by the upscaler, expression editor, face composite and SeeDream image
generation.  Predictions are started with ``Prefer: wait`` so quick models
finish within the create call; slower ones are polled until they settle.
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

_API_BASE = "https://api.replicate.com/v1"
_PROVIDER = "replicate"
_ACCOUNT_CACHE_KEY = "replicate:account"

_IN_FLIGHT = frozenset({"starting", "processing"})
_TERMINAL_FAILURES = frozenset({"failed", "canceled"})


class ReplicateClient:
    """Thin async wrapper over Replicate's REST API.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_token:
        Replicate API token.  Calls raise ``ConfigurationError`` when empty.
    cache:
        Cache for account details.  Optional.
    poll_interval:
        Seconds between status polls.
    max_attempts:
        Polls before giving up with ``GenerationTimeoutError``.
    account_ttl:
        Seconds to cache ``/account`` responses.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_token: str,
        cache: ICacheProvider | None = None,
        poll_interval: float = 1.0,
        max_attempts: int = 60,
        account_ttl: int = 3600,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._token = api_token
        self._cache = cache
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._account_ttl = account_ttl
        self._sleep = sleep

    def is_configured(self) -> bool:
        return bool(self._token)

    def _headers(self) -> dict[str, str]:
        if not self._token:
            raise ConfigurationError(
                message="Replicate API token not configured", provider_name=_PROVIDER
            )
        return {"Authorization": f"Bearer {self._token}"}

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    async def create_prediction(
        self,
        input: dict[str, Any],
        version: str | None = None,
        model: str | None = None,
        wait: bool = True,
    ) -> dict[str, Any]:
        """Start a prediction by *version* hash or ``owner/name`` *model*."""
        headers = self._headers()
        if wait:
            headers["Prefer"] = "wait"

        if version:
            url = f"{_API_BASE}/predictions"
            payload: dict[str, Any] = {"version": version, "input": input}
        elif model:
            url = f"{_API_BASE}/models/{model}/predictions"
            payload = {"input": input}
        else:
            raise ValueError("Either version or model is required")

        response = await self._http.post(url, json=payload, headers=headers)
        if not response.is_success:
            detail = _error_detail(response)
            logger.error("replicate_prediction_rejected", status=response.status_code, detail=detail)
            raise ProviderError(
                message=detail or "Failed to start prediction",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )

        prediction = response.json()
        logger.info(
            "replicate_prediction_created",
            id=prediction.get("id"),
            status=prediction.get("status"),
            model=model or version,
        )
        return prediction

    async def get_prediction(self, prediction_id: str) -> dict[str, Any]:
        response = await self._http.get(
            f"{_API_BASE}/predictions/{prediction_id}", headers=self._headers()
        )
        if not response.is_success:
            raise ProviderError(
                message=_error_detail(response) or "Failed to get prediction",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )
        return response.json()

    async def wait_for(
        self,
        prediction: dict[str, Any],
        poll_interval: float | None = None,
        max_attempts: int | None = None,
    ) -> dict[str, Any]:
        """Poll until *prediction* succeeds, fails or runs out of attempts."""
        interval = self._poll_interval if poll_interval is None else poll_interval
        attempts = self._max_attempts if max_attempts is None else max_attempts
        prediction_id = prediction["id"]

        for attempt in range(attempts):
            current = await self.get_prediction(prediction_id)
            status = current.get("status")
            if status == "succeeded":
                logger.info("replicate_prediction_succeeded", id=prediction_id, attempts=attempt + 1)
                return current
            if status in _TERMINAL_FAILURES:
                raise GenerationFailedError(
                    message=current.get("error") or "Prediction failed", provider_name=_PROVIDER
                )
            await self._sleep(interval)

        raise GenerationTimeoutError(message="Prediction timed out", provider_name=_PROVIDER)

    async def run(
        self,
        input: dict[str, Any],
        version: str | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        """Create a prediction and wait for it when it is still in flight.

        A prediction in any status other than succeeded, in-flight or
        failed is returned as-is so the caller can relay its status.
        """
        prediction = await self.create_prediction(input, version=version, model=model)
        status = prediction.get("status")

        if status == "succeeded":
            return prediction
        if status in _IN_FLIGHT:
            return await self.wait_for(prediction)
        if status == "failed":
            raise GenerationFailedError(
                message=prediction.get("error") or "Prediction failed", provider_name=_PROVIDER
            )
        return prediction

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    async def get_account(self) -> dict[str, Any] | None:
        """Return ``/account`` details, cached.  ``None`` when no token is set."""
        if not self._token:
            return None

        if self._cache is not None:
            cached = await self._cache.get(_ACCOUNT_CACHE_KEY)
            if cached is not None:
                return cached

        try:
            response = await self._http.get(f"{_API_BASE}/account", headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("replicate_account_failed", error=str(exc))
            return None

        if not response.is_success:
            if response.status_code == 401:
                return {"error": "Invalid Token"}
            return {"error": "Unknown Status"}

        account = response.json()
        if self._cache is not None:
            await self._cache.set(_ACCOUNT_CACHE_KEY, account, ttl=self._account_ttl)
        return account


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("detail") or body.get("error")
    return None
