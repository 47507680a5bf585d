"""Unit tests for the Black Forest Labs Flux adapter."""

from __future__ import annotations

import base64
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from toolbench.providers.image.flux_provider import FLUX_DIMENSIONS, FluxImageProvider
from toolbench.utils.errors import (
    ConfigurationError,
    GenerationFailedError,
    GenerationTimeoutError,
    ProviderError,
)

_POLL_URL = "https://api.bfl.ai/v1/get_result?id=req-1"
_SAMPLE_URL = "https://delivery.bfl.ai/sample.jpeg"


def _provider(handler, api_key: str = "bfl_key", **kwargs) -> tuple[FluxImageProvider, AsyncMock]:
    sleep = AsyncMock()
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FluxImageProvider(http, api_key, sleep=sleep, **kwargs), sleep


def _created() -> httpx.Response:
    return httpx.Response(200, json={"id": "req-1", "polling_url": _POLL_URL})


@pytest.mark.asyncio
async def test_generate_polls_then_downloads() -> None:
    seen: list[httpx.Request] = []
    polls = iter([{"status": "Pending"}, {"status": "Ready", "result": {"sample": _SAMPLE_URL}}])

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST":
            return _created()
        if str(request.url) == _SAMPLE_URL:
            return httpx.Response(200, content=b"jpeg-bytes")
        return httpx.Response(200, json=next(polls))

    provider, sleep = _provider(handler, poll_interval=0.5)
    image = await provider.generate("a neon koi", aspect_ratio="16:9")

    assert image.mime_type == "image/jpeg"
    assert base64.b64decode(image.data) == b"jpeg-bytes"
    body = json.loads(seen[0].content)
    assert (body["width"], body["height"]) == FLUX_DIMENSIONS["16:9"]
    assert seen[0].headers["x-key"] == "bfl_key"
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_unknown_ratio_is_square() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST":
            return _created()
        if str(request.url) == _SAMPLE_URL:
            return httpx.Response(200, content=b"x")
        return httpx.Response(200, json={"status": "Ready", "result": {"sample": _SAMPLE_URL}})

    provider, _ = _provider(handler)
    await provider.generate("cat", aspect_ratio="21:9")

    body = json.loads(seen[0].content)
    assert (body["width"], body["height"]) == (1024, 1024)


@pytest.mark.asyncio
async def test_create_rejected() -> None:
    provider, _ = _provider(lambda request: httpx.Response(402, text="insufficient credits"))
    with pytest.raises(ProviderError, match="BFL API error: insufficient credits"):
        await provider.generate("cat")


@pytest.mark.asyncio
async def test_generation_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return _created()
        return httpx.Response(200, json={"status": "Error", "error": "Content moderated"})

    provider, _ = _provider(handler)
    with pytest.raises(GenerationFailedError, match="Content moderated"):
        await provider.generate("cat")


@pytest.mark.asyncio
async def test_times_out() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _created() if request.method == "POST" else httpx.Response(200, json={"status": "Pending"})

    provider, sleep = _provider(handler, max_attempts=3)
    with pytest.raises(GenerationTimeoutError):
        await provider.generate("cat")
    assert sleep.await_count == 3


def test_capabilities() -> None:
    provider, _ = _provider(lambda request: httpx.Response(200))
    assert provider.supports_references() is False
    assert provider.get_provider_name() == "bfl"


@pytest.mark.asyncio
async def test_missing_key() -> None:
    provider, _ = _provider(lambda request: httpx.Response(200), api_key="")
    with pytest.raises(ConfigurationError):
        await provider.generate("cat")


@pytest.mark.asyncio
async def test_poll_http_error_is_a_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _created() if request.method == "POST" else httpx.Response(404, text="Task not found")

    provider, _ = _provider(handler)
    with pytest.raises(ProviderError, match="BFL polling error: Task not found") as exc_info:
        await provider.generate("cat")
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_ready_without_sample_is_a_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _created() if request.method == "POST" else httpx.Response(200, json={"status": "Ready", "result": {}})

    provider, _ = _provider(handler)
    with pytest.raises(ProviderError, match="no image URL"):
        await provider.generate("cat")
