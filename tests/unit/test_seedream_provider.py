"""Unit tests for the SeeDream adapter."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from toolbench.interfaces.image_provider import ImageReference
from toolbench.providers.image.seedream_provider import SeedreamImageProvider
from toolbench.providers.replicate.replicate_client import ReplicateClient
from toolbench.utils.errors import GenerationFailedError, ProviderError

_OUTPUT_URL = "https://replicate.delivery/abc/out.png"


def _replicate(output: object) -> MagicMock:
    replicate = MagicMock(spec=ReplicateClient)
    replicate.create_prediction = AsyncMock(return_value={"id": "p1", "status": "starting"})
    replicate.wait_for = AsyncMock(return_value={"id": "p1", "status": "succeeded", "output": output})
    return replicate


def _provider(replicate: MagicMock, status: int = 200) -> SeedreamImageProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == _OUTPUT_URL
        return httpx.Response(status, content=b"PNGBYTES")

    return SeedreamImageProvider(
        replicate=replicate,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        poll_interval=0,
        max_attempts=3,
    )


@pytest.mark.asyncio
async def test_generate_downloads_first_output() -> None:
    replicate = _replicate([_OUTPUT_URL])

    image = await _provider(replicate).generate("a fox", aspect_ratio="16:9")

    assert base64.b64decode(image.data) == b"PNGBYTES"
    model_input = replicate.create_prediction.call_args.args[0]
    assert model_input == {"prompt": "a fox", "aspect_ratio": "16:9", "num_outputs": 1}
    assert replicate.create_prediction.call_args.kwargs["model"] == "bytedance/seedream-4.5"
    assert replicate.wait_for.call_args.kwargs == {"poll_interval": 0, "max_attempts": 3}


@pytest.mark.asyncio
async def test_unsupported_ratio_and_reference() -> None:
    replicate = _replicate(_OUTPUT_URL)

    await _provider(replicate).generate(
        "p", aspect_ratio="21:9", reference=ImageReference(mime_type="image/png", data="AAA")
    )

    model_input = replicate.create_prediction.call_args.args[0]
    assert model_input["aspect_ratio"] == "1:1"
    assert model_input["image"] == "data:image/png;base64,AAA"


@pytest.mark.asyncio
async def test_empty_output_fails() -> None:
    with pytest.raises(GenerationFailedError, match="No output"):
        await _provider(_replicate([])).generate("p")


@pytest.mark.asyncio
async def test_download_failure() -> None:
    with pytest.raises(ProviderError) as exc_info:
        await _provider(_replicate([_OUTPUT_URL]), status=404).generate("p")

    assert exc_info.value.status_code == 404
