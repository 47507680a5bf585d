"""Unit tests for the Gemini image adapter with a fake SDK client."""

from __future__ import annotations

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from toolbench.interfaces.image_provider import ImageReference
from toolbench.providers.image.gemini_image_provider import DEFAULT_MODEL, PRO_MODEL, GeminiImageProvider
from toolbench.utils.errors import ConfigurationError, GenerationFailedError


def _part(text: str | None = None, data: bytes | None = None, mime_type: str = "image/png") -> SimpleNamespace:
    inline = SimpleNamespace(data=data, mime_type=mime_type) if data is not None else None
    return SimpleNamespace(text=text, inline_data=inline)


def _response(*parts: SimpleNamespace, finish_reason: object = None) -> SimpleNamespace:
    content = SimpleNamespace(parts=list(parts)) if parts else None
    return SimpleNamespace(candidates=[SimpleNamespace(content=content, finish_reason=finish_reason)])


def _client(response: SimpleNamespace) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response)
    return client


@pytest.mark.asyncio
async def test_text_and_image_parts() -> None:
    client = _client(_response(_part(text="A red fox."), _part(data=b"PNGDATA")))
    provider = GeminiImageProvider(api_key="", client=client)

    image, text = await provider.generate_parts("a fox", include_text=True)

    assert text == "A red fox."
    assert image is not None
    assert base64.b64decode(image.data) == b"PNGDATA"
    assert image.text == "A red fox."
    config = client.aio.models.generate_content.call_args.kwargs["config"]
    assert config.response_modalities == ["TEXT", "IMAGE"]


@pytest.mark.asyncio
async def test_reference_image_is_sent_as_bytes() -> None:
    client = _client(_response(_part(data=b"OUT")))
    provider = GeminiImageProvider(api_key="", client=client)
    reference = ImageReference(mime_type="image/jpeg", data=base64.b64encode(b"IN").decode())

    await provider.generate("edit this", reference=reference)

    contents = client.aio.models.generate_content.call_args.kwargs["contents"]
    parts = contents[0].parts
    assert parts[0].text == "edit this"
    assert parts[1].inline_data.data == b"IN"
    assert parts[1].inline_data.mime_type == "image/jpeg"


@pytest.mark.asyncio
async def test_image_size_only_for_pro_model() -> None:
    pro_client = _client(_response(_part(data=b"X")))
    flash_client = _client(_response(_part(data=b"X")))

    await GeminiImageProvider(api_key="", model=PRO_MODEL, client=pro_client).generate("p", "16:9", "4K")
    await GeminiImageProvider(api_key="", model=DEFAULT_MODEL, client=flash_client).generate("p", "16:9", "4K")

    pro_config = pro_client.aio.models.generate_content.call_args.kwargs["config"]
    flash_config = flash_client.aio.models.generate_content.call_args.kwargs["config"]
    assert pro_config.image_config.image_size == "4K"
    assert pro_config.image_config.aspect_ratio == "16:9"
    assert flash_config.image_config.image_size is None


@pytest.mark.asyncio
async def test_safety_block_raises() -> None:
    client = _client(_response(finish_reason=SimpleNamespace(name="SAFETY")))

    with pytest.raises(GenerationFailedError, match="safety"):
        await GeminiImageProvider(api_key="", client=client).generate("p")


@pytest.mark.asyncio
async def test_text_only_reply_fails_generate() -> None:
    client = _client(_response(_part(text="I can't draw that.")))

    with pytest.raises(GenerationFailedError, match="No image was generated"):
        await GeminiImageProvider(api_key="", client=client).generate("p")


@pytest.mark.asyncio
async def test_missing_key_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        await GeminiImageProvider(api_key="").generate("p")
