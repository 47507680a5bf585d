"""Unit tests for ImageService routing, retry and error mapping."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from toolbench.interfaces.image_provider import GeneratedImage, IImageProvider, ImageReference
from toolbench.providers.image.gemini_image_provider import GeminiImageProvider
from toolbench.services.image_service import ImageService, friendly_error
from toolbench.utils.errors import GenerationFailedError, ProviderError

_IMAGE = GeneratedImage(mime_type="image/png", data="iVBORw0")
_REFERENCE = ImageReference(mime_type="image/jpeg", data="/9j/4AAQ")


def _provider(name: str, supports_references: bool = True, **generate_kwargs) -> MagicMock:
    provider = MagicMock(spec=IImageProvider)
    provider.generate = AsyncMock(**({"return_value": _IMAGE} | generate_kwargs))
    provider.supports_references.return_value = supports_references
    provider.get_provider_name.return_value = name
    return provider


def _service(**providers: MagicMock) -> tuple[ImageService, AsyncMock, MagicMock]:
    flash = providers.pop("flash", None) or _provider("google-gemini")
    quick = MagicMock(spec=GeminiImageProvider)
    sleep = AsyncMock()
    service = ImageService(
        providers={"gemini-flash": flash, **providers},
        quick_provider=quick,
        max_retries=3,
        base_delay=3.0,
        sleep=sleep,
    )
    return service, sleep, quick


class TestFriendlyError:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("429 quota exceeded", "Too many requests. Please wait a moment and try again."),
            ("rate limit hit", "Too many requests. Please wait a moment and try again."),
            ("The model is overloaded", "Service is currently overloaded. Retrying automatically..."),
            ("503 Service Unavailable", "Service is currently overloaded. Retrying automatically..."),
            ("upstream timeout", "Request timed out. Please try again."),
            ("No image generated", "No image generated"),
            ("", "Failed to generate image"),
        ],
    )
    def test_mapping(self, raw: str, expected: str) -> None:
        assert friendly_error(raw) == expected

    def test_generated_is_not_a_rate_limit(self) -> None:
        assert friendly_error("Nothing was generated") == "Nothing was generated"


class TestRouting:
    def test_unknown_model_falls_back_to_flash(self) -> None:
        seedream = _provider("replicate")
        service, _, _ = _service(seedream=seedream)
        assert service.provider_name_for("seedream") == "replicate"
        assert service.provider_name_for("dall-e") == "google-gemini"

    @pytest.mark.asyncio
    async def test_generate_success(self) -> None:
        flux = _provider("bfl", supports_references=False)
        service, sleep, _ = _service(**{"flux-klein": flux})

        result = await service.generate("koi", aspect_ratio="16:9", image_size="1K", model_name="flux-klein")

        assert result == {"success": True, "output": "data:image/png;base64,iVBORw0"}
        flux.generate.assert_awaited_once_with("koi", aspect_ratio="16:9", image_size="1K", reference=None)
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reference_rejected_for_flux(self) -> None:
        flux = _provider("bfl", supports_references=False)
        service, _, _ = _service(**{"flux-klein": flux})

        result = await service.generate("koi", model_name="flux-klein", reference=_REFERENCE)

        assert result["success"] is False
        assert "Flux Klein does not support image references" in result["error"]
        flux.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reference_passed_through(self) -> None:
        flash = _provider("google-gemini")
        service, _, _ = _service(flash=flash)
        await service.generate("restyle", reference=_REFERENCE)
        assert flash.generate.await_args.kwargs["reference"] == _REFERENCE


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_with_backoff_then_succeeds(self) -> None:
        flash = _provider(
            "google-gemini",
            side_effect=[ProviderError("503 overloaded"), ProviderError("503 overloaded"), _IMAGE],
        )
        service, sleep, _ = _service(flash=flash)

        result = await service.generate("koi")

        assert result["success"] is True
        assert flash.generate.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [3.0, 6.0]

    @pytest.mark.asyncio
    async def test_exhausted_retries_map_error(self) -> None:
        flash = _provider("google-gemini", side_effect=ProviderError("quota exhausted", status_code=429))
        service, _, _ = _service(flash=flash)

        result = await service.generate("koi")

        assert result == {"success": False, "error": "Too many requests. Please wait a moment and try again."}
        assert flash.generate.await_count == 3

    @pytest.mark.asyncio
    async def test_safety_block_is_not_retried(self) -> None:
        flash = _provider("google-gemini", side_effect=GenerationFailedError("Blocked for safety reasons"))
        service, sleep, _ = _service(flash=flash)

        result = await service.generate("koi")

        assert result == {"success": False, "error": "Blocked for safety reasons"}
        flash.generate.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error(self) -> None:
        flash = _provider("google-gemini", side_effect=RuntimeError("connection timeout"))
        service, _, _ = _service(flash=flash)

        result = await service.generate("koi")

        assert result == {"success": False, "error": "Request timed out. Please try again."}


class TestQuickEdit:
    @pytest.mark.asyncio
    async def test_returns_image_and_text(self) -> None:
        service, _, quick = _service()
        quick.generate_parts = AsyncMock(return_value=(_IMAGE, "Here is your cat"))

        image, text = await service.quick_edit("a cat", aspect_ratio="1:1", reference=_REFERENCE)

        assert image == _IMAGE
        assert text == "Here is your cat"
        quick.generate_parts.assert_awaited_once_with(
            "a cat", aspect_ratio="1:1", reference=_REFERENCE, include_text=True
        )

    @pytest.mark.asyncio
    async def test_text_only_reply(self) -> None:
        service, _, quick = _service()
        quick.generate_parts = AsyncMock(return_value=(None, "I can't draw that"))
        image, text = await service.quick_edit("something")
        assert image is None
        assert text == "I can't draw that"

    @pytest.mark.asyncio
    async def test_safety_block_reads_as_no_image(self) -> None:
        service, _, quick = _service()
        quick.generate_parts = AsyncMock(
            side_effect=GenerationFailedError("Image generation blocked due to safety settings.")
        )

        assert await service.quick_edit("something") == (None, "")
