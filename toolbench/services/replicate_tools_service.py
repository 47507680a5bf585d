"""Replicate-backed image tools: upscaler, expression editor and face composite."""

from __future__ import annotations

from typing import Any

import structlog

from toolbench.providers.replicate.replicate_client import ReplicateClient
from toolbench.utils.errors import GenerationFailedError
from toolbench.utils.logging import get_logger

UPSCALER_MODEL = "topazlabs/image-upscale"
EXPRESSION_EDITOR_VERSION = "bf913bc90e1c44ba288ba3942a538693b72e8cc7df576f3beebe56adc0a92b86"
FACE_SWAP_VERSION = "278a81e7ebb22db98bcba54de985d22cc1abeead2754eb1f2af717247be69b34"

# Every expression-editor control and its neutral value.
EXPRESSION_DEFAULTS: dict[str, Any] = {
    "rotate_pitch": 0,
    "rotate_yaw": 0,
    "rotate_roll": 0,
    "blink": 0,
    "eyebrow": 0,
    "wink": 0,
    "pupil_x": 0,
    "pupil_y": 0,
    "aaa": 0,
    "eee": 0,
    "woo": 0,
    "smile": 0,
    "src_ratio": 1,
    "sample_ratio": 1,
    "crop_factor": 1.7,
    "output_format": "webp",
    "output_quality": 95,
}


class ReplicateToolsService:
    """Build model inputs and run them through a shared :class:`ReplicateClient`."""

    def __init__(self, replicate: ReplicateClient) -> None:
        self._replicate = replicate
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def upscale(
        self,
        image: str,
        scale: int = 2,
        face_enhance: bool = False,
        face_enhance_strength: float = 0.5,
        model_name: str = "Standard V2",
        output_format: str = "png",
    ) -> dict[str, Any]:
        prediction = await self._replicate.run(
            {
                "image": image,
                "upscale_factor": f"{scale}x",
                "enhance_model": model_name,
                "face_enhancement": face_enhance,
                "face_enhancement_strength": face_enhance_strength,
                "output_format": output_format,
            },
            model=UPSCALER_MODEL,
        )
        result = {"success": True, "output": prediction.get("output"), "id": prediction.get("id")}
        if prediction.get("status") != "succeeded":
            result["status"] = prediction.get("status")
        self._logger.info("upscale_complete", id=prediction.get("id"), scale=scale)
        return result

    async def edit_expression(self, image: str, **controls: Any) -> dict[str, Any]:
        """Run the expression editor; unknown control names are ignored."""
        model_input: dict[str, Any] = {"image": image}
        for name, default in EXPRESSION_DEFAULTS.items():
            value = controls.get(name)
            model_input[name] = default if value is None else value

        prediction = await self._replicate.run(model_input, version=EXPRESSION_EDITOR_VERSION)
        result = {"success": True, "output": prediction.get("output"), "id": prediction.get("id")}
        if prediction.get("status") != "succeeded":
            result["status"] = prediction.get("status")
        return result

    async def composite(self, face_image: str, body_image: str) -> dict[str, Any]:
        """Swap the face from *face_image* onto *body_image*."""
        prediction = await self._replicate.run(
            {"input_image": body_image, "swap_image": face_image}, version=FACE_SWAP_VERSION
        )
        output = prediction.get("output")
        if not output:
            raise GenerationFailedError(message="Face swap returned no output", provider_name="replicate")
        self._logger.info("composite_complete", id=prediction.get("id"))
        return {"success": True, "image": output}

    async def get_account(self) -> dict[str, Any] | None:
        return await self._replicate.get_account()
