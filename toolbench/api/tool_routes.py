"""FastAPI routes for the image, Replicate and video tools.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                          Method  Vendor
# ─────────────────────────────────────────────────────────────────────
# /api/v1/tools/image               POST    Gemini (text + image reply)
# /api/v1/tools/image-generator     POST    Gemini / SeeDream / Flux
# /api/v1/tools/chat                POST    Gemini REST
# /api/v1/tools/tinypng             POST    Tinify (multipart ``file``)
# /api/v1/tools/compress            POST    local Pillow re-encode
# /api/v1/tools/upscaler            POST    Replicate topazlabs
# /api/v1/tools/expression-editor   POST    Replicate
# /api/v1/tools/composite           POST    Replicate face swap
# /api/v1/tools/replicate/account   GET     Replicate
# /api/v1/tools/runway              POST    Runway (status / generate)
# /api/v1/tools/videogen            POST    Runway, polled to completion
# /api/v1/tools/videogen/credits    GET     Runway
# /api/v1/tools/veo                 POST    Google Veo (generate / status)
#
# Every POST here counts against the per-IP rate limit.  Calls that reach
# a paid vendor are recorded as ``provider_call`` analytics events just
# before the vendor is called, so failed calls are counted too.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from PIL import UnidentifiedImageError

from toolbench.api.dependencies import (
    ChatDep,
    ImageServiceDep,
    RateLimitDep,
    ReplicateToolsDep,
    RunwayDep,
    TinyPNGDep,
    TrackerDep,
    VeoDep,
)
from toolbench.api.schemas import (
    ChatRequest,
    CompositeRequest,
    ErrorResponse,
    ExpressionEditRequest,
    ImageGeneratorRequest,
    QuickImageRequest,
    RunwayRequest,
    UpscaleRequest,
    VeoRequest,
    VideoGenRequest,
)
from toolbench.interfaces.chat_provider import ChatMessage
from toolbench.interfaces.image_provider import ImageReference
from toolbench.providers.chat.gemini_chat_provider import DEFAULT_CHAT_MODEL
from toolbench.utils.errors import ConfigurationError, ProviderError
from toolbench.utils.logging import get_logger
from toolbench.utils.media import DEFAULT_MAX_SIZE_BYTES, compress_image, estimate_base64_size, parse_data_url

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/tools")

_ERRORS: dict[int | str, dict[str, Any]] = {400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}}


# ---------------------------------------------------------------------------
# Image tools
# ---------------------------------------------------------------------------


@router.post("/image", responses=_ERRORS, summary="Generate or edit an image with Gemini")
async def quick_image(
    body: QuickImageRequest,
    images: ImageServiceDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    reference = None
    if body.input_image is not None:
        reference = ImageReference(mime_type=body.input_image.mime_type, data=body.input_image.data)

    await track("google-gemini")
    image, text = await images.quick_edit(body.prompt, aspect_ratio=body.aspect_ratio, reference=reference)
    if image is None:
        raise HTTPException(status_code=400, detail="No image was generated. Try a different prompt.")
    return {"image": {"data": image.data, "mimeType": image.mime_type}, "text": text}


@router.post("/image-generator", responses=_ERRORS, summary="Generate an image with a chosen model")
async def image_generator(
    body: ImageGeneratorRequest,
    images: ImageServiceDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    reference = None
    if body.image:
        try:
            mime_type, data = parse_data_url(body.image)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Image must be a base64 data URL") from exc
        reference = ImageReference(mime_type=mime_type, data=data)

    # A reference sent to a model that cannot take one is refused without a vendor call.
    if reference is None or images.resolve(body.model).supports_references():
        await track(images.provider_name_for(body.model))
    return await images.generate(
        body.prompt,
        aspect_ratio=body.aspect_ratio,
        image_size=body.image_size,
        model_name=body.model,
        reference=reference,
    )


@router.post("/chat", responses=_ERRORS, summary="Chat with Gemini")
async def chat_completion(
    body: ChatRequest,
    provider: ChatDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not isinstance(body.messages, list) or not body.messages:
        raise HTTPException(status_code=400, detail="Messages array is required")

    messages: list[ChatMessage] = []
    for raw in body.messages:
        if not isinstance(raw, dict) or not isinstance(raw.get("content"), str):
            raise HTTPException(status_code=400, detail="Each message needs a role and content")
        messages.append(ChatMessage(role=str(raw.get("role", "user")), content=raw["content"]))

    await track(provider.get_provider_name())
    model = body.model or None
    reply = await provider.complete(messages, model=model)
    return {"response": reply, "model": model or DEFAULT_CHAT_MODEL}


@router.post("/tinypng", responses=_ERRORS, summary="Compress an image with TinyPNG")
async def tinypng_compress(
    compressor: TinyPNGDep,
    track: TrackerDep,
    _rate: RateLimitDep,
    file: UploadFile | None = File(default=None),
) -> dict[str, Any]:
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="No file provided")

    await track("tinypng")
    return await compressor.compress(data)


@router.post("/compress", responses=_ERRORS, summary="Re-encode an image as JPEG under a size budget")
async def compress_upload(
    _rate: RateLimitDep,
    file: UploadFile | None = File(default=None),
    max_size_bytes: int = Form(default=DEFAULT_MAX_SIZE_BYTES, gt=0),
) -> dict[str, Any]:
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    data = await file.read()
    try:
        data_url = await asyncio.to_thread(compress_image, data, max_size_bytes)
    except (UnidentifiedImageError, OSError) as exc:
        raise HTTPException(status_code=400, detail="Unsupported or corrupt image") from exc
    return {"dataUrl": data_url, "size": estimate_base64_size(data_url)}


# ---------------------------------------------------------------------------
# Replicate tools
# ---------------------------------------------------------------------------


@router.post("/upscaler", responses=_ERRORS, summary="Upscale an image")
async def upscaler(
    body: UpscaleRequest,
    tools: ReplicateToolsDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.image:
        raise HTTPException(status_code=400, detail="Image is required")

    await track("replicate")
    return await tools.upscale(
        body.image,
        scale=body.scale,
        face_enhance=body.face_enhance,
        face_enhance_strength=body.face_enhance_strength,
        model_name=body.model_name,
        output_format=body.output_format,
    )


@router.post("/expression-editor", responses=_ERRORS, summary="Edit a face's expression")
async def expression_editor(
    body: ExpressionEditRequest,
    tools: ReplicateToolsDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.image:
        raise HTTPException(status_code=400, detail="Image is required")

    await track("replicate")
    return await tools.edit_expression(body.image, **body.model_dump(exclude={"image"}))


@router.post("/composite", responses=_ERRORS, summary="Swap a face onto a body image")
async def face_composite(
    body: CompositeRequest,
    tools: ReplicateToolsDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.face_image or not body.body_image:
        raise HTTPException(status_code=400, detail="Both face and body images required")

    await track("replicate")
    return await tools.composite(body.face_image, body.body_image)


@router.get("/replicate/account", summary="Replicate account details")
async def replicate_account(tools: ReplicateToolsDep) -> dict[str, Any]:
    return {"account": await tools.get_account()}


# ---------------------------------------------------------------------------
# Video tools
# ---------------------------------------------------------------------------


@router.post("/runway", responses=_ERRORS, summary="Start or poll a Runway task")
async def runway_task(
    body: RunwayRequest,
    runway: RunwayDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if body.action == "status":
        if not body.task_id:
            raise HTTPException(status_code=400, detail="Task ID is required")
        return await runway.get_task(body.task_id)

    if body.action != "generate":
        raise HTTPException(status_code=400, detail="Invalid action")

    request_body: dict[str, Any] = {"model": body.model or "gen3a_turbo"}
    if body.duration:
        request_body["duration"] = body.duration
    if body.ratio:
        request_body["ratio"] = body.ratio

    if body.prompt_image:
        request_body["promptImage"] = body.prompt_image
        if body.prompt_text:
            request_body["promptText"] = body.prompt_text
        await track("runway")
        return await runway.create_task("image_to_video", request_body)

    if body.prompt_text:
        request_body["promptText"] = body.prompt_text
        await track("runway")
        try:
            return await runway.create_task("text_to_video", request_body)
        except ProviderError as exc:
            _logger.warning("runway_text_to_video_rejected", status=exc.status_code)
            raise HTTPException(
                status_code=400,
                detail="Text-to-video may require an image. Please upload an image to generate video.",
            ) from exc

    raise HTTPException(status_code=400, detail="Please provide an image or text prompt")


@router.post("/videogen", responses=_ERRORS, summary="Generate a video and wait for it")
async def videogen(
    body: VideoGenRequest,
    runway: RunwayDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.prompt and not body.image_url:
        raise HTTPException(status_code=400, detail="Prompt is required")

    await track("runway")
    return await runway.generate_video(
        body.prompt,
        image_url=body.image_url,
        model=body.model,
        ratio=body.ratio,
        duration=body.duration,
        end_image_url=body.end_image_url,
        include_audio=body.include_audio,
    )


@router.get("/videogen/credits", summary="Runway credit balance")
async def videogen_credits(runway: RunwayDep) -> dict[str, Any]:
    return await runway.get_credits()


@router.post("/veo", responses=_ERRORS, summary="Start or poll a Veo video generation")
async def veo_video(body: VeoRequest, veo: VeoDep, track: TrackerDep, _rate: RateLimitDep) -> dict[str, Any]:
    if not veo.is_configured():
        raise ConfigurationError(message="Google AI API key not configured", provider_name="google-veo")

    if body.action == "generate":
        if not body.prompt:
            raise HTTPException(status_code=400, detail="Prompt is required")
        await track("google-veo")
        return await veo.start(
            body.prompt,
            model=body.model,
            aspect_ratio=body.aspect_ratio,
            resolution=body.resolution,
        )

    if body.action == "status":
        if not body.operation_name:
            raise HTTPException(status_code=400, detail="Operation name is required")
        return await veo.get_status(body.operation_name)

    raise HTTPException(status_code=400, detail="Invalid action")
