"""Pydantic request/response schemas for the toolbench API.

# ─── HOW SCHEMAS WORK ─────────────────────────────────────────────────
#
# Browser pages post camelCase JSON (``aspectRatio``, ``imageUrl``), so
# most request models use ``alias_generator=to_camel`` with
# ``populate_by_name`` and accept either spelling.  The Replicate tool
# pages post the vendor's snake_case field names and use plain models.
#
# Required-looking fields default to empty values on purpose: the
# routes check them and answer 400 with the message the pages display
# (e.g. "Prompt is required") instead of FastAPI's generic 422.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ProvidersResponse(BaseModel):
    """List of vendor providers and their availability."""

    providers: list[dict[str, Any]]


# ---------------------------------------------------------------------------
# Analytics / feedback
# ---------------------------------------------------------------------------


class TrackEventRequest(BaseModel):
    path: str = ""
    type: str = "page_view"
    provider: str | None = None


class CreateFeedbackRequest(BaseModel):
    model_config = _CAMEL

    type: str = ""
    title: str = ""
    description: str = ""
    tool: str = ""
    submitted_by: str = ""


class UpdateFeedbackRequest(BaseModel):
    model_config = _CAMEL

    id: str = ""
    status: str | None = None
    admin_note: str | None = None


# ---------------------------------------------------------------------------
# Image tools
# ---------------------------------------------------------------------------


class InlineImage(BaseModel):
    """Base64 image bytes plus MIME type, as posted by the quick image tool."""

    model_config = _CAMEL

    mime_type: str
    data: str


class QuickImageRequest(BaseModel):
    model_config = _CAMEL

    prompt: str = ""
    aspect_ratio: str = "1:1"
    input_image: InlineImage | None = None


class ImageGeneratorRequest(BaseModel):
    """Image generator page request.  ``image`` is an optional data URL."""

    model_config = _CAMEL

    prompt: str = ""
    aspect_ratio: str = "1:1"
    image_size: str = "2K"
    model: str = "gemini-flash"
    image: str | None = None


class ChatRequest(BaseModel):
    # Left untyped so a non-list answers 400 rather than 422.
    messages: Any = None
    model: str | None = None


# ---------------------------------------------------------------------------
# Replicate tools
# ---------------------------------------------------------------------------


class UpscaleRequest(BaseModel):
    # Allow the vendor field name "model_name".
    model_config = ConfigDict(protected_namespaces=())

    image: str = ""
    scale: int = 2
    face_enhance: bool = False
    face_enhance_strength: float = 0.5
    model_name: str = "Standard V2"
    output_format: str = "png"


class ExpressionEditRequest(BaseModel):
    image: str = ""
    rotate_pitch: float | None = None
    rotate_yaw: float | None = None
    rotate_roll: float | None = None
    blink: float | None = None
    eyebrow: float | None = None
    wink: float | None = None
    pupil_x: float | None = None
    pupil_y: float | None = None
    aaa: float | None = None
    eee: float | None = None
    woo: float | None = None
    smile: float | None = None
    src_ratio: float | None = None
    sample_ratio: float | None = None
    crop_factor: float | None = None
    output_format: str | None = None
    output_quality: int | None = None


class CompositeRequest(BaseModel):
    model_config = _CAMEL

    face_image: str = ""
    body_image: str = ""


# ---------------------------------------------------------------------------
# Video tools
# ---------------------------------------------------------------------------


class RunwayRequest(BaseModel):
    model_config = _CAMEL

    action: str = ""
    task_id: str | None = None
    prompt_image: str | None = None
    prompt_text: str | None = None
    model: str = "gen3a_turbo"
    duration: int | None = None
    ratio: str | None = None


class VideoGenRequest(BaseModel):
    model_config = _CAMEL

    prompt: str = ""
    image_url: str = ""
    model: str = "gen4_turbo"
    ratio: str = "1280:720"
    duration: int = 5
    end_image_url: str = ""
    include_audio: bool = False


class VeoRequest(BaseModel):
    model_config = _CAMEL

    action: str = ""
    prompt: str = ""
    model: str | None = None
    aspect_ratio: str | None = None
    resolution: str | None = None
    operation_name: str | None = None


# ---------------------------------------------------------------------------
# Audio tools
# ---------------------------------------------------------------------------


class TTSRequest(BaseModel):
    model_config = _CAMEL

    text: str = ""
    voice_id: str = ""


class SoundEffectRequest(BaseModel):
    model_config = _CAMEL

    text: str = ""
    duration_seconds: float = Field(default=1.0, gt=0)
    prompt_influence: float = Field(default=0.3, ge=0.0, le=1.0)
    loop: bool = False


class MusicRequest(BaseModel):
    model_config = _CAMEL

    prompt: str = ""
    duration_seconds: float = 10


class VoiceDesignRequest(BaseModel):
    model_config = _CAMEL

    gender: str = "female"
    accent: str = "american"
    age: str = "middle_aged"
    accent_strength: float = 1.0
    text: str = ""


class CreateDesignedVoiceRequest(BaseModel):
    model_config = _CAMEL

    voice_name: str = ""
    voice_description: str = ""
    generated_voice_id: str = ""


class DialogueSpeaker(BaseModel):
    model_config = _CAMEL

    id: str
    name: str = ""
    voice_id: str = ""


class DialogueLine(BaseModel):
    model_config = _CAMEL

    speaker_id: str
    text: str = ""


class DialogueRequest(BaseModel):
    speakers: list[DialogueSpeaker] = Field(default_factory=list)
    lines: list[DialogueLine] = Field(default_factory=list)
