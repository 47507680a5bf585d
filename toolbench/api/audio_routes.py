"""FastAPI routes for the ElevenLabs audio tools.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/tools/audio/tts                    POST    Text to speech
# /api/v1/tools/audio/sfx                    POST    Sound effect
# /api/v1/tools/audio/music                  POST    Music clip (1-30 s)
# /api/v1/tools/audio/transcribe             POST    Speech to text (multipart)
# /api/v1/tools/audio/voices                 GET     List voices (cached)
# /api/v1/tools/audio/voices                 POST    Clone a voice (multipart)
# /api/v1/tools/audio/voices/{voice_id}      DELETE  Delete a cloned voice
# /api/v1/tools/audio/voice-design           POST    Preview designed voices
# /api/v1/tools/audio/voice-design/create    POST    Save a designed voice
# /api/v1/tools/audio/dialogue               POST    Multi-speaker script
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from toolbench.api.dependencies import AudioDep, RateLimitDep, TrackerDep
from toolbench.api.schemas import (
    CreateDesignedVoiceRequest,
    DialogueRequest,
    ErrorResponse,
    MusicRequest,
    SoundEffectRequest,
    TTSRequest,
    VoiceDesignRequest,
)
from toolbench.services.audio_service import AudioValidationError

router = APIRouter(prefix="/api/v1/tools/audio")

_ERRORS: dict[int | str, dict[str, Any]] = {400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}}

_PROVIDER = "elevenlabs"


async def _read_upload(upload: UploadFile) -> tuple[str, bytes, str]:
    content = await upload.read()
    return (upload.filename or "audio", content, upload.content_type or "application/octet-stream")


@router.post("/tts", responses=_ERRORS, summary="Text to speech")
async def text_to_speech(
    body: TTSRequest,
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    try:
        audio.validate_tts_text(body.text)
    except AudioValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not body.voice_id:
        raise HTTPException(status_code=400, detail="Voice is required")

    await track(_PROVIDER)
    return await audio.text_to_speech(body.text, body.voice_id)


@router.post("/sfx", responses=_ERRORS, summary="Generate a sound effect")
async def sound_effect(
    body: SoundEffectRequest,
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Description is required")

    await track(_PROVIDER)
    return await audio.sound_effect(
        body.text,
        duration_seconds=body.duration_seconds,
        prompt_influence=body.prompt_influence,
        loop=body.loop,
    )


@router.post("/music", responses=_ERRORS, summary="Generate a music clip")
async def music(
    body: MusicRequest,
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    await track(_PROVIDER)
    return await audio.music(body.prompt, duration_seconds=body.duration_seconds)


@router.post("/transcribe", responses=_ERRORS, summary="Transcribe an audio file")
async def transcribe(
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
    file: UploadFile | None = File(default=None),
) -> dict[str, Any]:
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    await track(_PROVIDER)
    return await audio.transcribe(await _read_upload(file))


# ---------------------------------------------------------------------------
# Voices
# ---------------------------------------------------------------------------


@router.get("/voices", summary="List available voices")
async def list_voices(audio: AudioDep) -> dict[str, Any]:
    return await audio.list_voices()


@router.post("/voices", responses=_ERRORS, summary="Clone a voice from samples")
async def clone_voice(
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
    name: str = Form(default=""),
    description: str | None = Form(default=None),
    files: list[UploadFile] | None = File(default=None),
) -> dict[str, Any]:
    samples = [await _read_upload(upload) for upload in files or []]
    try:
        audio.validate_voice_clone(name, samples)
    except AudioValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    await track(_PROVIDER)
    return await audio.clone_voice(name, samples, description=description)


@router.delete("/voices/{voice_id}", summary="Delete a cloned voice")
async def delete_voice(voice_id: str, audio: AudioDep, _rate: RateLimitDep) -> dict[str, Any]:
    return await audio.delete_voice(voice_id)


@router.post("/voice-design", responses=_ERRORS, summary="Preview voices from a description")
async def voice_design(
    body: VoiceDesignRequest,
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Preview text is required")

    await track(_PROVIDER)
    return await audio.design_voice(
        body.gender, body.accent, body.age, body.accent_strength, body.text
    )


@router.post("/voice-design/create", responses=_ERRORS, summary="Save a designed voice")
async def create_designed_voice(
    body: CreateDesignedVoiceRequest,
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    try:
        result = await audio.create_designed_voice(
            body.voice_name, body.voice_description, body.generated_voice_id
        )
    except AudioValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    await track(_PROVIDER)
    return result


@router.post("/dialogue", responses=_ERRORS, summary="Synthesise a multi-speaker script")
async def dialogue(
    body: DialogueRequest,
    audio: AudioDep,
    track: TrackerDep,
    _rate: RateLimitDep,
) -> dict[str, Any]:
    if not body.lines:
        raise HTTPException(status_code=400, detail="Script has no lines")

    await track(_PROVIDER)
    return await audio.synthesize_dialogue(
        [speaker.model_dump(by_alias=True) for speaker in body.speakers],
        [line.model_dump(by_alias=True) for line in body.lines],
    )
