"""Audio tools service.

Validation and prompt building for the audio generator page sit here;
raw HTTP lives in :class:`~toolbench.providers.audio.elevenlabs_provider.ElevenLabsProvider`.

# ─── DIALOGUE SYNTHESIS ────────────────────────────────────────────────
#
# A dialogue script is a list of lines, each tagged with a speaker id.
# Speakers map ids to ElevenLabs voices.  Lines are synthesised one at a
# time, in script order, so the vendor's concurrency limit is never hit.
#
#   speakers: [{id: "A", voiceId: "v1"}, {id: "B", voiceId: "v2"}]
#   lines:    [{speakerId: "A", text: "Hi"}, {speakerId: "C", text: "?"}]
#   result:   lines=[{index: 0, ...}]  skipped=[1]  (no speaker "C")
#
# A line whose synthesis fails upstream is reported under ``failed`` and
# the remaining lines still run.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import base64
from typing import Any

import structlog

from toolbench.providers.audio.elevenlabs_provider import ElevenLabsProvider, UploadFile
from toolbench.utils.errors import ProviderError
from toolbench.utils.logging import get_logger

AUDIO_MIME_TYPE = "audio/mpeg"
MAX_TTS_CHARS = 5000
MIN_MUSIC_SECONDS = 1
MAX_MUSIC_SECONDS = 30
MUSIC_PROMPT_INFLUENCE = 0.5

_ACCENTS = {
    "american": "American",
    "british": "British",
    "australian": "Australian",
    "indian": "Indian",
    "accent": "African",
    "irish": "Irish",
}

_AGES = {
    "young": "young adult",
    "middle_aged": "middle-aged",
    "old": "elderly",
}


class AudioValidationError(ValueError):
    """Raised when an audio request is rejected before reaching the vendor."""


def describe_accent_strength(strength: float) -> str:
    if strength < 0.8:
        return "slight"
    if strength > 1.4:
        return "very strong and distinct"
    if strength > 1.1:
        return "strong"
    return "moderate"


def build_voice_design_prompt(gender: str, accent: str, age: str, accent_strength: float) -> str:
    """Describe a voice for ElevenLabs voice design.

    >>> build_voice_design_prompt("female", "british", "old", 1.2)
    'A elderly female voice with a strong British accent. Clear, high quality, professional recording.'
    """
    descriptive_accent = _ACCENTS.get(accent.lower(), accent)
    descriptive_age = _AGES.get(age, age)
    strength = describe_accent_strength(accent_strength)
    return (
        f"A {descriptive_age} {gender} voice with a {strength} {descriptive_accent} accent. "
        "Clear, high quality, professional recording."
    )


def clamp_music_duration(seconds: float) -> float:
    return max(MIN_MUSIC_SECONDS, min(MAX_MUSIC_SECONDS, seconds))


def _audio_result(audio: bytes) -> dict[str, Any]:
    return {
        "success": True,
        "audio": base64.b64encode(audio).decode("ascii"),
        "mimeType": AUDIO_MIME_TYPE,
    }


class AudioService:
    """Text-to-speech, sound, music, voice design and dialogue on ElevenLabs."""

    def __init__(self, provider: ElevenLabsProvider) -> None:
        self._provider = provider
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @staticmethod
    def validate_tts_text(text: str | None) -> str:
        if not text or not text.strip():
            raise AudioValidationError("Text is required")
        if len(text) > MAX_TTS_CHARS:
            raise AudioValidationError(f"Text too long (max {MAX_TTS_CHARS} characters)")
        return text

    async def text_to_speech(self, text: str, voice_id: str) -> dict[str, Any]:
        self.validate_tts_text(text)
        audio = await self._provider.text_to_speech(text, voice_id)
        return _audio_result(audio)

    async def sound_effect(
        self,
        text: str,
        duration_seconds: float = 1.0,
        prompt_influence: float = 0.3,
        loop: bool = False,
    ) -> dict[str, Any]:
        audio = await self._provider.generate_sound(
            text, duration_seconds=duration_seconds, prompt_influence=prompt_influence, loop=loop
        )
        return _audio_result(audio)

    async def music(self, prompt: str, duration_seconds: float = 10) -> dict[str, Any]:
        audio = await self._provider.generate_sound(
            prompt,
            duration_seconds=clamp_music_duration(duration_seconds),
            prompt_influence=MUSIC_PROMPT_INFLUENCE,
        )
        return _audio_result(audio)

    async def transcribe(self, upload: UploadFile) -> dict[str, Any]:
        result = await self._provider.transcribe(upload)
        return {"success": True, **result}

    # ------------------------------------------------------------------
    # Voices
    # ------------------------------------------------------------------

    async def list_voices(self) -> dict[str, Any]:
        return {"success": True, "voices": await self._provider.list_voices()}

    @staticmethod
    def validate_voice_clone(name: str | None, files: list[UploadFile]) -> None:
        if not name or not name.strip():
            raise AudioValidationError("Voice name is required")
        if not files:
            raise AudioValidationError("At least one audio file is required")

    async def clone_voice(
        self, name: str, files: list[UploadFile], description: str | None = None
    ) -> dict[str, Any]:
        self.validate_voice_clone(name, files)
        result = await self._provider.add_voice(name.strip(), files, description=description)
        return {"success": True, "voice_id": result.get("voice_id")}

    async def delete_voice(self, voice_id: str) -> dict[str, Any]:
        await self._provider.delete_voice(voice_id)
        return {"success": True}

    async def create_designed_voice(
        self, voice_name: str, voice_description: str, generated_voice_id: str
    ) -> dict[str, Any]:
        if not voice_name or not generated_voice_id:
            raise AudioValidationError("Voice name and generated voice ID are required")
        result = await self._provider.create_voice_from_design(
            voice_name, voice_description, generated_voice_id
        )
        return {"success": True, "voice_id": result.get("voice_id")}

    async def design_voice(
        self,
        gender: str,
        accent: str,
        age: str,
        accent_strength: float,
        text: str,
    ) -> dict[str, Any]:
        prompt = build_voice_design_prompt(gender, accent, age, accent_strength)
        self._logger.info("voice_design_requested", prompt=prompt)
        result = await self._provider.create_voice_previews(prompt, text)
        previews = result.get("previews", []) if isinstance(result, dict) else result
        return {"success": True, "previews": previews}

    async def synthesize_dialogue(
        self,
        speakers: list[dict[str, Any]],
        lines: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Synthesise every usable line in order.

        Parameters
        ----------
        speakers:
            ``[{id, name, voiceId}]``.
        lines:
            ``[{speakerId, text}]``.

        Returns
        -------
        dict
            ``lines`` (one entry per synthesised line, keyed by script
            index), ``skipped`` (indices with no known speaker or blank
            text) and ``failed`` (indices whose synthesis errored upstream).
        """
        voices = {speaker.get("id"): speaker.get("voiceId") for speaker in speakers}
        rendered: list[dict[str, Any]] = []
        skipped: list[int] = []
        failed: list[dict[str, Any]] = []

        for index, line in enumerate(lines):
            text = (line.get("text") or "").strip()
            voice_id = voices.get(line.get("speakerId"))
            if not voice_id or not text:
                skipped.append(index)
                continue
            if len(text) > MAX_TTS_CHARS:
                failed.append({"index": index, "error": f"Text too long (max {MAX_TTS_CHARS} characters)"})
                continue

            try:
                audio = await self._provider.text_to_speech(text, voice_id)
            except ProviderError as exc:
                self._logger.warning("dialogue_line_failed", index=index, error=exc.message)
                failed.append({"index": index, "error": exc.message})
                continue

            rendered.append(
                {
                    "index": index,
                    "speakerId": line.get("speakerId"),
                    "audio": base64.b64encode(audio).decode("ascii"),
                    "mimeType": AUDIO_MIME_TYPE,
                }
            )

        self._logger.info(
            "dialogue_synthesized", lines=len(rendered), skipped=len(skipped), failed=len(failed)
        )
        return {"lines": rendered, "skipped": skipped, "failed": failed}
