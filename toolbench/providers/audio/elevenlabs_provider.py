"""ElevenLabs API adapter.

Covers text-to-speech, sound and music generation, transcription, voice
cloning and voice design.  Audio endpoints return raw MPEG bytes; callers
base64-encode them for the browser.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from toolbench.interfaces.cache_provider import ICacheProvider
from toolbench.utils.errors import ConfigurationError, ProviderError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "elevenlabs"
_API_BASE = "https://api.elevenlabs.io/v1"
_VOICES_CACHE_KEY = "elevenlabs:voices"

TTS_MODEL = "eleven_multilingual_v2"
SOUND_MODEL = "eleven_text_to_sound_v2"
TRANSCRIBE_MODEL = "scribe_v1"

# (filename, content, content_type) as accepted by httpx multipart uploads.
UploadFile = tuple[str, bytes, str]


class ElevenLabsProvider:
    """Async client for the ElevenLabs REST API.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    api_key:
        ElevenLabs key.  Calls raise ``ConfigurationError`` when empty.
    cache:
        Cache for the voice list.
    voices_ttl:
        Seconds to cache the voice list.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        cache: ICacheProvider | None = None,
        voices_ttl: int = 300,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._cache = cache
        self._voices_ttl = voices_ttl

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ConfigurationError(
                message="ElevenLabs API key not configured", provider_name=_PROVIDER
            )
        return {"xi-api-key": self._api_key}

    @staticmethod
    def _check(response: httpx.Response, operation: str) -> httpx.Response:
        if not response.is_success:
            logger.error(
                "elevenlabs_request_failed",
                operation=operation,
                status=response.status_code,
                body=response.text[:500],
            )
            raise ProviderError(
                message=f"API Error: {response.status_code} {response.reason_phrase}",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )
        return response

    # ------------------------------------------------------------------
    # Audio generation
    # ------------------------------------------------------------------

    async def text_to_speech(self, text: str, voice_id: str) -> bytes:
        response = await self._http.post(
            f"{_API_BASE}/text-to-speech/{voice_id}",
            headers=self._headers(),
            json={
                "text": text,
                "model_id": TTS_MODEL,
                "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
            },
        )
        self._check(response, "tts")
        logger.info("elevenlabs_tts_generated", voice_id=voice_id, chars=len(text))
        return response.content

    async def generate_sound(
        self,
        text: str,
        duration_seconds: float,
        prompt_influence: float,
        loop: bool | None = None,
    ) -> bytes:
        """Generate a sound effect or music clip from a description."""
        payload: dict[str, Any] = {
            "text": text,
            "duration_seconds": duration_seconds,
            "prompt_influence": prompt_influence,
            "model_id": SOUND_MODEL,
        }
        if loop is not None:
            payload["loop"] = loop
        response = await self._http.post(
            f"{_API_BASE}/sound-generation", headers=self._headers(), json=payload
        )
        self._check(response, "sound_generation")
        logger.info("elevenlabs_sound_generated", duration_seconds=duration_seconds)
        return response.content

    async def transcribe(self, upload: UploadFile) -> dict[str, Any]:
        response = await self._http.post(
            f"{_API_BASE}/speech-to-text",
            headers=self._headers(),
            data={"model_id": TRANSCRIBE_MODEL},
            files={"file": upload},
        )
        data = self._check(response, "transcribe").json()
        return {"text": data.get("text"), "language_code": data.get("language_code")}

    # ------------------------------------------------------------------
    # Voices
    # ------------------------------------------------------------------

    async def list_voices(self) -> list[dict[str, Any]]:
        if self._cache is not None:
            cached = await self._cache.get(_VOICES_CACHE_KEY)
            if cached is not None:
                return cached

        response = await self._http.get(f"{_API_BASE}/voices", headers=self._headers())
        voices = self._check(response, "list_voices").json().get("voices", [])
        if self._cache is not None:
            await self._cache.set(_VOICES_CACHE_KEY, voices, ttl=self._voices_ttl)
        return voices

    async def add_voice(
        self, name: str, files: list[UploadFile], description: str | None = None
    ) -> dict[str, Any]:
        data = {"name": name}
        if description:
            data["description"] = description
        response = await self._http.post(
            f"{_API_BASE}/voices/add",
            headers=self._headers(),
            data=data,
            files=[("files", upload) for upload in files],
        )
        result = self._check(response, "add_voice").json()
        await self._invalidate_voices()
        logger.info("elevenlabs_voice_added", voice_id=result.get("voice_id"), samples=len(files))
        return result

    async def delete_voice(self, voice_id: str) -> dict[str, Any]:
        response = await self._http.delete(f"{_API_BASE}/voices/{voice_id}", headers=self._headers())
        self._check(response, "delete_voice")
        await self._invalidate_voices()
        logger.info("elevenlabs_voice_deleted", voice_id=voice_id)
        try:
            return response.json()
        except ValueError:
            return {}

    async def create_voice_previews(self, voice_description: str, text: str) -> Any:
        response = await self._http.post(
            f"{_API_BASE}/text-to-voice/create-previews",
            headers=self._headers(),
            json={
                "voice_description": voice_description,
                "text": text,
                "voice_name": "Preview Voice",
            },
        )
        return self._check(response, "voice_design").json()

    async def create_voice_from_design(
        self, voice_name: str, voice_description: str, generated_voice_id: str
    ) -> dict[str, Any]:
        response = await self._http.post(
            f"{_API_BASE}/voice-generation/create-voice",
            headers=self._headers(),
            json={
                "voice_name": voice_name,
                "voice_description": voice_description,
                "generated_voice_id": generated_voice_id,
            },
        )
        result = self._check(response, "create_voice").json()
        await self._invalidate_voices()
        return result

    async def _invalidate_voices(self) -> None:
        if self._cache is not None:
            await self._cache.delete(_VOICES_CACHE_KEY)
