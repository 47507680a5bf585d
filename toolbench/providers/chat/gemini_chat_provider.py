"""Gemini chat via the public ``generateContent`` REST endpoint."""

from __future__ import annotations

import httpx
import structlog

from toolbench.interfaces.chat_provider import ChatMessage, IChatProvider
from toolbench.utils.errors import ConfigurationError, ProviderError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "google-gemini"
_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

DEFAULT_CHAT_MODEL = "gemini-2.0-flash-exp"
NO_RESPONSE_TEXT = "No response generated"

_GENERATION_CONFIG = {
    "temperature": 0.9,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}

_SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


class GeminiChatProvider(IChatProvider):
    """Multi-turn chat against a Gemini text model."""

    def __init__(self, http_client: httpx.AsyncClient, api_key: str) -> None:
        self._http = http_client
        self._api_key = api_key

    @staticmethod
    def build_payload(messages: list[ChatMessage]) -> dict:
        """Translate chat turns into a ``generateContent`` request body."""
        contents = [
            {
                "role": "model" if message.role == "assistant" else "user",
                "parts": [{"text": message.content}],
            }
            for message in messages
        ]
        return {
            "contents": contents,
            "generationConfig": dict(_GENERATION_CONFIG),
            "safetySettings": [dict(s) for s in _SAFETY_SETTINGS],
        }

    async def complete(self, messages: list[ChatMessage], model: str | None = None) -> str:
        if not self._api_key:
            raise ConfigurationError(
                message="Gemini API key not configured", provider_name=_PROVIDER
            )
        model = model or DEFAULT_CHAT_MODEL

        response = await self._http.post(
            f"{_API_BASE}/{model}:generateContent",
            params={"key": self._api_key},
            json=self.build_payload(messages),
        )
        if not response.is_success:
            logger.error("gemini_chat_failed", status=response.status_code, body=response.text[:500])
            raise ProviderError(
                message="Failed to get response from Gemini",
                provider_name=_PROVIDER,
                status_code=response.status_code,
            )

        data = response.json()
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
        logger.info("gemini_chat_completed", model=model, turns=len(messages))
        return text or NO_RESPONSE_TEXT

    def get_provider_name(self) -> str:
        return _PROVIDER
