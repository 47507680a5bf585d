"""Chat providers."""

from toolbench.providers.chat.gemini_chat_provider import GeminiChatProvider

__all__ = ["GeminiChatProvider"]
