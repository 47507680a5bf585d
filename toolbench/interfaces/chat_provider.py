"""Abstract base class for conversational LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ChatMessage:
    """One turn of a conversation.  ``role`` is ``user`` or ``assistant``."""

    role: str
    content: str


class IChatProvider(ABC):
    """Contract for chat completion services."""

    @abstractmethod
    async def complete(self, messages: list[ChatMessage], model: str | None = None) -> str:
        """Return the model's reply to *messages*.

        Parameters
        ----------
        messages:
            Conversation history, oldest first.
        model:
            Vendor model identifier; ``None`` uses the provider default.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the analytics provider name."""
