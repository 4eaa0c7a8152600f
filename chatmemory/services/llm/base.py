"""Abstract LLM provider interface. All providers must implement this."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Message:
    role: str  # "user" | "assistant" | "system"
    content: str


@dataclass
class LLMResponse:
    content: str


class BaseLLMProvider(ABC):
    @abstractmethod
    async def chat(self, messages: list[Message]) -> LLMResponse:
        """Send messages and get a response."""
        ...

    async def complete(self, messages: list[Message]) -> str:
        """Return the completion text, or ``"Error: <message>"`` on any failure.

        This is the boundary the chat session talks to; it never raises.
        """
        try:
            response = await self.chat(messages)
        except Exception as e:
            logger.warning(f"{type(self).__name__} completion failed: {e}")
            return f"Error: {e}"
        return response.content
