"""Google Gemini LLM provider."""

from google import genai
from google.genai import types

from chatmemory.core.config import settings
from chatmemory.services.llm.base import BaseLLMProvider, LLMResponse, Message


class GeminiProvider(BaseLLMProvider):
    def __init__(self):
        self.client = genai.Client(api_key=settings.gemini_api_key)
        self.model = settings.gemini_model

    async def chat(self, messages: list[Message]) -> LLMResponse:
        system = "\n".join(m.content for m in messages if m.role == "system")
        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in messages
            if m.role != "system"
        ]
        config = types.GenerateContentConfig(system_instruction=system) if system else None
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )
        return LLMResponse(content=response.text or "")
