"""Azure OpenAI chat completions provider."""

from openai import AsyncAzureOpenAI

from chatmemory.core.config import settings
from chatmemory.services.llm.base import BaseLLMProvider, LLMResponse, Message


class AzureOpenAIProvider(BaseLLMProvider):
    def __init__(self):
        self.client = AsyncAzureOpenAI(
            azure_endpoint=settings.azure_openai_endpoint,
            api_key=settings.azure_openai_key,
            api_version=settings.azure_openai_api_version,
        )
        self.deployment = settings.azure_openai_deployment

    async def chat(self, messages: list[Message]) -> LLMResponse:
        completion = await self.client.chat.completions.create(
            model=self.deployment,
            messages=[{"role": m.role, "content": m.content} for m in messages],  # type: ignore[misc]
        )
        return LLMResponse(content=completion.choices[0].message.content or "")
