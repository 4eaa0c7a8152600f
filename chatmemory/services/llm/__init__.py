"""LLM provider factory."""

from chatmemory.core.config import settings
from chatmemory.services.llm.base import BaseLLMProvider


def get_llm_provider() -> BaseLLMProvider:
    """Factory function that returns the configured LLM provider."""
    if settings.llm_provider == "gemini":
        from chatmemory.services.llm.gemini import GeminiProvider
        return GeminiProvider()
    elif settings.llm_provider == "azure_openai":
        from chatmemory.services.llm.azure_openai import AzureOpenAIProvider
        return AzureOpenAIProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
