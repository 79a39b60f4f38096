"""Slate LLM Integration.

Provider-neutral chat and function-calling clients:
- OpenAI (and OpenAI-compatible endpoints)
- Anthropic Claude
"""

from slate_config import Settings

from .client import (
    LLMAuthError,
    LLMClient,
    LLMCompletion,
    LLMError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMToolCall,
    LLMValidationError,
)
from .anthropic_client import AnthropicClient
from .openai_client import OpenAIClient


def build_llm_client(settings: Settings) -> LLMClient:
    """Create the client selected by LLM_PROVIDER."""
    if settings.LLM_PROVIDER == "anthropic":
        return AnthropicClient(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
        )
    return OpenAIClient(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        base_url=settings.OPENAI_BASE_URL or None,
        timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
    )


__all__ = [
    "LLMClient",
    "LLMCompletion",
    "LLMToolCall",
    "LLMError",
    "LLMAuthError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LLMValidationError",
    "AnthropicClient",
    "OpenAIClient",
    "build_llm_client",
]
