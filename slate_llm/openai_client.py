"""OpenAI client.

Used for:
- Function-calling rounds of the agent loop
- Post-execution summaries

Works against any OpenAI-compatible endpoint via `base_url`.
"""

import os
from typing import Any

from openai import AsyncOpenAI
from openai import APIError, APITimeoutError, AuthenticationError, RateLimitError

from .client import (
    LLMClient,
    LLMCompletion,
    LLMError,
    LLMAuthError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMToolCall,
)


class OpenAIClient(LLMClient):
    """OpenAI chat-completions client with function calling."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Model to use (default: gpt-4o)
            base_url: Optional OpenAI-compatible endpoint
            timeout_seconds: Per-request timeout
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise LLMAuthError("OPENAI_API_KEY not found in environment")

        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self._model = model

    @property
    def model_name(self) -> str:
        """Return model identifier."""
        return self._model

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        **kwargs: Any,
    ) -> str:
        """Generate text completion.

        Raises:
            LLMAuthError: Invalid API key
            LLMRateLimitError: Rate limit exceeded
            LLMError: Other API errors
        """
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        response = await self._create(
            model=self._model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        return response.choices[0].message.content or ""

    async def complete_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        **kwargs: Any,
    ) -> LLMCompletion:
        """Run one function-calling round trip."""
        wire_messages = []
        if system_prompt:
            wire_messages.append({"role": "system", "content": system_prompt})
        wire_messages.extend(self._to_wire(m) for m in messages)

        params: dict[str, Any] = {
            "model": self._model,
            "messages": wire_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }
        if tools:
            params["tools"] = tools
            params["tool_choice"] = "auto"

        response = await self._create(**params)
        message = response.choices[0].message

        tool_calls = [
            LLMToolCall(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "{}",
            )
            for call in (message.tool_calls or [])
        ]
        return LLMCompletion(content=message.content, tool_calls=tool_calls)

    async def _create(self, **params: Any):
        try:
            return await self.client.chat.completions.create(**params)
        except AuthenticationError as e:
            raise LLMAuthError(f"OpenAI authentication failed: {e}") from e
        except RateLimitError as e:
            raise LLMRateLimitError(f"OpenAI rate limit exceeded: {e}") from e
        except APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
        except APIError as e:
            raise LLMError(f"OpenAI API error: {e}") from e

    @staticmethod
    def _to_wire(message: dict[str, Any]) -> dict[str, Any]:
        """Translate a provider-neutral message into chat-completions format."""
        role = message["role"]
        if role == "tool":
            return {
                "role": "tool",
                "tool_call_id": message["tool_call_id"],
                "content": message.get("content") or "",
            }
        if role == "assistant" and message.get("tool_calls"):
            return {
                "role": "assistant",
                "content": message.get("content"),
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments},
                    }
                    for call in message["tool_calls"]
                ],
            }
        return {"role": role, "content": message.get("content") or ""}
