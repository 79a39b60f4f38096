"""Anthropic Claude client.

Translates the provider-neutral conversation into Messages API content
blocks: assistant tool calls become `tool_use` blocks and tool results are
folded into the following user turn as `tool_result` blocks.
"""

import json
import os
from typing import Any

from anthropic import AsyncAnthropic
from anthropic import APIError, APITimeoutError, AuthenticationError, RateLimitError

from slate_agents.utils.json_parser import JsonParser

from .client import (
    LLMClient,
    LLMCompletion,
    LLMError,
    LLMAuthError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMToolCall,
)


class AnthropicClient(LLMClient):
    """Claude client with tool use."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-5-20250929",
        timeout_seconds: float = 60.0,
    ):
        """Initialize Anthropic client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            model: Model to use (default: claude-sonnet-4-5-20250929)
            timeout_seconds: Per-request timeout
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise LLMAuthError("ANTHROPIC_API_KEY not found in environment")

        self.client = AsyncAnthropic(api_key=self.api_key, timeout=timeout_seconds)
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
        """Generate text completion using Claude.

        Raises:
            LLMAuthError: Invalid API key
            LLMRateLimitError: Rate limit exceeded
            LLMError: Other API errors
        """
        response = await self._create(
            model=self._model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt or "",
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )

        # Extract text from content blocks
        text_blocks = [block.text for block in response.content if block.type == "text"]
        return "\n".join(text_blocks)

    async def complete_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        **kwargs: Any,
    ) -> LLMCompletion:
        """Run one tool-use round trip."""
        params: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system_prompt or "",
            "messages": self._to_wire(messages),
            **kwargs,
        }
        if tools:
            params["tools"] = [self._tool_schema(t) for t in tools]

        response = await self._create(**params)

        text_blocks = []
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                text_blocks.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    LLMToolCall(id=block.id, name=block.name, arguments=json.dumps(block.input))
                )

        return LLMCompletion(
            content="\n".join(text_blocks) if text_blocks else None,
            tool_calls=tool_calls,
        )

    async def _create(self, **params: Any):
        try:
            return await self.client.messages.create(**params)
        except AuthenticationError as e:
            raise LLMAuthError(f"Anthropic authentication failed: {e}") from e
        except RateLimitError as e:
            raise LLMRateLimitError(f"Anthropic rate limit exceeded: {e}") from e
        except APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic request timed out: {e}") from e
        except APIError as e:
            raise LLMError(f"Anthropic API error: {e}") from e

    @staticmethod
    def _tool_schema(tool: dict[str, Any]) -> dict[str, Any]:
        function = tool.get("function", tool)
        return {
            "name": function["name"],
            "description": function.get("description", ""),
            "input_schema": function.get("parameters") or {"type": "object", "properties": {}},
        }

    @staticmethod
    def _to_wire(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Build alternating user/assistant turns of content blocks."""
        wire: list[dict[str, Any]] = []

        def append(role: str, blocks: list[dict[str, Any]]) -> None:
            if not blocks:
                return
            if wire and wire[-1]["role"] == role:
                wire[-1]["content"].extend(blocks)
            else:
                wire.append({"role": role, "content": blocks})

        for message in messages:
            role = message["role"]
            content = message.get("content")
            if role == "tool":
                append(
                    "user",
                    [
                        {
                            "type": "tool_result",
                            "tool_use_id": message["tool_call_id"],
                            "content": content or "",
                        }
                    ],
                )
            elif role == "assistant":
                blocks: list[dict[str, Any]] = []
                if content:
                    blocks.append({"type": "text", "text": content})
                for call in message.get("tool_calls") or []:
                    arguments = JsonParser.parse(call.arguments, expect_container=True)
                    blocks.append(
                        {
                            "type": "tool_use",
                            "id": call.id,
                            "name": call.name,
                            "input": arguments if isinstance(arguments, dict) else {},
                        }
                    )
                append("assistant", blocks)
            elif content:
                append("user", [{"type": "text", "text": content}])

        return wire
