"""Base LLM client interface.

Defines the contract that all LLM clients must implement.

Conversation messages use one provider-neutral shape:

    {"role": "user", "content": "..."}
    {"role": "assistant", "content": "..." | None, "tool_calls": [LLMToolCall, ...]}
    {"role": "tool", "tool_call_id": "...", "content": "..."}

Each client translates this shape into its provider's wire format.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from slate_agents.utils.json_parser import JsonParser


class LLMToolCall(BaseModel):
    """A tool invocation requested by the model.

    `arguments` is the raw JSON text the provider returned; it is parsed
    (and repaired if needed) by the planner, never here.
    """

    id: str
    name: str
    arguments: str = "{}"


class LLMCompletion(BaseModel):
    """One provider round trip: optional text plus zero or more tool calls."""

    content: str | None = None
    tool_calls: list[LLMToolCall] = Field(default_factory=list)


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        **kwargs: Any,
    ) -> str:
        """Generate text completion from prompt.

        Args:
            prompt: User prompt or question
            system_prompt: Optional system instructions
            temperature: Sampling temperature (0.0-1.0)
            max_tokens: Maximum tokens to generate
            **kwargs: Additional model-specific parameters

        Returns:
            Generated text response

        Raises:
            LLMError: If generation fails
        """
        pass

    @abstractmethod
    async def complete_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        **kwargs: Any,
    ) -> LLMCompletion:
        """Run one function-calling round trip.

        Args:
            messages: Conversation in the provider-neutral shape
            tools: Function schemas (`ToolDefinition.to_openai_tool()`)
            system_prompt: Optional system instructions
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            LLMCompletion with text and/or tool calls

        Raises:
            LLMError: If the provider call fails
        """
        pass

    async def generate_json(
        self,
        prompt: str,
        schema: dict[str, Any],
        system_prompt: str | None = None,
        temperature: float = 0.7,
        **kwargs: Any,
    ) -> Any:
        """Generate structured JSON output.

        The schema is embedded in the prompt and the reply goes through the
        repair parser, so code fences and small syntax slips are tolerated.

        Raises:
            LLMValidationError: If no JSON container can be recovered
        """
        enhanced_prompt = (
            f"{prompt}\n\nRespond with valid JSON matching this schema:\n"
            f"```json\n{json.dumps(schema, indent=2)}\n```\n\n"
            "Return ONLY the JSON, no additional text."
        )
        text = await self.generate(
            prompt=enhanced_prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            **kwargs,
        )
        result = JsonParser.parse(text, expect_container=True)
        if result is None:
            raise LLMValidationError(f"Failed to parse JSON. Response: {text[:200]}")
        return result

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier (e.g., 'gpt-4o', 'claude-sonnet-4-5')."""
        pass


class LLMError(Exception):
    """Base exception for LLM client errors."""

    pass


class LLMAuthError(LLMError):
    """Authentication error with LLM provider."""

    pass


class LLMRateLimitError(LLMError):
    """Rate limit exceeded."""

    pass


class LLMTimeoutError(LLMError):
    """Provider did not answer in time."""

    pass


class LLMValidationError(LLMError):
    """Generated output failed validation."""

    pass
