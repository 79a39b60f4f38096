"""Tool Registry.

Process-wide catalog of tools keyed by name. Populated once at startup and
then frozen; the tier stored here is the only tier the dispatcher trusts.
"""

from typing import Any

from slate_tools.base import ToolDefinition, ToolTier
from slate_tools.exceptions import ToolRegistrationError, UnknownToolError


class ToolRegistry:
    """Tool registry with tier-based lookup."""

    def __init__(self):
        self._tools: dict[str, ToolDefinition] = {}
        self._frozen = False

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool."""
        if self._frozen:
            raise ToolRegistrationError(f"Registry is frozen; cannot register {tool.name}")
        if tool.name in self._tools:
            raise ToolRegistrationError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> ToolDefinition | None:
        """Get tool by name."""
        return self._tools.get(name)

    def lookup(self, name: str) -> ToolDefinition:
        """Get tool by name or raise UnknownToolError."""
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def names(self) -> list[str]:
        return list(self._tools)

    def filter_by_tier(self, tier: ToolTier) -> list[ToolDefinition]:
        """Filter tools by risk tier."""
        return [t for t in self._tools.values() if t.tier == tier]

    def describe_all(self) -> list[dict[str, Any]]:
        """Schemas for every tool, in registration order."""
        return [t.to_openai_tool() for t in self._tools.values()]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
