"""Slate Agent Tool System.

Tiered tool interface & registry.
"""

from slate_tools.base import (
    ToolContext,
    ToolDefinition,
    ToolInput,
    ToolResult,
    ToolTier,
    VerificationResult,
)
from slate_tools.exceptions import (
    ProductionUnavailableError,
    ToolError,
    ToolRegistrationError,
    UnknownToolError,
)
from slate_tools.registry import ToolRegistry

__all__ = [
    "ToolContext",
    "ToolDefinition",
    "ToolInput",
    "ToolResult",
    "ToolTier",
    "VerificationResult",
    "ProductionUnavailableError",
    "ToolError",
    "ToolRegistrationError",
    "UnknownToolError",
    "ToolRegistry",
]
