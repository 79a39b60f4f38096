"""Tier policy: which planned calls may run without a human.

Tiers are always taken from the registry; the model's own description of
what a call does is never consulted.
"""

from typing import Iterable

from slate_tools.base import ToolDefinition, ToolTier

AUTO_EXECUTE_TIERS = frozenset({ToolTier.READ})


def can_auto_execute(tool: ToolDefinition) -> bool:
    return tool.tier in AUTO_EXECUTE_TIERS


def requires_confirmation(tools: Iterable[ToolDefinition]) -> bool:
    """True if any tool in the batch needs approval.

    A batch is held as a whole: read calls that arrive alongside a mutate or
    destructive call are not run ahead of the confirmation.
    """
    return not all(can_auto_execute(t) for t in tools)
