"""Execution policies for planned tool calls."""

from slate_agents.policies.tier_policy import (
    AUTO_EXECUTE_TIERS,
    can_auto_execute,
    requires_confirmation,
)

__all__ = ["AUTO_EXECUTE_TIERS", "can_auto_execute", "requires_confirmation"]
