"""Planner/Dispatcher.

Bounded agent loop: ask the model, run read-tier calls transparently and
feed their results back, stop at a final answer or at the first batch that
needs a human. Nothing outside the read tier ever executes here.
"""

import json
from typing import Any, NamedTuple, Union

from pydantic import BaseModel, Field, ValidationError

from slate_agents.descriptions import describe_action
from slate_agents.errors import CallBudgetExceededError, PlanningError
from slate_agents.executor import Executor
from slate_agents.models import PlannedAction
from slate_agents.policies.tier_policy import requires_confirmation
from slate_agents.utils.json_parser import JsonParser
from slate_llm.client import LLMClient, LLMToolCall
from slate_obs.logging import get_logger
from slate_obs.metrics import agent_loop_iterations
from slate_obs.tracing import get_tracer
from slate_tools.base import ToolContext, ToolDefinition, ToolInput, ToolResult
from slate_tools.exceptions import UnknownToolError
from slate_tools.registry import ToolRegistry

logger = get_logger(__name__)
tracer = get_tracer(__name__)

EMPTY_ANSWER = "I couldn't generate a response. Please try again."


class FinalAnswer(BaseModel):
    """The model answered in text; `auto_tools` lists read tools that ran."""

    content: str
    auto_tools: list[str] = Field(default_factory=list)


class ConfirmationRequired(BaseModel):
    """The model asked for at least one non-read call; nothing has executed."""

    content: str | None = None
    actions: list[PlannedAction]
    auto_tools: list[str] = Field(default_factory=list)


PlanResult = Union[FinalAnswer, ConfirmationRequired]


class ResolvedCall(NamedTuple):
    call: LLMToolCall
    tool: ToolDefinition
    args: ToolInput


class Planner:
    """Turns a conversation into a final answer or a plan awaiting approval."""

    def __init__(
        self,
        llm: LLMClient,
        registry: ToolRegistry,
        executor: Executor,
        max_iterations: int = 6,
        tool_result_max_chars: int = 3000,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ):
        self.llm = llm
        self.registry = registry
        self.executor = executor
        self.max_iterations = max_iterations
        self.tool_result_max_chars = tool_result_max_chars
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def plan(
        self,
        conversation: list[dict[str, Any]],
        ctx: ToolContext,
        system_prompt: str | None = None,
    ) -> PlanResult:
        """Run the agent loop for one user turn.

        Args:
            conversation: Prior turns, oldest first, ending with the user message
            ctx: Tenancy scope for read-tool execution
            system_prompt: Instructions plus project context

        Raises:
            PlanningError: Unknown tool or unusable arguments
            CallBudgetExceededError: Read loop did not converge
        """
        messages = list(conversation)
        tools = self.registry.describe_all()
        auto_tools: list[str] = []

        for iteration in range(1, self.max_iterations + 1):
            with tracer.start_as_current_span(
                "llm.complete_with_tools",
                attributes={"llm.model": self.llm.model_name, "agent.iteration": iteration},
            ):
                completion = await self.llm.complete_with_tools(
                    messages,
                    tools,
                    system_prompt=system_prompt,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )

            if not completion.tool_calls:
                agent_loop_iterations.observe(iteration)
                content = (completion.content or "").strip() or EMPTY_ANSWER
                return FinalAnswer(content=content, auto_tools=auto_tools)

            resolved = [self._resolve(call) for call in completion.tool_calls]

            if requires_confirmation(r.tool for r in resolved):
                agent_loop_iterations.observe(iteration)
                actions = [self._planned_action(r) for r in resolved]
                logger.info(
                    "plan_requires_confirmation",
                    project_id=ctx.project_id,
                    tools=[a.tool_name for a in actions],
                    tiers=[a.tier.value for a in actions],
                )
                return ConfirmationRequired(
                    content=(completion.content or "").strip() or None,
                    actions=actions,
                    auto_tools=auto_tools,
                )

            messages.append(
                {
                    "role": "assistant",
                    "content": completion.content,
                    "tool_calls": completion.tool_calls,
                }
            )
            for r in resolved:
                result = await self.executor.execute_tool(r.tool, r.args, ctx)
                auto_tools.append(r.tool.name)
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": r.call.id,
                        "content": self._tool_message(result),
                    }
                )

        agent_loop_iterations.observe(self.max_iterations)
        logger.warning(
            "agent_call_budget_exceeded",
            project_id=ctx.project_id,
            iterations=self.max_iterations,
            auto_tools=auto_tools,
        )
        raise CallBudgetExceededError(self.max_iterations)

    def _resolve(self, call: LLMToolCall) -> ResolvedCall:
        try:
            tool = self.registry.lookup(call.name)
        except UnknownToolError as e:
            logger.warning("planning_unknown_tool", tool_name=call.name)
            raise PlanningError(str(e), tool_name=call.name) from e

        raw = call.arguments.strip() if call.arguments else ""
        args = JsonParser.parse(raw, expect_container=True) if raw else {}
        if not isinstance(args, dict):
            logger.warning("planning_malformed_arguments", tool_name=call.name, raw=raw[:200])
            raise PlanningError(f"Malformed arguments for {call.name}", tool_name=call.name)

        try:
            parsed = tool.parse_args(args)
        except ValidationError as e:
            logger.warning(
                "planning_invalid_arguments", tool_name=call.name, errors=e.error_count()
            )
            raise PlanningError(
                f"Invalid arguments for {call.name}: {_describe_errors(e)}",
                tool_name=call.name,
            ) from e

        return ResolvedCall(call=call, tool=tool, args=parsed)

    @staticmethod
    def _planned_action(r: ResolvedCall) -> PlannedAction:
        args = r.args.provided()
        return PlannedAction(
            tool_name=r.tool.name,
            args=args,
            tier=r.tool.tier,
            description=describe_action(r.tool.name, args),
        )

    def _tool_message(self, result: ToolResult) -> str:
        if not result.success:
            return f"Error: {result.error}"
        return json.dumps(result.data, separators=(",", ":"), default=str)[
            : self.tool_result_max_chars
        ]


def _describe_errors(error: ValidationError) -> str:
    parts = []
    for item in error.errors()[:3]:
        location = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else item.get("msg", ""))
    return "; ".join(parts)
