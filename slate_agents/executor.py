"""Executor & Verifier.

Runs tool calls strictly in order. Approved plans are re-validated against
the registry before each call because the stored plan may predate a
deploy. Verification never rolls anything back; it only changes how the
outcome is reported.
"""

import json
import re
import time
from typing import Any, AsyncIterator

from pydantic import ValidationError

from slate_agents.models import ExecutionOutcome, ExecutionResultItem, PlannedAction
from slate_agents.utils.json_parser import JsonParser
from slate_llm.client import LLMError
from slate_obs.logging import get_logger
from slate_obs.metrics import (
    tool_execution_duration,
    tool_executions_total,
    tool_verifications_total,
)
from slate_obs.tracing import get_tracer
from slate_tools.base import (
    REFERENCE_PATTERN,
    ToolContext,
    ToolDefinition,
    ToolInput,
    ToolResult,
    VerificationResult,
)
from slate_tools.exceptions import ProductionUnavailableError, UnknownToolError
from slate_tools.registry import ToolRegistry

logger = get_logger(__name__)
tracer = get_tracer(__name__)

REFERENCE = re.compile(rf"^{REFERENCE_PATTERN}$")

# Errors that abort the turn instead of failing a single action
FATAL_ERRORS = (ProductionUnavailableError, LLMError)

_MISSING = object()


class UnresolvedReferenceError(Exception):
    """A `$<index>.<path>` argument could not be resolved."""

    pass


def resolve_references(value: Any, prior: list[ExecutionResultItem]) -> Any:
    """Replace `$<index>.<path>` strings with data from earlier results."""
    if isinstance(value, dict):
        return {k: resolve_references(v, prior) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_references(v, prior) for v in value]
    if not isinstance(value, str):
        return value

    match = REFERENCE.match(value)
    if not match:
        return value

    index, path = int(match.group(1)), match.group(2)
    if index >= len(prior):
        raise UnresolvedReferenceError(f"{value} refers to an action that has not run")
    source = prior[index].result
    if not source.success:
        raise UnresolvedReferenceError(f"{value} refers to a failed action")
    resolved = JsonParser.get(source.data, path, _MISSING)
    if resolved is _MISSING:
        raise UnresolvedReferenceError(f"{value} not found in result of action {index}")
    return resolved


class Executor:
    """Sequential tool executor with post-execution verification."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def execute_tool(
        self, tool: ToolDefinition, args: ToolInput, ctx: ToolContext
    ) -> ToolResult:
        """Execute one validated call.

        Raises:
            ProductionUnavailableError, LLMError: fatal, abort the turn
        """
        start = time.perf_counter()
        with tracer.start_as_current_span(
            "tool.execute",
            attributes={
                "tool.name": tool.name,
                "tool.tier": tool.tier.value,
                "project.id": ctx.project_id,
            },
        ) as span:
            try:
                result = await tool.execute(args, ctx)
            except FATAL_ERRORS:
                tool_executions_total.labels(
                    tool_name=tool.name, tier=tool.tier.value, status="error"
                ).inc()
                raise
            except Exception as e:
                logger.exception("tool_execute_raised", tool_name=tool.name, error=str(e))
                result = ToolResult.fail(str(e) or e.__class__.__name__)
            finally:
                tool_execution_duration.labels(tool_name=tool.name).observe(
                    time.perf_counter() - start
                )
            span.set_attribute("tool.success", result.success)

        status = "success" if result.success else "failure"
        tool_executions_total.labels(tool_name=tool.name, tier=tool.tier.value, status=status).inc()
        logger.info(
            "tool_executed",
            tool_name=tool.name,
            tier=tool.tier.value,
            success=result.success,
            error=result.error,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return result

    async def verify(
        self,
        tool: ToolDefinition,
        args: ToolInput,
        result: ToolResult,
        ctx: ToolContext,
    ) -> VerificationResult | None:
        """Run the tool's verifier, if it has one. Never raises for verifier bugs."""
        if tool.verify is None:
            return None
        try:
            verification = await tool.verify(args, result, ctx)
        except FATAL_ERRORS:
            raise
        except Exception as e:
            logger.warning("tool_verify_raised", tool_name=tool.name, error=str(e))
            verification = VerificationResult(
                verified=False,
                expected="Verification to succeed",
                actual=str(e) or "Verification failed",
                discrepancies=["Verification threw an exception"],
            )
        tool_verifications_total.labels(
            tool_name=tool.name, verified=str(verification.verified).lower()
        ).inc()
        if not verification.verified:
            logger.info(
                "tool_verification_mismatch",
                tool_name=tool.name,
                discrepancies=verification.discrepancies,
            )
        return verification

    async def iter_execute(
        self, actions: list[PlannedAction], ctx: ToolContext
    ) -> AsyncIterator[ExecutionResultItem]:
        """Execute a confirmed plan in order, yielding each result as it lands.

        A failed action does not stop its siblings. Only fatal errors escape,
        after every earlier item has already been yielded.
        """
        done: list[ExecutionResultItem] = []
        for position, action in enumerate(actions):
            tool = self.registry.get(action.tool_name)
            if tool is None:
                item = ExecutionResultItem(
                    tool_name=action.tool_name,
                    args=action.args,
                    result=ToolResult.fail(str(UnknownToolError(action.tool_name))),
                )
            else:
                item = await self._run_action(tool, action, done, ctx, position)
            done.append(item)
            yield item

    async def execute_all(
        self, actions: list[PlannedAction], ctx: ToolContext
    ) -> list[ExecutionResultItem]:
        return [item async for item in self.iter_execute(actions, ctx)]

    async def _run_action(
        self,
        tool: ToolDefinition,
        action: PlannedAction,
        done: list[ExecutionResultItem],
        ctx: ToolContext,
        position: int,
    ) -> ExecutionResultItem:
        try:
            raw_args = resolve_references(action.args, done)
        except UnresolvedReferenceError as e:
            logger.info("tool_reference_unresolved", tool_name=tool.name, position=position)
            return ExecutionResultItem(
                tool_name=tool.name, args=action.args, result=ToolResult.fail(str(e))
            )

        try:
            args = tool.parse_args(raw_args)
        except ValidationError as e:
            return ExecutionResultItem(
                tool_name=tool.name,
                args=raw_args,
                result=ToolResult.fail(f"Invalid arguments: {_first_error(e)}"),
            )

        result = await self.execute_tool(tool, args, ctx)
        verification = await self.verify(tool, args, result, ctx)
        return ExecutionResultItem(
            tool_name=tool.name,
            args=raw_args,
            result=result,
            verification=verification,
        )


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else first.get("msg", str(error))


def summarize(results: list[ExecutionResultItem]) -> ExecutionOutcome:
    """Aggregate outcome of an executed plan."""
    failed = [r for r in results if not r.result.success]
    if results and len(failed) == len(results):
        return ExecutionOutcome.FAILED
    if failed:
        return ExecutionOutcome.PARTIAL
    if any(r.verification is not None and not r.verification.verified for r in results):
        return ExecutionOutcome.UNVERIFIED
    return ExecutionOutcome.COMPLETED


def result_lines(results: list[ExecutionResultItem]) -> list[str]:
    """One line per executed action, for summaries and logs."""
    lines = []
    for r in results:
        status = "OK" if r.result.success else f"FAILED ({r.result.error})"
        if r.verification is None:
            verify_status = "no verification"
        elif r.verification.verified:
            verify_status = "verified"
        else:
            verify_status = f"issues: {', '.join(r.verification.discrepancies)}"
        args = json.dumps(r.args, default=str)[:100]
        lines.append(f"- {r.tool_name}({args}): {status} [{verify_status}]")
    return lines
