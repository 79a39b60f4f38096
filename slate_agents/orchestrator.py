"""Agent turn orchestration.

Two entry points, one per inbound request:

- handle_message: persist the user message, run the planner, and either
  answer or park the plan behind a confirmation.
- resolve_confirmation: claim the pending plan exactly once, then execute
  and verify it (approve) or record the decline.

The orchestrator holds no state between turns; everything it needs is
injected at construction.
"""

import asyncio
import time
from collections import Counter
from typing import Literal

from pydantic import BaseModel

from slate_agents.errors import CallBudgetExceededError, PlanningError, ProjectAccessDeniedError
from slate_agents.executor import FATAL_ERRORS, Executor, result_lines, summarize
from slate_agents.models import (
    ChatMessage,
    ConfirmationDeclinedMetadata,
    ConfirmationRequestMetadata,
    ExecutionOutcome,
    ExecutionResultItem,
    ExecutionResultMetadata,
    PlannedAction,
    ToolCallsAutoMetadata,
)
from slate_agents.planner import ConfirmationRequired, FinalAnswer, Planner
from slate_llm.client import LLMClient, LLMError
from slate_memory.exceptions import ConfirmationError
from slate_memory.stores import ChatMessageStore, ConfirmationStore
from slate_obs.logging import get_logger
from slate_obs.metrics import agent_loop_duration, agent_turns_total, confirmations_total
from slate_tools.adapters.production.client import ProductionClient, Resource
from slate_tools.base import ToolContext

logger = get_logger(__name__)

BUDGET_MESSAGE = "I ran into the tool call limit. Could you break your request into smaller steps?"
DECLINE_MESSAGE = "Understood, I won't make those changes. What would you like to do instead?"
UNVERIFIED_NOTE = (
    "Some changes could not be verified against what was requested. "
    "Please check them carefully."
)

SYSTEM_PROMPT = """You are the production assistant for a film project. You help the \
user manage scenes, cast, locations, shooting days, production elements and crew.

Rules:
- Use the read tools (get_*) whenever you need current data; they run immediately.
- Create, update, assign, link and delete tools are shown to the user for \
approval before they run. Propose them only when the user asked for a change.
- Use the ids from the project context or from tool results. Never invent ids.
- When one change needs the id of something created earlier in the same \
batch, pass "$<index>.id" as that argument, where <index> is the 0-based \
position of the earlier call (for example "$0.id").
- Keep answers short and concrete."""

SUMMARY_PROMPT = (
    "Summarize the following tool execution results in a concise, human-readable way. "
    "Report successes and any issues."
)

CONTEXT_SCENE_ROWS = 60
CONTEXT_CREW_ROWS = 40


class AgentTurn(BaseModel):
    """What one inbound request produced."""

    message: ChatMessage
    status: Literal["completed", "pending_confirmation"] = "completed"
    confirmation_id: str | None = None


class AgentOrchestrator:
    """Stateless coordinator for agent turns."""

    def __init__(
        self,
        planner: Planner,
        executor: Executor,
        confirmations: ConfirmationStore,
        messages: ChatMessageStore,
        production: ProductionClient,
        llm: LLMClient,
        history_limit: int = 30,
    ):
        self.planner = planner
        self.executor = executor
        self.confirmations = confirmations
        self.messages = messages
        self.production = production
        self.llm = llm
        self.history_limit = history_limit

    async def ensure_project_access(self, ctx: ToolContext) -> None:
        if not await self.production.check_project_access(ctx.project_id, ctx.user_id):
            logger.warning(
                "project_access_denied", project_id=ctx.project_id, user_id=ctx.user_id
            )
            raise ProjectAccessDeniedError(ctx.project_id)

    # ------------------------------------------------------------------------
    # NEW MESSAGE
    # ------------------------------------------------------------------------

    async def handle_message(self, ctx: ToolContext, message: str) -> AgentTurn:
        """Run one user turn.

        Raises:
            ProjectAccessDeniedError: User is not a project member
            LLMError, ProductionUnavailableError: Fatal, retryable
        """
        start = time.perf_counter()
        await self.ensure_project_access(ctx)
        await self.confirmations.expire_stale()

        await self.messages.add(ctx, "user", message)
        history = await self.messages.history(ctx, limit=self.history_limit)
        context_block = await self.build_project_context(ctx)

        conversation = [{"role": m.role, "content": m.content} for m in history]
        system_prompt = f"{SYSTEM_PROMPT}\n\nCurrent project context:\n{context_block}"

        try:
            result = await self.planner.plan(conversation, ctx, system_prompt=system_prompt)
        except PlanningError as e:
            agent_turns_total.labels(outcome="planning_error").inc()
            logger.warning(
                "agent_planning_failed",
                project_id=ctx.project_id,
                tool_name=e.tool_name,
                error=str(e),
            )
            saved = await self.messages.add(
                ctx,
                "assistant",
                f"I couldn't act on that request ({e}). Nothing was changed. "
                "Could you rephrase it?",
            )
            return AgentTurn(message=saved)
        except CallBudgetExceededError:
            agent_turns_total.labels(outcome="budget_exceeded").inc()
            saved = await self.messages.add(ctx, "assistant", BUDGET_MESSAGE)
            return AgentTurn(message=saved)
        finally:
            agent_loop_duration.observe(time.perf_counter() - start)

        if isinstance(result, FinalAnswer):
            agent_turns_total.labels(outcome="answered").inc()
            metadata = ToolCallsAutoMetadata(tools=result.auto_tools) if result.auto_tools else None
            saved = await self.messages.add(ctx, "assistant", result.content, metadata)
            logger.info(
                "agent_turn_answered", project_id=ctx.project_id, auto_tools=result.auto_tools
            )
            return AgentTurn(message=saved)

        return await self._request_confirmation(ctx, result)

    async def _request_confirmation(
        self, ctx: ToolContext, result: ConfirmationRequired
    ) -> AgentTurn:
        request = await self.confirmations.create(ctx, result.actions)
        confirmations_total.labels(event="created").inc()
        agent_turns_total.labels(outcome="pending_confirmation").inc()

        content = result.content or (
            f"I'd like to perform {len(result.actions)} action(s). Please review and approve."
        )
        saved = await self.messages.add(
            ctx,
            "assistant",
            content,
            ConfirmationRequestMetadata(
                confirmation_id=request.confirmation_id,
                actions=request.actions,
                expires_at=request.expires_at,
            ),
        )
        return AgentTurn(
            message=saved,
            status="pending_confirmation",
            confirmation_id=request.confirmation_id,
        )

    # ------------------------------------------------------------------------
    # CONFIRMATION
    # ------------------------------------------------------------------------

    async def resolve_confirmation(
        self, ctx: ToolContext, confirmation_id: str, approved: bool
    ) -> AgentTurn:
        """Approve or decline a pending plan.

        Raises:
            ProjectAccessDeniedError: User is not a project member
            ConfirmationError: Unknown, expired or already resolved id
        """
        await self.ensure_project_access(ctx)

        try:
            actions = await self.confirmations.resolve(ctx, confirmation_id, approved)
        except ConfirmationError as e:
            confirmations_total.labels(event=e.code.removeprefix("confirmation_")).inc()
            logger.info(
                "confirmation_rejected",
                project_id=ctx.project_id,
                confirmation_id=confirmation_id[:8],
                reason=e.code,
            )
            raise

        if not approved:
            confirmations_total.labels(event="declined").inc()
            saved = await self.messages.add(
                ctx,
                "assistant",
                DECLINE_MESSAGE,
                ConfirmationDeclinedMetadata(confirmation_id=confirmation_id),
            )
            return AgentTurn(message=saved)

        confirmations_total.labels(event="approved").inc()
        # Once claimed, the plan runs and is recorded even if the caller goes away
        return await asyncio.shield(self._execute_approved(ctx, confirmation_id, actions))

    async def _execute_approved(
        self, ctx: ToolContext, confirmation_id: str, actions: list[PlannedAction]
    ) -> AgentTurn:
        results: list[ExecutionResultItem] = []
        aborted: Exception | None = None
        try:
            async for item in self.executor.iter_execute(actions, ctx):
                results.append(item)
        except FATAL_ERRORS as e:
            aborted = e
            logger.error(
                "agent_execution_aborted",
                project_id=ctx.project_id,
                confirmation_id=confirmation_id[:8],
                completed=len(results),
                planned=len(actions),
                error=str(e),
            )

        outcome = summarize(results) if results else ExecutionOutcome.FAILED
        if aborted is not None and outcome is not ExecutionOutcome.FAILED:
            outcome = ExecutionOutcome.PARTIAL

        content = await self._summary_text(results, outcome)
        if aborted is not None:
            content += (
                f"\n\nExecution stopped after {len(results)} of {len(actions)} action(s) "
                "because a required service was unavailable. The remaining actions were not run."
            )

        saved = await self.messages.add(
            ctx,
            "assistant",
            content,
            ExecutionResultMetadata(
                confirmation_id=confirmation_id, outcome=outcome, results=results
            ),
        )
        agent_turns_total.labels(outcome=f"executed_{outcome.value}").inc()
        logger.info(
            "agent_plan_executed",
            project_id=ctx.project_id,
            confirmation_id=confirmation_id[:8],
            outcome=outcome.value,
            actions=len(actions),
        )
        return AgentTurn(message=saved)

    async def _summary_text(
        self, results: list[ExecutionResultItem], outcome: ExecutionOutcome
    ) -> str:
        lines = result_lines(results)
        try:
            text = await self.llm.generate(
                prompt="Tool execution results:\n" + "\n".join(lines),
                system_prompt=SUMMARY_PROMPT,
                temperature=0.2,
                max_tokens=500,
            )
        except LLMError as e:
            # The actions already ran; fall back to the raw lines
            logger.warning("execution_summary_failed", error=str(e))
            text = ""
        text = text.strip() or "Execution results:\n" + "\n".join(lines)
        if outcome is ExecutionOutcome.UNVERIFIED:
            text += f"\n\n{UNVERIFIED_NOTE}"
        return text

    # ------------------------------------------------------------------------
    # PROJECT CONTEXT
    # ------------------------------------------------------------------------

    async def build_project_context(self, ctx: ToolContext) -> str:
        """Compact id tables the model can refer to without a read tool call."""
        resources = [
            Resource.SCENES,
            Resource.CAST_MEMBERS,
            Resource.LOCATIONS,
            Resource.SHOOTING_DAYS,
            Resource.CREW_MEMBERS,
            Resource.ELEMENTS,
        ]
        # Every read settles before the first failure is re-raised
        responses = await asyncio.gather(
            *(self.production.get_all(r, ctx.project_id) for r in resources),
            return_exceptions=True,
        )
        for resp in responses:
            if isinstance(resp, BaseException):
                raise resp
        data = {
            r: (resp.data if resp.ok and isinstance(resp.data, list) else [])
            for r, resp in zip(resources, responses)
        }
        scenes = data[Resource.SCENES]
        cast = data[Resource.CAST_MEMBERS]
        locations = data[Resource.LOCATIONS]
        days = data[Resource.SHOOTING_DAYS]
        crew = data[Resource.CREW_MEMBERS]
        elements = data[Resource.ELEMENTS]

        lines = [
            f"Counts: {len(scenes)} scenes, {len(days)} shoot days, {len(locations)} locations, "
            f"{len(cast)} cast, {len(crew)} crew, {len(elements)} elements"
        ]

        if scenes:
            lines.append("Scenes (id | number | set | INT/EXT | time | pages | status):")
            for s in scenes[:CONTEXT_SCENE_ROWS]:
                lines.append(
                    f"  {s.get('id')} | {s.get('sceneNumber')} | {s.get('setName') or '-'} | "
                    f"{s.get('intExt')}/{s.get('dayNight')} | {s.get('pageCount') or 1}pg | "
                    f"{s.get('status')}"
                )
            if len(scenes) > CONTEXT_SCENE_ROWS:
                lines.append(f"  ... +{len(scenes) - CONTEXT_SCENE_ROWS} more")

        if cast:
            lines.append("Cast (id | character | actor | status):")
            for c in cast:
                lines.append(
                    f"  {c.get('id')} | {c.get('characterName')} | "
                    f"{c.get('actorName') or '-'} | {c.get('workStatus')}"
                )

        if locations:
            lines.append("Locations (id | name | type | permit):")
            for loc in locations:
                lines.append(
                    f"  {loc.get('id')} | {loc.get('name')} | "
                    f"{loc.get('locationType') or '-'} | {loc.get('permitStatus')}"
                )

        if days:
            lines.append("Shooting Days (id | day# | date | call | wrap | status):")
            for d in days:
                lines.append(
                    f"  {d.get('id')} | Day {d.get('dayNumber')} | {str(d.get('date'))[:10]} | "
                    f"{d.get('generalCall') or '-'} | {d.get('estimatedWrap') or '-'} | "
                    f"{d.get('status')}"
                )

        if crew:
            lines.append("Crew (id | name | role | dept):")
            for member in crew[:CONTEXT_CREW_ROWS]:
                lines.append(
                    f"  {member.get('id')} | {member.get('name')} | "
                    f"{member.get('role')} | {member.get('department')}"
                )
            if len(crew) > CONTEXT_CREW_ROWS:
                lines.append(f"  ... +{len(crew) - CONTEXT_CREW_ROWS} more")

        if elements:
            by_category = Counter(e.get("category") for e in elements)
            lines.append("Elements by category:")
            for category, count in sorted(by_category.items(), key=lambda kv: str(kv[0])):
                lines.append(f"  {category}: {count}")

        return "\n".join(lines)
