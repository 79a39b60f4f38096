"""Durable stores for the agent.

ConfirmationStore holds plans awaiting approval; ChatMessageStore holds the
conversation. Both live in Postgres so any replica can pick up the next
request of a conversation.
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, TypeAdapter
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from slate_agents.models import (
    AgentMessageMetadata,
    ChatMessage,
    ConfirmationRequest,
    ConfirmationStatus,
    PlannedAction,
)
from slate_memory.exceptions import (
    ConfirmationAlreadyResolvedError,
    ConfirmationExpiredError,
    ConfirmationNotFoundError,
)
from slate_memory.models import AgentChatMessage, AgentConfirmation
from slate_obs.logging import get_logger
from slate_tools.base import ToolContext

logger = get_logger(__name__)

_metadata_adapter = TypeAdapter(AgentMessageMetadata)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConfirmationRecord(BaseModel):
    """Read-only view of a stored confirmation."""

    confirmation_id: str
    project_id: str
    user_id: str
    status: ConfirmationStatus
    actions: list[PlannedAction]
    created_at: datetime
    expires_at: datetime
    resolved_at: datetime | None = None


# ============================================================================
# CONFIRMATIONS
# ============================================================================


class ConfirmationStore:
    """Pending plans keyed by an unguessable id.

    Resolution is a single conditional UPDATE on `status = 'pending'`, so two
    concurrent approvals of the same id cannot both win.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], ttl_seconds: int = 3600):
        self.session_factory = session_factory
        self.ttl_seconds = ttl_seconds

    async def create(self, ctx: ToolContext, actions: list[PlannedAction]) -> ConfirmationRequest:
        """Persist a plan and return its confirmation id."""
        confirmation_id = secrets.token_urlsafe(32)
        now = _utcnow()
        expires_at = now + timedelta(seconds=self.ttl_seconds)

        async with self.session_factory() as session:
            session.add(
                AgentConfirmation(
                    id=confirmation_id,
                    project_id=ctx.project_id,
                    user_id=ctx.user_id,
                    status=ConfirmationStatus.PENDING.value,
                    actions=[a.model_dump(mode="json") for a in actions],
                    created_at=now,
                    expires_at=expires_at,
                )
            )
            await session.commit()

        logger.info(
            "confirmation_created",
            project_id=ctx.project_id,
            user_id=ctx.user_id,
            actions=len(actions),
            expires_at=expires_at.isoformat(),
        )
        return ConfirmationRequest(
            confirmation_id=confirmation_id, actions=actions, expires_at=expires_at
        )

    async def resolve(
        self, ctx: ToolContext, confirmation_id: str, approved: bool
    ) -> list[PlannedAction]:
        """Resolve a pending confirmation exactly once.

        Returns:
            The stored actions in plan order

        Raises:
            ConfirmationNotFoundError: Unknown id, or owned by another project/user
            ConfirmationExpiredError: TTL elapsed (row is marked expired)
            ConfirmationAlreadyResolvedError: Approved or declined earlier
        """
        now = _utcnow()
        new_status = ConfirmationStatus.APPROVED if approved else ConfirmationStatus.DECLINED
        scope = (
            AgentConfirmation.id == confirmation_id,
            AgentConfirmation.project_id == ctx.project_id,
            AgentConfirmation.user_id == ctx.user_id,
        )

        async with self.session_factory() as session:
            claimed = await session.execute(
                update(AgentConfirmation)
                .where(
                    *scope,
                    AgentConfirmation.status == ConfirmationStatus.PENDING.value,
                    AgentConfirmation.expires_at > now,
                )
                .values(status=new_status.value, resolved_at=now)
                .returning(AgentConfirmation.actions)
                .execution_options(synchronize_session=False)
            )
            row = claimed.first()
            if row is not None:
                await session.commit()
                logger.info(
                    "confirmation_resolved",
                    confirmation_id=confirmation_id[:8],
                    project_id=ctx.project_id,
                    status=new_status.value,
                )
                return [PlannedAction.model_validate(a) for a in row.actions]

            existing = (
                await session.execute(select(AgentConfirmation).where(*scope))
            ).scalar_one_or_none()

            if existing is None:
                raise ConfirmationNotFoundError(confirmation_id)

            if existing.status == ConfirmationStatus.EXPIRED.value:
                raise ConfirmationExpiredError(confirmation_id)

            if existing.status == ConfirmationStatus.PENDING.value:
                # Pending but past its expiry: treat as implicitly declined
                existing.status = ConfirmationStatus.EXPIRED.value
                existing.resolved_at = now
                await session.commit()
                logger.info("confirmation_expired", confirmation_id=confirmation_id[:8])
                raise ConfirmationExpiredError(confirmation_id)

            raise ConfirmationAlreadyResolvedError(confirmation_id, existing.status)

    async def expire_stale(self) -> int:
        """Mark every pending confirmation past its expiry as expired."""
        now = _utcnow()
        async with self.session_factory() as session:
            result = await session.execute(
                update(AgentConfirmation)
                .where(
                    AgentConfirmation.status == ConfirmationStatus.PENDING.value,
                    AgentConfirmation.expires_at <= now,
                )
                .values(status=ConfirmationStatus.EXPIRED.value, resolved_at=now)
                .execution_options(synchronize_session=False)
            )
            await session.commit()

        if result.rowcount:
            logger.info("confirmations_expired", count=result.rowcount)
        return result.rowcount or 0

    async def get(self, confirmation_id: str) -> ConfirmationRecord | None:
        async with self.session_factory() as session:
            row = await session.get(AgentConfirmation, confirmation_id)
            if row is None:
                return None
            return ConfirmationRecord(
                confirmation_id=row.id,
                project_id=row.project_id,
                user_id=row.user_id,
                status=ConfirmationStatus(row.status),
                actions=[PlannedAction.model_validate(a) for a in row.actions],
                created_at=row.created_at,
                expires_at=row.expires_at,
                resolved_at=row.resolved_at,
            )


# ============================================================================
# CHAT HISTORY
# ============================================================================


class ChatMessageStore:
    """Per-project, per-user conversation log."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def add(
        self,
        ctx: ToolContext,
        role: str,
        content: str,
        metadata: AgentMessageMetadata | None = None,
    ) -> ChatMessage:
        message_id = uuid.uuid4()
        created_at = _utcnow()

        async with self.session_factory() as session:
            session.add(
                AgentChatMessage(
                    id=message_id,
                    project_id=ctx.project_id,
                    user_id=ctx.user_id,
                    role=role,
                    content=content,
                    metadata_json=metadata.model_dump(mode="json") if metadata else None,
                    created_at=created_at,
                )
            )
            await session.commit()

        return ChatMessage(
            id=str(message_id),
            project_id=ctx.project_id,
            user_id=ctx.user_id,
            role=role,
            content=content,
            metadata=metadata,
            created_at=created_at,
        )

    async def history(self, ctx: ToolContext, limit: int = 30) -> list[ChatMessage]:
        """Most recent `limit` messages, oldest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(AgentChatMessage)
                .where(
                    AgentChatMessage.project_id == ctx.project_id,
                    AgentChatMessage.user_id == ctx.user_id,
                )
                .order_by(AgentChatMessage.created_at.desc())
                .limit(limit)
            )
            rows = result.scalars().all()

        return [self._to_message(row) for row in reversed(rows)]

    @staticmethod
    def _to_message(row: AgentChatMessage) -> ChatMessage:
        return ChatMessage(
            id=str(row.id),
            project_id=row.project_id,
            user_id=row.user_id,
            role=row.role,
            content=row.content,
            metadata=(
                _metadata_adapter.validate_python(row.metadata_json) if row.metadata_json else None
            ),
            created_at=row.created_at,
        )
