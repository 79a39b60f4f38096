"""SQLAlchemy Async Models.

Driver: asyncpg ONLY (no psycopg2)
"""

from sqlalchemy import Column, Index, Text, TIMESTAMP
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class AgentChatMessage(Base):
    """One chat turn. `metadata_json` is written once, at insert."""

    __tablename__ = "agent_chat_messages"

    id = Column(UUID(as_uuid=True), primary_key=True)
    project_id = Column(Text, nullable=False)
    user_id = Column(Text, nullable=False)
    role = Column(Text, nullable=False)  # user, assistant
    content = Column(Text, nullable=False)
    metadata_json = Column(JSONB)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_agent_chat_messages_scope_created", "project_id", "user_id", "created_at"),
    )


class AgentConfirmation(Base):
    """A plan held for human approval."""

    __tablename__ = "agent_confirmations"

    id = Column(Text, primary_key=True)  # secrets.token_urlsafe(32)
    project_id = Column(Text, nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)
    status = Column(Text, nullable=False, index=True)  # pending, approved, declined, expired
    actions = Column(JSONB, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    resolved_at = Column(TIMESTAMP(timezone=True))
