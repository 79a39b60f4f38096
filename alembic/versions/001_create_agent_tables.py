"""create agent_chat_messages and agent_confirmations tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create agent_chat_messages table
    op.create_table(
        'agent_chat_messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('project_id', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('metadata_json', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("role IN ('user', 'assistant')", name='ck_agent_chat_messages_role'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_agent_chat_messages_scope_created',
        'agent_chat_messages',
        ['project_id', 'user_id', 'created_at'],
        unique=False,
    )

    # Create agent_confirmations table
    op.create_table(
        'agent_confirmations',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('project_id', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('actions', postgresql.JSONB(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('resolved_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'declined', 'expired')",
            name='ck_agent_confirmations_status',
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_agent_confirmations_project_id'), 'agent_confirmations', ['project_id'], unique=False)
    op.create_index(op.f('ix_agent_confirmations_user_id'), 'agent_confirmations', ['user_id'], unique=False)
    op.create_index(op.f('ix_agent_confirmations_status'), 'agent_confirmations', ['status'], unique=False)
    op.create_index(op.f('ix_agent_confirmations_expires_at'), 'agent_confirmations', ['expires_at'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(op.f('ix_agent_confirmations_expires_at'), table_name='agent_confirmations')
    op.drop_index(op.f('ix_agent_confirmations_status'), table_name='agent_confirmations')
    op.drop_index(op.f('ix_agent_confirmations_user_id'), table_name='agent_confirmations')
    op.drop_index(op.f('ix_agent_confirmations_project_id'), table_name='agent_confirmations')
    op.drop_index('ix_agent_chat_messages_scope_created', table_name='agent_chat_messages')

    op.drop_table('agent_confirmations')
    op.drop_table('agent_chat_messages')
