"""
Agent Endpoints.

- POST /agent/messages: run one user turn
- POST /agent/confirmations: approve or decline a pending plan
- GET /agent/confirmations/{confirmation_id}: confirmation status
- GET /agent/messages: chat history for a project
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from apps.core_api.auth import User
from apps.core_api.deps import (
    get_confirmation_store,
    get_current_user,
    get_message_store,
    get_orchestrator,
    scoped_context,
    tool_context,
)
from slate_agents.models import ChatMessage
from slate_agents.orchestrator import AgentOrchestrator, AgentTurn
from slate_config.settings import Settings
from slate_memory.exceptions import ConfirmationNotFoundError
from slate_memory.stores import ChatMessageStore, ConfirmationRecord, ConfirmationStore
from slate_tools.base import ToolContext

router = APIRouter()
settings = Settings()


class MessageRequest(BaseModel):
    project_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class ConfirmationDecision(BaseModel):
    project_id: str = Field(..., min_length=1)
    confirmation_id: str = Field(..., min_length=1)
    approved: bool


class ChatHistoryResponse(BaseModel):
    messages: list[ChatMessage]


@router.post("/messages", response_model=AgentTurn)
async def post_message(
    body: MessageRequest,
    user: User = Depends(get_current_user),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentTurn:
    """Send a message to the agent.

    Read-only questions are answered directly. Requests that change data
    come back with status `pending_confirmation` and a `confirmation_id`.
    """
    message = body.message.strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="message is required")
    if len(message) > settings.MAX_MESSAGE_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Message too long (max {settings.MAX_MESSAGE_LENGTH} chars)",
        )

    ctx = scoped_context(body.project_id, user)
    return await orchestrator.handle_message(ctx, message)


@router.post("/confirmations", response_model=AgentTurn)
async def post_confirmation(
    body: ConfirmationDecision,
    user: User = Depends(get_current_user),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> AgentTurn:
    """Approve or decline a pending plan. Each confirmation resolves once."""
    ctx = scoped_context(body.project_id, user)
    return await orchestrator.resolve_confirmation(ctx, body.confirmation_id, body.approved)


@router.get("/confirmations/{confirmation_id}", response_model=ConfirmationRecord)
async def get_confirmation(
    confirmation_id: str,
    user: User = Depends(get_current_user),
    store: ConfirmationStore = Depends(get_confirmation_store),
) -> ConfirmationRecord:
    record = await store.get(confirmation_id)
    if record is None or record.user_id != user.user_id:
        raise ConfirmationNotFoundError(confirmation_id)
    return record


@router.get("/messages", response_model=ChatHistoryResponse)
async def get_messages(
    ctx: ToolContext = Depends(tool_context),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
    store: ChatMessageStore = Depends(get_message_store),
) -> ChatHistoryResponse:
    await orchestrator.ensure_project_access(ctx)
    messages = await store.history(ctx, limit=settings.CHAT_HISTORY_LIMIT)
    return ChatHistoryResponse(messages=messages)
