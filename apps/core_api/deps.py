"""
FastAPI Dependency Injection.

Provides:
- Authentication context (JWT -> User)
- Agent components built in the application lifespan
"""

from fastapi import Depends, Header, HTTPException, Request, status

from apps.core_api.auth import User, validate_jwt
from slate_agents.orchestrator import AgentOrchestrator
from slate_memory.stores import ChatMessageStore, ConfirmationStore
from slate_obs.logging import bind_tool_context
from slate_tools.base import ToolContext


async def get_current_user(authorization: str | None = Header(default=None)) -> User:
    """Dependency: Authenticated user from the bearer token."""
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await validate_jwt(authorization)


def get_orchestrator(request: Request) -> AgentOrchestrator:
    return request.app.state.orchestrator


def get_confirmation_store(request: Request) -> ConfirmationStore:
    return request.app.state.confirmation_store


def get_message_store(request: Request) -> ChatMessageStore:
    return request.app.state.message_store


def scoped_context(project_id: str, user: User) -> ToolContext:
    """Fresh per-request tenancy scope, also bound into the log context."""
    bind_tool_context(project_id, user.user_id)
    return ToolContext(project_id=project_id, user_id=user.user_id)


async def tool_context(project_id: str, user: User = Depends(get_current_user)) -> ToolContext:
    return scoped_context(project_id, user)
