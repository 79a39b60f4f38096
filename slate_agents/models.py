"""Agent data model.

Plans, confirmations, execution results and the chat message metadata
variants that record which of them a message carries.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from slate_tools.base import ToolResult, ToolTier, VerificationResult


class PlannedAction(BaseModel):
    """A proposed tool invocation plus a sentence describing its effect."""

    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)
    tier: ToolTier
    description: str


class ConfirmationRequest(BaseModel):
    confirmation_id: str
    actions: list[PlannedAction]
    expires_at: datetime


class ConfirmationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    EXPIRED = "expired"


class ExecutionResultItem(BaseModel):
    """One executed action: input, output and (optional) verification."""

    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)
    result: ToolResult
    verification: VerificationResult | None = None


class ExecutionOutcome(str, Enum):
    COMPLETED = "completed"  # every action succeeded and verified (or had no verifier)
    UNVERIFIED = "unverified"  # every action succeeded, some verifications disagree
    PARTIAL = "partial"  # some actions failed
    FAILED = "failed"  # every action failed


# ============================================================================
# MESSAGE METADATA (tagged on `type`)
# ============================================================================


class ToolCallsAutoMetadata(BaseModel):
    type: Literal["tool_calls_auto"] = "tool_calls_auto"
    tools: list[str] = Field(default_factory=list)


class ConfirmationRequestMetadata(BaseModel):
    type: Literal["tool_confirmation_request"] = "tool_confirmation_request"
    confirmation_id: str
    actions: list[PlannedAction]
    expires_at: datetime


class ExecutionResultMetadata(BaseModel):
    type: Literal["tool_execution_result"] = "tool_execution_result"
    confirmation_id: str
    outcome: ExecutionOutcome
    results: list[ExecutionResultItem]


class ConfirmationDeclinedMetadata(BaseModel):
    type: Literal["confirmation_declined"] = "confirmation_declined"
    confirmation_id: str


AgentMessageMetadata = Annotated[
    Union[
        ToolCallsAutoMetadata,
        ConfirmationRequestMetadata,
        ExecutionResultMetadata,
        ConfirmationDeclinedMetadata,
    ],
    Field(discriminator="type"),
]


class ChatMessage(BaseModel):
    id: str
    project_id: str
    user_id: str
    role: Literal["user", "assistant"]
    content: str
    metadata: AgentMessageMetadata | None = None
    created_at: datetime
