"""Slate durable memory: chat history and pending confirmations (Postgres)."""

from slate_memory.exceptions import (
    ConfirmationAlreadyResolvedError,
    ConfirmationError,
    ConfirmationExpiredError,
    ConfirmationNotFoundError,
)
from slate_memory.stores import ChatMessageStore, ConfirmationRecord, ConfirmationStore

__all__ = [
    "ChatMessageStore",
    "ConfirmationRecord",
    "ConfirmationStore",
    "ConfirmationError",
    "ConfirmationNotFoundError",
    "ConfirmationExpiredError",
    "ConfirmationAlreadyResolvedError",
]
