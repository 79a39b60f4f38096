"""Confirmation protocol errors.

Each one means nothing was executed by this request; the subclasses let a
client tell "never existed" apart from "too late" and "already handled".
"""


class ConfirmationError(Exception):
    """Base exception for confirmation resolution failures."""

    code = "confirmation_error"

    def __init__(self, confirmation_id: str, message: str):
        super().__init__(message)
        self.confirmation_id = confirmation_id


class ConfirmationNotFoundError(ConfirmationError):
    code = "confirmation_not_found"

    def __init__(self, confirmation_id: str):
        super().__init__(confirmation_id, "Confirmation not found")


class ConfirmationExpiredError(ConfirmationError):
    code = "confirmation_expired"

    def __init__(self, confirmation_id: str):
        super().__init__(confirmation_id, "Confirmation has expired")


class ConfirmationAlreadyResolvedError(ConfirmationError):
    code = "confirmation_already_resolved"

    def __init__(self, confirmation_id: str, status: str):
        super().__init__(confirmation_id, f"Confirmation already {status}")
        self.status = status
