"""Tool system exceptions."""


class ToolError(Exception):
    """Base exception for the tool system."""

    pass


class ToolRegistrationError(ToolError):
    """Duplicate name, or registration after the registry was frozen."""

    pass


class UnknownToolError(ToolError):
    """No tool registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ProductionUnavailableError(ToolError):
    """Production API unreachable or failing (network loss, 5xx).

    Fatal for the current turn and safe to retry.
    """

    pass
