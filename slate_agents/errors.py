"""Agent error types.

Planning and budget errors end a turn with an explanatory assistant message;
nothing has executed when they are raised.
"""


class AgentError(Exception):
    """Base exception for agent orchestration errors."""

    pass


class PlanningError(AgentError):
    """The model asked for something that cannot be planned.

    Unknown tool name, arguments that are not a JSON object, or arguments
    that fail the tool's input model.
    """

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message)
        self.tool_name = tool_name


class CallBudgetExceededError(AgentError):
    """The read-tool loop hit its iteration ceiling."""

    def __init__(self, iterations: int):
        super().__init__(f"Could not complete within call budget ({iterations} iterations)")
        self.iterations = iterations


class ProjectAccessDeniedError(AgentError):
    """The user is not a member of the project."""

    def __init__(self, project_id: str):
        super().__init__(f"No access to project {project_id}")
        self.project_id = project_id
