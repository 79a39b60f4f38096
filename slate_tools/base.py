"""Tool Interface & Metadata.

Shared types for the tiered tool system: tiers, execution context, results,
verification records and the immutable tool definition itself.
"""

from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

# "$0.id" -> result data of action 0, key "id". Path segments start with a
# letter or underscore so money-like text such as "$1.50" is left alone.
REFERENCE_PATTERN = r"\$(\d+)\.([A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)"

# Entity ids become URL path segments: no slashes, dots or percent signs.
ENTITY_ID_PATTERN = rf"^(?:[A-Za-z0-9_-]+|{REFERENCE_PATTERN})$"


class ToolTier(str, Enum):
    """Risk tier of a tool, fixed at registration."""

    READ = "read"  # no observable side effect
    MUTATE = "mutate"  # creates or updates data reversibly
    DESTRUCTIVE = "destructive"  # deletes or otherwise loses data


class ToolContext(BaseModel):
    """Authorization and tenancy scope for one request."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    user_id: str


class ToolResult(BaseModel):
    """Outcome of a single tool execution."""

    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "ToolResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ToolResult":
        return cls(success=False, error=error)


class VerificationResult(BaseModel):
    """Structured diff between requested intent and observed result."""

    verified: bool
    expected: str
    actual: str
    discrepancies: list[str] = Field(default_factory=list)


class ToolInput(BaseModel):
    """Base class for per-tool argument models.

    Unknown keys are rejected so a hallucinated argument fails fast at the
    boundary instead of being silently dropped.
    """

    model_config = ConfigDict(extra="forbid")

    def provided(self) -> dict[str, Any]:
        """Arguments the caller actually supplied (unset optionals omitted)."""
        return self.model_dump(exclude_unset=True)


ExecuteFn = Callable[[Any, ToolContext], Awaitable[ToolResult]]
VerifyFn = Callable[[Any, ToolResult, ToolContext], Awaitable[VerificationResult]]


class ToolDefinition(BaseModel):
    """A named, schema-described operation the model may invoke.

    `execute` receives a validated instance of `input_model`. It returns a
    failed ToolResult for expected business failures and raises only for
    truly exceptional conditions (network loss, store unavailable).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str
    tier: ToolTier
    input_model: type[ToolInput]
    execute: ExecuteFn
    verify: VerifyFn | None = None

    @property
    def parameter_schema(self) -> dict[str, Any]:
        """JSON schema of accepted arguments."""
        schema = self.input_model.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        schema.setdefault("required", [])
        return schema

    def parse_args(self, args: dict[str, Any]) -> ToolInput:
        """Validate raw arguments. Raises pydantic.ValidationError."""
        return self.input_model.model_validate(args)

    def to_openai_tool(self) -> dict[str, Any]:
        """Function-calling schema handed to the model."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameter_schema,
            },
        }
