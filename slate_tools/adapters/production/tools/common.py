"""Shared builders for production tools."""

from typing import Any, Iterable

from pydantic.alias_generators import to_camel

from slate_tools.adapters.production.client import CrudResponse, ProductionClient, Resource
from slate_tools.adapters.production.schemas import NoArgs
from slate_tools.base import (
    ToolContext,
    ToolDefinition,
    ToolInput,
    ToolResult,
    ToolTier,
    VerificationResult,
)


def to_result(response: CrudResponse, data: Any = None) -> ToolResult:
    """Adapt a CRUD envelope into a ToolResult.

    Args:
        response: Envelope returned by ProductionClient
        data: Replacement payload on success (e.g. {"deleted": True})
    """
    if not response.ok:
        return ToolResult.fail(response.error or "Failed")
    return ToolResult.ok(response.data if data is None else data)


def api_fields(args: ToolInput, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """Provided arguments, camelCased for the production API."""
    skip = set(exclude)
    return {to_camel(k): v for k, v in args.provided().items() if k not in skip}


def failed_verification(expected: str, result: ToolResult) -> VerificationResult:
    return VerificationResult(
        verified=False,
        expected=expected,
        actual="Operation failed",
        discrepancies=[result.error or "No data returned"],
    )


def field_mismatches(args: ToolInput, entity: Any, fields: Iterable[str]) -> list[str]:
    """Compare provided argument values with the returned entity (camelCase keys)."""
    provided = args.provided()
    record = entity if isinstance(entity, dict) else {}
    issues = []
    for field in fields:
        if field not in provided:
            continue
        expected = provided[field]
        actual = record.get(to_camel(field))
        if actual != expected:
            issues.append(f'{to_camel(field)}: expected "{expected}", got "{actual}"')
    return issues


def read_tool(
    client: ProductionClient,
    name: str,
    description: str,
    resource: Resource,
) -> ToolDefinition:
    """Build a read-tier "get all" tool for one entity type."""

    async def execute(args: NoArgs, ctx: ToolContext) -> ToolResult:
        return to_result(await client.get_all(resource, ctx.project_id))

    return ToolDefinition(
        name=name,
        description=description,
        tier=ToolTier.READ,
        input_model=NoArgs,
        execute=execute,
    )


def update_tool(
    client: ProductionClient,
    name: str,
    description: str,
    resource: Resource,
    input_model: type[ToolInput],
    id_field: str,
    verify=None,
) -> ToolDefinition:
    """Build a mutate-tier update tool that forwards only provided fields."""

    async def execute(args: ToolInput, ctx: ToolContext) -> ToolResult:
        entity_id = getattr(args, id_field)
        fields = api_fields(args, exclude=[id_field])
        if not fields:
            return ToolResult.fail("No fields to update")
        return to_result(await client.update(resource, ctx.project_id, entity_id, fields))

    return ToolDefinition(
        name=name,
        description=description,
        tier=ToolTier.MUTATE,
        input_model=input_model,
        execute=execute,
        verify=verify,
    )


def delete_tool(
    client: ProductionClient,
    name: str,
    description: str,
    resource: Resource,
    input_model: type[ToolInput],
    id_field: str,
    verify=None,
) -> ToolDefinition:
    """Build a destructive-tier delete tool."""

    async def execute(args: ToolInput, ctx: ToolContext) -> ToolResult:
        entity_id = getattr(args, id_field)
        response = await client.delete(resource, ctx.project_id, entity_id)
        return to_result(response, data={"deleted": True, "id": entity_id})

    return ToolDefinition(
        name=name,
        description=description,
        tier=ToolTier.DESTRUCTIVE,
        input_model=input_model,
        execute=execute,
        verify=verify,
    )
