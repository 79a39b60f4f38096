"""Filming location tools."""

from slate_tools.adapters.production.client import ProductionClient, Resource
from slate_tools.adapters.production.schemas import (
    CreateLocationInput,
    DeleteLocationInput,
    UpdateLocationInput,
)
from slate_tools.adapters.production.tools.common import (
    api_fields,
    delete_tool,
    failed_verification,
    field_mismatches,
    read_tool,
    to_result,
    update_tool,
)
from slate_tools.base import (
    ToolContext,
    ToolDefinition,
    ToolResult,
    ToolTier,
    VerificationResult,
)


def build_location_tools(client: ProductionClient) -> list[ToolDefinition]:
    async def create_location(args: CreateLocationInput, ctx: ToolContext) -> ToolResult:
        return to_result(await client.create(Resource.LOCATIONS, ctx.project_id, api_fields(args)))

    async def verify_create_location(
        args: CreateLocationInput, result: ToolResult, ctx: ToolContext
    ) -> VerificationResult:
        if not result.success or not result.data:
            return failed_verification("Location created", result)
        issues = field_mismatches(args, result.data, ["name"])
        return VerificationResult(
            verified=not issues,
            expected=f"Created {args.name}",
            actual=f"Created {result.data.get('name')}",
            discrepancies=issues,
        )

    return [
        read_tool(
            client,
            "get_locations",
            "Get all locations for the project. Returns names, addresses, permit status, "
            "and location type.",
            Resource.LOCATIONS,
        ),
        ToolDefinition(
            name="create_location",
            description="Create a new filming location.",
            tier=ToolTier.MUTATE,
            input_model=CreateLocationInput,
            execute=create_location,
            verify=verify_create_location,
        ),
        update_tool(
            client,
            "update_location",
            "Update an existing location.",
            Resource.LOCATIONS,
            UpdateLocationInput,
            id_field="location_id",
        ),
        delete_tool(
            client,
            "delete_location",
            "Permanently delete a location from the project.",
            Resource.LOCATIONS,
            DeleteLocationInput,
            id_field="location_id",
        ),
    ]
