"""Production element tools (props, wardrobe, vehicles, ...)."""

from slate_tools.adapters.production.client import ProductionClient, Resource
from slate_tools.adapters.production.schemas import CreateElementInput, DeleteElementInput
from slate_tools.adapters.production.tools.common import (
    api_fields,
    delete_tool,
    failed_verification,
    field_mismatches,
    read_tool,
    to_result,
)
from slate_tools.base import (
    ToolContext,
    ToolDefinition,
    ToolResult,
    ToolTier,
    VerificationResult,
)


def build_element_tools(client: ProductionClient) -> list[ToolDefinition]:
    async def create_element(args: CreateElementInput, ctx: ToolContext) -> ToolResult:
        return to_result(await client.create(Resource.ELEMENTS, ctx.project_id, api_fields(args)))

    async def verify_create_element(
        args: CreateElementInput, result: ToolResult, ctx: ToolContext
    ) -> VerificationResult:
        if not result.success or not result.data:
            return failed_verification("Element created", result)
        element = result.data
        issues = field_mismatches(args, element, ["name", "category"])
        return VerificationResult(
            verified=not issues,
            expected=f"Created {args.name}",
            actual=f"Created {element.get('name')} ({element.get('category')})",
            discrepancies=issues,
        )

    return [
        read_tool(
            client,
            "get_elements",
            "Get all production elements (props, wardrobe, vehicles, etc.) for the project.",
            Resource.ELEMENTS,
        ),
        ToolDefinition(
            name="create_element",
            description="Create a new production element (prop, wardrobe item, vehicle, etc.).",
            tier=ToolTier.MUTATE,
            input_model=CreateElementInput,
            execute=create_element,
            verify=verify_create_element,
        ),
        delete_tool(
            client,
            "delete_element",
            "Permanently delete a production element.",
            Resource.ELEMENTS,
            DeleteElementInput,
            id_field="element_id",
        ),
    ]
