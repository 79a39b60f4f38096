"""Cast member tools."""

from slate_tools.adapters.production.client import ProductionClient, Resource
from slate_tools.adapters.production.schemas import (
    CreateCastMemberInput,
    DeleteCastMemberInput,
    UpdateCastMemberInput,
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


def build_cast_tools(client: ProductionClient) -> list[ToolDefinition]:
    async def create_cast_member(args: CreateCastMemberInput, ctx: ToolContext) -> ToolResult:
        return to_result(
            await client.create(Resource.CAST_MEMBERS, ctx.project_id, api_fields(args))
        )

    async def verify_create_cast_member(
        args: CreateCastMemberInput, result: ToolResult, ctx: ToolContext
    ) -> VerificationResult:
        if not result.success or not result.data:
            return failed_verification("Cast member created", result)
        issues = field_mismatches(args, result.data, ["character_name"])
        return VerificationResult(
            verified=not issues,
            expected=f"Created {args.character_name}",
            actual=f"Created {result.data.get('characterName')}",
            discrepancies=issues,
        )

    return [
        read_tool(
            client,
            "get_cast",
            "Get all cast members for the project. Returns character names, actor names, "
            "work status, and cast numbers.",
            Resource.CAST_MEMBERS,
        ),
        ToolDefinition(
            name="create_cast_member",
            description="Create a new cast member (character) in the project.",
            tier=ToolTier.MUTATE,
            input_model=CreateCastMemberInput,
            execute=create_cast_member,
            verify=verify_create_cast_member,
        ),
        update_tool(
            client,
            "update_cast_member",
            "Update an existing cast member.",
            Resource.CAST_MEMBERS,
            UpdateCastMemberInput,
            id_field="cast_member_id",
        ),
        delete_tool(
            client,
            "delete_cast_member",
            "Permanently delete a cast member from the project.",
            Resource.CAST_MEMBERS,
            DeleteCastMemberInput,
            id_field="cast_member_id",
        ),
    ]
