"""Crew member tools."""

from slate_tools.adapters.production.client import ProductionClient, Resource
from slate_tools.adapters.production.schemas import CreateCrewMemberInput
from slate_tools.adapters.production.tools.common import api_fields, read_tool, to_result
from slate_tools.base import ToolContext, ToolDefinition, ToolResult, ToolTier


def build_crew_tools(client: ProductionClient) -> list[ToolDefinition]:
    async def create_crew_member(args: CreateCrewMemberInput, ctx: ToolContext) -> ToolResult:
        return to_result(
            await client.create(Resource.CREW_MEMBERS, ctx.project_id, api_fields(args))
        )

    return [
        read_tool(
            client,
            "get_crew",
            "Get all crew members for the project. Returns names, roles, and departments.",
            Resource.CREW_MEMBERS,
        ),
        ToolDefinition(
            name="create_crew_member",
            description="Add a new crew member to the project.",
            tier=ToolTier.MUTATE,
            input_model=CreateCrewMemberInput,
            execute=create_crew_member,
        ),
    ]
