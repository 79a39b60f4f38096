"""Shooting day (schedule) tools."""

from slate_tools.adapters.production.client import ProductionClient, Resource
from slate_tools.adapters.production.schemas import (
    CreateShootingDayInput,
    DeleteShootingDayInput,
    UpdateShootingDayInput,
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


def build_shooting_day_tools(client: ProductionClient) -> list[ToolDefinition]:
    async def create_shooting_day(args: CreateShootingDayInput, ctx: ToolContext) -> ToolResult:
        return to_result(
            await client.create(Resource.SHOOTING_DAYS, ctx.project_id, api_fields(args))
        )

    async def verify_create_shooting_day(
        args: CreateShootingDayInput, result: ToolResult, ctx: ToolContext
    ) -> VerificationResult:
        if not result.success or not result.data:
            return failed_verification("Shooting day created", result)
        day = result.data
        issues = field_mismatches(args, day, ["day_number"])
        return VerificationResult(
            verified=not issues,
            expected=f"Day {args.day_number}",
            actual=f"Day {day.get('dayNumber')} on {day.get('date')}",
            discrepancies=issues,
        )

    return [
        read_tool(
            client,
            "get_shooting_days",
            "Get all shooting days for the project. Returns dates, day numbers, call/wrap "
            "times, status, and assigned scenes.",
            Resource.SHOOTING_DAYS,
        ),
        ToolDefinition(
            name="create_shooting_day",
            description="Create a new shooting day in the schedule.",
            tier=ToolTier.MUTATE,
            input_model=CreateShootingDayInput,
            execute=create_shooting_day,
            verify=verify_create_shooting_day,
        ),
        update_tool(
            client,
            "update_shooting_day",
            "Update an existing shooting day.",
            Resource.SHOOTING_DAYS,
            UpdateShootingDayInput,
            id_field="shooting_day_id",
        ),
        delete_tool(
            client,
            "delete_shooting_day",
            "Permanently delete a shooting day from the schedule.",
            Resource.SHOOTING_DAYS,
            DeleteShootingDayInput,
            id_field="shooting_day_id",
        ),
    ]
