"""Scene tools: list, create, update, delete, schedule, link cast."""

from slate_tools.adapters.production.client import ProductionClient, Resource
from slate_tools.adapters.production.schemas import (
    AddCastToSceneInput,
    AssignSceneToDayInput,
    CreateSceneInput,
    DeleteSceneInput,
    UpdateSceneInput,
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

UPDATABLE_CHECKED_FIELDS = ("scene_number", "int_ext", "day_night", "set_name", "synopsis", "status")


def build_scene_tools(client: ProductionClient) -> list[ToolDefinition]:
    """Scene tools bound to a production client."""

    async def create_scene(args: CreateSceneInput, ctx: ToolContext) -> ToolResult:
        return to_result(await client.create(Resource.SCENES, ctx.project_id, api_fields(args)))

    async def verify_create_scene(
        args: CreateSceneInput, result: ToolResult, ctx: ToolContext
    ) -> VerificationResult:
        if not result.success or not result.data:
            return failed_verification("Scene created", result)
        scene = result.data
        issues = field_mismatches(args, scene, ["scene_number", "int_ext"])
        return VerificationResult(
            verified=not issues,
            expected=f"Scene {args.scene_number} created",
            actual=(
                f"Scene {scene.get('sceneNumber')} created with id {scene.get('id')}"
                if not issues
                else "; ".join(issues)
            ),
            discrepancies=issues,
        )

    async def verify_update_scene(
        args: UpdateSceneInput, result: ToolResult, ctx: ToolContext
    ) -> VerificationResult:
        if not result.success:
            return failed_verification("Scene updated", result)
        issues = field_mismatches(args, result.data, UPDATABLE_CHECKED_FIELDS)
        return VerificationResult(
            verified=not issues,
            expected="Fields match",
            actual="; ".join(issues) if issues else "All fields match",
            discrepancies=issues,
        )

    async def verify_delete_scene(
        args: DeleteSceneInput, result: ToolResult, ctx: ToolContext
    ) -> VerificationResult:
        if not result.success:
            return failed_verification(f"Scene {args.scene_id} deleted", result)
        lookup = await client.get_one(Resource.SCENES, ctx.project_id, args.scene_id)
        if lookup.not_found:
            return VerificationResult(
                verified=True,
                expected=f"Scene {args.scene_id} absent",
                actual="Scene absent",
                discrepancies=[],
            )
        if not lookup.ok:
            return VerificationResult(
                verified=False,
                expected=f"Scene {args.scene_id} absent",
                actual="Could not re-read scene",
                discrepancies=[lookup.error or "Unknown"],
            )
        return VerificationResult(
            verified=False,
            expected=f"Scene {args.scene_id} absent",
            actual=f"Scene {args.scene_id} still present",
            discrepancies=["Scene still exists after delete"],
        )

    async def assign_scene_to_day(args: AssignSceneToDayInput, ctx: ToolContext) -> ToolResult:
        response = await client.assign_scene_to_shooting_day(
            ctx.project_id,
            args.scene_id,
            args.shooting_day_id,
            args.position if args.position is not None else 0,
        )
        return to_result(
            response,
            data={"assigned": True, "sceneId": args.scene_id, "shootingDayId": args.shooting_day_id},
        )

    async def add_cast_to_scene(args: AddCastToSceneInput, ctx: ToolContext) -> ToolResult:
        response = await client.add_cast_to_scene(ctx.project_id, args.scene_id, args.cast_member_id)
        return to_result(
            response,
            data={"linked": True, "sceneId": args.scene_id, "castMemberId": args.cast_member_id},
        )

    return [
        read_tool(
            client,
            "get_scenes",
            "Get all scenes for the project. Returns scene numbers, locations, INT/EXT, "
            "day/night, page counts, status, and synopsis.",
            Resource.SCENES,
        ),
        ToolDefinition(
            name="create_scene",
            description="Create a new scene in the project.",
            tier=ToolTier.MUTATE,
            input_model=CreateSceneInput,
            execute=create_scene,
            verify=verify_create_scene,
        ),
        update_tool(
            client,
            "update_scene",
            "Update an existing scene. Provide the scene ID and only the fields to change.",
            Resource.SCENES,
            UpdateSceneInput,
            id_field="scene_id",
            verify=verify_update_scene,
        ),
        ToolDefinition(
            name="assign_scene_to_day",
            description="Assign a scene to a shooting day at a given position.",
            tier=ToolTier.MUTATE,
            input_model=AssignSceneToDayInput,
            execute=assign_scene_to_day,
        ),
        ToolDefinition(
            name="add_cast_to_scene",
            description="Link a cast member to a scene.",
            tier=ToolTier.MUTATE,
            input_model=AddCastToSceneInput,
            execute=add_cast_to_scene,
        ),
        delete_tool(
            client,
            "delete_scene",
            "Permanently delete a scene from the project.",
            Resource.SCENES,
            DeleteSceneInput,
            id_field="scene_id",
            verify=verify_delete_scene,
        ),
    ]
