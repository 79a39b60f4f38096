"""Human-readable sentences for planned actions.

Shown on the confirmation prompt so a user can approve a plan without
reading raw arguments.
"""

from typing import Any, Callable


def _or_unknown(value: Any) -> str:
    return "?" if value in (None, "") else str(value)


def _create_scene(args: dict[str, Any]) -> str:
    text = f"Create scene {_or_unknown(args.get('scene_number'))}"
    if args.get("set_name"):
        text += f" - {args.get('int_ext') or ''}. {args['set_name']} - {args.get('day_night') or ''}"
    return text


_TEMPLATES: dict[str, Callable[[dict[str, Any]], str]] = {
    "create_scene": _create_scene,
    "update_scene": lambda a: f"Update scene ({a.get('scene_id')})",
    "delete_scene": lambda a: f"Delete scene ({a.get('scene_id')})",
    "assign_scene_to_day": lambda a: "Assign scene to shooting day",
    "add_cast_to_scene": lambda a: "Link cast member to scene",
    "create_cast_member": lambda a: f"Create cast member: {_or_unknown(a.get('character_name'))}",
    "update_cast_member": lambda a: f"Update cast member ({a.get('cast_member_id')})",
    "delete_cast_member": lambda a: f"Delete cast member ({a.get('cast_member_id')})",
    "create_location": lambda a: f"Create location: {_or_unknown(a.get('name'))}",
    "update_location": lambda a: f"Update location ({a.get('location_id')})",
    "delete_location": lambda a: f"Delete location ({a.get('location_id')})",
    "create_element": lambda a: (
        f"Create element: {_or_unknown(a.get('name'))} ({_or_unknown(a.get('category'))})"
    ),
    "delete_element": lambda a: f"Delete element ({a.get('element_id')})",
    "create_shooting_day": lambda a: (
        f"Create shooting day {_or_unknown(a.get('day_number'))} on {_or_unknown(a.get('date'))}"
    ),
    "update_shooting_day": lambda a: f"Update shooting day ({a.get('shooting_day_id')})",
    "delete_shooting_day": lambda a: f"Delete shooting day ({a.get('shooting_day_id')})",
    "create_crew_member": lambda a: (
        f"Add crew member: {_or_unknown(a.get('name'))} ({_or_unknown(a.get('role'))})"
    ),
}


def describe_action(tool_name: str, args: dict[str, Any]) -> str:
    """Describe one planned call; unknown tools fall back to their name."""
    template = _TEMPLATES.get(tool_name)
    if template is None:
        return tool_name.replace("_", " ").capitalize()
    return template(args)
