"""Production tool modules, one per entity type."""

from slate_tools.adapters.production.tools.cast import build_cast_tools
from slate_tools.adapters.production.tools.crew import build_crew_tools
from slate_tools.adapters.production.tools.elements import build_element_tools
from slate_tools.adapters.production.tools.locations import build_location_tools
from slate_tools.adapters.production.tools.scenes import build_scene_tools
from slate_tools.adapters.production.tools.shooting_days import build_shooting_day_tools

__all__ = [
    "build_cast_tools",
    "build_crew_tools",
    "build_element_tools",
    "build_location_tools",
    "build_scene_tools",
    "build_shooting_day_tools",
]
