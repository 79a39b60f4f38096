"""Production management adapter.

Wraps the production CRUD service (scenes, cast, locations, shooting days,
elements, crew) as tiered tools.
"""

from slate_tools.adapters.production.client import CrudResponse, ProductionClient, Resource
from slate_tools.adapters.production.tools import (
    build_cast_tools,
    build_crew_tools,
    build_element_tools,
    build_location_tools,
    build_scene_tools,
    build_shooting_day_tools,
)
from slate_tools.registry import ToolRegistry


def build_production_tools(client: ProductionClient) -> list:
    """All production tools in catalog order (reads first per entity)."""
    return [
        *build_scene_tools(client),
        *build_cast_tools(client),
        *build_location_tools(client),
        *build_shooting_day_tools(client),
        *build_element_tools(client),
        *build_crew_tools(client),
    ]


def register_production_tools(registry: ToolRegistry, client: ProductionClient) -> None:
    """Register every production tool with the registry."""
    for tool in build_production_tools(client):
        registry.register(tool)


__all__ = [
    "CrudResponse",
    "ProductionClient",
    "Resource",
    "build_production_tools",
    "register_production_tools",
]
