"""Production tool input schemas.

One model per tool. Optional fields default to None and are only forwarded
to the production API when the model actually supplied them
(`ToolInput.provided()`), so "not provided" never overwrites stored data.
"""

from typing import Annotated, Literal

from pydantic import Field

from slate_tools.base import ENTITY_ID_PATTERN, ToolInput

IntExt = Literal["INT", "EXT", "BOTH"]
DayNight = Literal["DAY", "NIGHT", "DAWN", "DUSK", "MORNING", "AFTERNOON", "EVENING"]
SceneStatus = Literal["NOT_SCHEDULED", "SCHEDULED", "PARTIALLY_SHOT", "COMPLETED", "CUT"]
WorkStatus = Literal["ON_HOLD", "CONFIRMED", "WORKING", "WRAPPED", "DROPPED"]
LocationType = Literal["PRACTICAL", "STUDIO", "BACKLOT", "VIRTUAL"]
PermitStatus = Literal["NOT_STARTED", "APPLIED", "APPROVED", "DENIED"]
ShootingDayStatus = Literal[
    "TENTATIVE", "SCHEDULED", "CONFIRMED", "IN_PROGRESS", "COMPLETED", "CANCELLED"
]
ElementCategory = Literal[
    "PROP",
    "WARDROBE",
    "VEHICLE",
    "ANIMAL",
    "VFX",
    "SFX",
    "MAKEUP",
    "HAIR",
    "SET_DRESSING",
    "GREENERY",
    "CAMERA",
    "SOUND",
    "BACKGROUND",
    "STUNT",
    "MECHANICAL_EFFECTS",
    "VIDEO_PLAYBACK",
]
Department = Literal[
    "PRODUCTION",
    "DIRECTION",
    "CAMERA",
    "SOUND",
    "LIGHTING",
    "ART",
    "COSTUME",
    "HAIR_MAKEUP",
    "LOCATIONS",
    "STUNTS",
    "VFX",
    "TRANSPORTATION",
    "CATERING",
    "ACCOUNTING",
    "POST_PRODUCTION",
]

EntityId = Annotated[str, Field(pattern=ENTITY_ID_PATTERN)]

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"
ISO_DATE = r"^\d{4}-\d{2}-\d{2}$"


class NoArgs(ToolInput):
    """Read tools that take no arguments."""

    pass


# ============================================================================
# SCENES
# ============================================================================


class CreateSceneInput(ToolInput):
    scene_number: str = Field(..., min_length=1, description="Scene number (e.g. '15', '2A')")
    int_ext: IntExt | None = Field(None, description="Interior or exterior")
    day_night: DayNight | None = Field(None, description="Time of day")
    set_name: str | None = Field(None, description="Set/location name from the scene heading")
    synopsis: str | None = Field(None, description="Brief description of what happens")
    page_count: float | None = Field(None, ge=0, description="Page count (e.g. 1.5)")
    location_id: EntityId | None = Field(None, description="ID of an existing location to link")
    script_day: str | None = Field(None, description="Script day number")
    estimated_minutes: float | None = Field(None, ge=0, description="Estimated filming time in minutes")
    notes: str | None = Field(None, description="Additional notes")


class UpdateSceneInput(ToolInput):
    scene_id: EntityId = Field(..., description="ID of the scene to update")
    scene_number: str | None = None
    int_ext: IntExt | None = None
    day_night: DayNight | None = None
    set_name: str | None = None
    synopsis: str | None = None
    page_count: float | None = Field(None, ge=0)
    location_id: EntityId | None = None
    script_day: str | None = None
    estimated_minutes: float | None = Field(None, ge=0)
    notes: str | None = None
    status: SceneStatus | None = None


class DeleteSceneInput(ToolInput):
    scene_id: EntityId = Field(..., description="ID of the scene to delete")


class AssignSceneToDayInput(ToolInput):
    scene_id: EntityId = Field(..., description="ID of the scene")
    shooting_day_id: EntityId = Field(..., description="ID of the shooting day")
    position: int | None = Field(None, ge=0, description="Sort position (0-based)")


class AddCastToSceneInput(ToolInput):
    scene_id: EntityId = Field(..., description="ID of the scene")
    cast_member_id: EntityId = Field(..., description="ID of the cast member")


# ============================================================================
# CAST
# ============================================================================


class CreateCastMemberInput(ToolInput):
    character_name: str = Field(..., min_length=1, description="Character name")
    actor_name: str | None = Field(None, description="Actor's real name")
    cast_number: int | None = Field(None, ge=1, description="Cast number for scheduling")
    work_status: WorkStatus | None = None
    notes: str | None = None


class UpdateCastMemberInput(ToolInput):
    cast_member_id: EntityId = Field(..., description="ID of the cast member")
    character_name: str | None = None
    actor_name: str | None = None
    cast_number: int | None = Field(None, ge=1)
    work_status: WorkStatus | None = None
    notes: str | None = None


class DeleteCastMemberInput(ToolInput):
    cast_member_id: EntityId = Field(..., description="ID of the cast member to delete")


# ============================================================================
# LOCATIONS
# ============================================================================


class CreateLocationInput(ToolInput):
    name: str = Field(..., min_length=1, description="Location name")
    address: str | None = Field(None, description="Physical address")
    location_type: LocationType | None = None
    interior_exterior: IntExt | None = None
    permit_status: PermitStatus | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    technical_notes: str | None = None
    parking_notes: str | None = None
    sound_notes: str | None = None


class UpdateLocationInput(ToolInput):
    location_id: EntityId = Field(..., description="ID of the location")
    name: str | None = None
    address: str | None = None
    location_type: LocationType | None = None
    interior_exterior: IntExt | None = None
    permit_status: PermitStatus | None = None
    contact_name: str | None = None
    technical_notes: str | None = None
    parking_notes: str | None = None
    sound_notes: str | None = None


class DeleteLocationInput(ToolInput):
    location_id: EntityId = Field(..., description="ID of the location to delete")


# ============================================================================
# SHOOTING DAYS
# ============================================================================


class CreateShootingDayInput(ToolInput):
    date: str = Field(..., pattern=ISO_DATE, description="Date in YYYY-MM-DD format")
    day_number: int = Field(..., ge=1, description="Day number (e.g. 1, 2, 3)")
    general_call: str | None = Field(None, pattern=HHMM, description="General crew call time (HH:MM)")
    estimated_wrap: str | None = Field(None, pattern=HHMM, description="Estimated wrap time (HH:MM)")
    status: Literal["TENTATIVE", "SCHEDULED", "CONFIRMED"] | None = None
    notes: str | None = None
    scenes: list[EntityId] | None = Field(None, description="Scene IDs to assign")


class UpdateShootingDayInput(ToolInput):
    shooting_day_id: EntityId = Field(..., description="ID of the shooting day")
    date: str | None = Field(None, pattern=ISO_DATE)
    day_number: int | None = Field(None, ge=1)
    general_call: str | None = Field(None, pattern=HHMM)
    estimated_wrap: str | None = Field(None, pattern=HHMM)
    status: ShootingDayStatus | None = None
    notes: str | None = None


class DeleteShootingDayInput(ToolInput):
    shooting_day_id: EntityId = Field(..., description="ID of the shooting day to delete")


# ============================================================================
# ELEMENTS
# ============================================================================


class CreateElementInput(ToolInput):
    category: ElementCategory = Field(..., description="Element category")
    name: str = Field(..., min_length=1, description="Element name")
    description: str | None = None
    notes: str | None = None


class DeleteElementInput(ToolInput):
    element_id: EntityId = Field(..., description="ID of the element to delete")


# ============================================================================
# CREW
# ============================================================================


class CreateCrewMemberInput(ToolInput):
    name: str = Field(..., min_length=1, description="Person's name")
    role: str = Field(..., min_length=1, description="Job title (e.g. 'Gaffer', 'Script Supervisor')")
    department: Department = Field(..., description="Department")
    email: str | None = None
    phone: str | None = None
    is_head: bool | None = Field(None, description="Whether this person is a department head")
