"""
Data models for Wasteland Map.

Entities (Location, Vendor, Road, MapState) and the composite read models
(LocationWithVendors, MapData) plus the request payloads the editor sends.

Python attributes are snake_case; the JSON wire format is camelCase
(e.g. ``safety_rating`` <-> ``safetyRating``). Dump with ``to_wire()``.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

MAP_STATE_ID = "singleton"
DEFAULT_SAFETY_RATING = 3
DEFAULT_VENDOR_HOURS = "Unknown"
DEFAULT_ICON = "map-pin"

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Coordinate = Annotated[float, Field(ge=0, le=100)]
SafetyRating = Annotated[int, Field(ge=1, le=5)]
# Secrets are compared byte for byte, so they are never stripped.
AdminCodeStr = Annotated[str, StringConstraints(min_length=1)]


class LocationType(str, Enum):
    SETTLEMENT = "settlement"
    DUNGEON = "dungeon"
    LANDMARK = "landmark"
    TRADER = "trader"
    FACTION = "faction"


TYPE_ICONS: Dict[LocationType, str] = {
    LocationType.SETTLEMENT: "home",
    LocationType.DUNGEON: "skull-crossbones",
    LocationType.LANDMARK: "landmark",
    LocationType.TRADER: "store",
    LocationType.FACTION: "shield",
}


class MapModel(BaseModel):
    """Base model: camelCase aliases, accepts either naming on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Entity(MapModel):
    """Stored record. Frozen; storage replaces records via model_copy(update=...)."""
    model_config = ConfigDict(frozen=True)


# --- Entities ---

class Vendor(Entity):
    id: str
    location_id: str
    name: str
    description: Optional[str] = None
    hours: str = DEFAULT_VENDOR_HOURS
    services: List[str] = Field(default_factory=list)


class Location(Entity):
    id: str
    name: str
    type: LocationType
    description: Optional[str] = None
    x: float
    y: float
    icon: str = DEFAULT_ICON
    safety_rating: int = DEFAULT_SAFETY_RATING
    is_published: bool = False


class LocationWithVendors(Location):
    vendors: List[Vendor] = Field(default_factory=list)

    @classmethod
    def compose(cls, location: Location, vendors: List[Vendor]) -> "LocationWithVendors":
        return cls(**location.model_dump(), vendors=list(vendors))


class Road(Entity):
    id: str
    from_location_id: str
    to_location_id: str
    path_data: str
    is_published: bool = False


class MapState(Entity):
    id: str = MAP_STATE_ID
    last_published_at: Optional[datetime] = None
    admin_code: str


class MapData(MapModel):
    locations: List[LocationWithVendors] = Field(default_factory=list)
    roads: List[Road] = Field(default_factory=list)
    last_published_at: Optional[datetime] = None


# --- Request payloads ---

class VendorInput(MapModel):
    """A vendor as submitted by the location editor (no locationId)."""
    name: NonEmptyStr
    description: Optional[str] = None
    hours: Optional[str] = None
    services: Optional[List[str]] = None


class VendorUpdate(MapModel):
    name: Optional[NonEmptyStr] = None
    description: Optional[str] = None
    hours: Optional[str] = None
    services: Optional[List[str]] = None


class LocationInput(MapModel):
    name: NonEmptyStr
    type: LocationType
    description: Optional[str] = None
    x: Coordinate
    y: Coordinate
    icon: Optional[str] = None
    safety_rating: Optional[SafetyRating] = None
    is_published: Optional[bool] = None


class LocationEditor(LocationInput):
    """Location plus its full vendor list, as sent by POST/PUT /api/locations."""
    vendors: Optional[List[VendorInput]] = None

    def location_fields(self) -> LocationInput:
        return LocationInput(**self.model_dump(exclude={"vendors"}, exclude_unset=True))

    def location_changes(self) -> "LocationUpdate":
        return LocationUpdate(**self.model_dump(exclude={"vendors"}, exclude_unset=True))


class LocationUpdate(MapModel):
    name: Optional[NonEmptyStr] = None
    type: Optional[LocationType] = None
    description: Optional[str] = None
    x: Optional[Coordinate] = None
    y: Optional[Coordinate] = None
    icon: Optional[str] = None
    safety_rating: Optional[SafetyRating] = None
    is_published: Optional[bool] = None


class RoadInput(MapModel):
    from_location_id: NonEmptyStr
    to_location_id: NonEmptyStr
    path_data: Optional[str] = None
    is_published: Optional[bool] = None


class RoadUpdate(MapModel):
    from_location_id: Optional[NonEmptyStr] = None
    to_location_id: Optional[NonEmptyStr] = None
    path_data: Optional[str] = None
    is_published: Optional[bool] = None


class AdminCodeRequest(MapModel):
    code: Optional[str] = None


class SettingsUpdate(MapModel):
    app_name: Optional[NonEmptyStr] = None
    version: Optional[NonEmptyStr] = None
    admin_code: Optional[AdminCodeStr] = None

    @field_validator("admin_code")
    @classmethod
    def _reject_blank_code(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Admin code must not be blank")
        return value


NULLABLE_FIELDS = {"description"}


def changes_of(update: MapModel) -> Dict[str, Any]:
    """Fields the caller actually supplied. Explicit nulls only clear nullable columns."""
    return {
        key: value
        for key, value in update.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
