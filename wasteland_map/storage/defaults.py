"""
Default application shared by every storage backend.

Backends call these to turn validated input into full entities so both
implementations apply exactly the same defaults.
"""

import uuid
from typing import Callable, Optional

from wasteland_map.errors import ValidationError
from wasteland_map.map_utils import HasCoordinates, default_icon_for, generate_road_path
from wasteland_map.models import (
    DEFAULT_SAFETY_RATING,
    DEFAULT_VENDOR_HOURS,
    Location,
    LocationInput,
    Road,
    RoadInput,
    Vendor,
    VendorInput,
)

PathGenerator = Callable[[HasCoordinates, HasCoordinates], str]


def new_id() -> str:
    return str(uuid.uuid4())


def build_location(data: LocationInput, location_id: Optional[str] = None) -> Location:
    return Location(
        id=location_id or new_id(),
        name=data.name,
        type=data.type,
        description=data.description,
        x=data.x,
        y=data.y,
        icon=data.icon or default_icon_for(data.type),
        safety_rating=data.safety_rating or DEFAULT_SAFETY_RATING,
        is_published=bool(data.is_published),
    )


def build_vendor(location_id: str, data: VendorInput) -> Vendor:
    return Vendor(
        id=new_id(),
        location_id=location_id,
        name=data.name,
        description=data.description,
        hours=data.hours or DEFAULT_VENDOR_HOURS,
        services=list(data.services) if data.services else [],
    )


def missing_endpoints_error(from_id: Optional[str], to_id: Optional[str]) -> ValidationError:
    """ValidationError naming the road endpoints that do not resolve (pass None for ones that do)."""
    errors = []
    if from_id is not None:
        errors.append({"field": "fromLocationId", "message": f"Location not found: {from_id}"})
    if to_id is not None:
        errors.append({"field": "toLocationId", "message": f"Location not found: {to_id}"})
    return ValidationError("Road endpoints must reference existing locations", errors)


def build_road(
    data: RoadInput,
    start: HasCoordinates,
    end: HasCoordinates,
    path_generator: Optional[PathGenerator] = None,
) -> Road:
    path_generator = path_generator or generate_road_path
    return Road(
        id=new_id(),
        from_location_id=data.from_location_id,
        to_location_id=data.to_location_id,
        path_data=data.path_data or path_generator(start, end),
        is_published=bool(data.is_published),
    )
