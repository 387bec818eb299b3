"""
MapStorage Protocol Definition.

This module defines the interface that all storage backends must implement.
Both MemoryBackend (in-process, used by tests and demos) and SqlBackend
(durable, SQLAlchemy) conform to this protocol.
"""

from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable

from wasteland_map.models import (
    Location,
    LocationInput,
    LocationUpdate,
    LocationWithVendors,
    MapData,
    MapState,
    Road,
    RoadInput,
    RoadUpdate,
    Vendor,
    VendorInput,
    VendorUpdate,
)


@runtime_checkable
class MapStorage(Protocol):
    """
    Storage contract for locations, vendors, roads and the MapState singleton.

    Mutations on a missing id raise NotFoundError. Multi-row mutations
    (delete_location, replace_vendors, publish_all) are all-or-nothing.
    Backend failures raise PersistenceError.
    """

    @property
    def backend_type(self) -> str:
        """Return the backend type identifier ('memory' or 'sql')."""
        ...

    # --- Locations ---

    def get_locations(self) -> List[LocationWithVendors]:
        """All locations, each with its vendors."""
        ...

    def get_published_locations(self) -> List[LocationWithVendors]:
        """Locations with is_published=True, each with ALL of its vendors."""
        ...

    def get_location(self, location_id: str) -> Optional[LocationWithVendors]:
        """A single location with vendors, or None if it does not exist."""
        ...

    def create_location(self, data: LocationInput, location_id: Optional[str] = None) -> Location:
        """
        Create a location.

        Args:
            data: Validated location fields
            location_id: Explicit id (sample data); a uuid4 is generated otherwise

        Defaults: icon from the type table, safety_rating=3, is_published=False.
        """
        ...

    def update_location(self, location_id: str, changes: LocationUpdate) -> Location:
        """Merge the supplied fields onto an existing location."""
        ...

    def update_location_with_vendors(
        self, location_id: str, changes: LocationUpdate, vendors: List[VendorInput]
    ) -> LocationWithVendors:
        """
        Merge the supplied fields and replace the whole vendor set, as one unit.

        On failure neither the location nor its vendors change.
        """
        ...

    def delete_location(self, location_id: str) -> None:
        """
        Delete a location with its vendors and every road touching it.

        The three removals happen as one unit.
        """
        ...

    def publish_location(self, location_id: str) -> Location:
        ...

    def unpublish_location(self, location_id: str) -> Location:
        ...

    # --- Vendors ---

    def get_vendors_by_location(self, location_id: str) -> List[Vendor]:
        ...

    def create_vendor(self, location_id: str, data: VendorInput) -> Vendor:
        """Create a vendor owned by an existing location (hours='Unknown', services=[] by default)."""
        ...

    def update_vendor(self, vendor_id: str, changes: VendorUpdate) -> Vendor:
        ...

    def delete_vendor(self, vendor_id: str) -> None:
        ...

    def replace_vendors(self, location_id: str, vendors: List[VendorInput]) -> List[Vendor]:
        """Delete every vendor of the location and create the given ones, as one unit."""
        ...

    # --- Roads ---

    def get_roads(self) -> List[Road]:
        ...

    def get_published_roads(self) -> List[Road]:
        ...

    def get_road(self, road_id: str) -> Optional[Road]:
        ...

    def create_road(self, data: RoadInput) -> Road:
        """
        Create a road between two existing locations.

        Raises ValidationError if an endpoint does not exist. path_data is
        generated from the endpoint coordinates when not supplied.
        """
        ...

    def update_road(self, road_id: str, changes: RoadUpdate) -> Road:
        ...

    def delete_road(self, road_id: str) -> None:
        ...

    def publish_road(self, road_id: str) -> Road:
        ...

    def unpublish_road(self, road_id: str) -> Road:
        ...

    # --- Map State ---

    def get_map_data(self, published_only: bool = False) -> MapData:
        """
        Locations with vendors, roads and last_published_at read as one snapshot.

        With published_only, only published locations and roads are included.
        A concurrent publish_all is seen either completely or not at all.
        """
        ...


    def get_map_state(self) -> MapState:
        """Return the MapState singleton, creating it on first access."""
        ...

    def update_admin_code(self, code: str) -> MapState:
        ...

    def publish_all(self, published_at: datetime) -> MapState:
        """
        Mark every location and road as published and stamp last_published_at.

        Readers observe either the full pre-publish or post-publish state.
        """
        ...
