"""
In-memory Storage Backend for Wasteland Map.

Implements the MapStorage protocol with plain dicts guarded by one
re-entrant lock. Nothing survives a restart; used by the test suite and
for demos (optionally seeded with sample data).
"""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from wasteland_map.config import DEFAULT_ADMIN_CODE
from wasteland_map.errors import NotFoundError
from wasteland_map.models import (
    MAP_STATE_ID,
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
    changes_of,
)
from wasteland_map.storage.defaults import (
    PathGenerator,
    build_location,
    build_road,
    build_vendor,
    missing_endpoints_error,
)

logger = logging.getLogger(__name__)


class MemoryBackend:
    """
    Dict-based storage.

    Every public method takes the lock for its whole duration, so
    multi-row operations (cascade delete, publish all) are atomic with
    respect to readers. Entities are frozen pydantic models; updates
    replace the stored object.
    """

    def __init__(self, initial_admin_code: str = DEFAULT_ADMIN_CODE,
                 path_generator: Optional[PathGenerator] = None):
        self._lock = threading.RLock()
        self._locations: Dict[str, Location] = {}
        self._vendors: Dict[str, Vendor] = {}
        self._roads: Dict[str, Road] = {}
        self._map_state: Optional[MapState] = None
        self._initial_admin_code = initial_admin_code
        self._path_generator = path_generator

    @property
    def backend_type(self) -> str:
        return "memory"

    # --- Helpers ---

    def _require_location(self, location_id: str) -> Location:
        location = self._locations.get(location_id)
        if location is None:
            raise NotFoundError("location", location_id)
        return location

    def _require_vendor(self, vendor_id: str) -> Vendor:
        vendor = self._vendors.get(vendor_id)
        if vendor is None:
            raise NotFoundError("vendor", vendor_id)
        return vendor

    def _require_road(self, road_id: str) -> Road:
        road = self._roads.get(road_id)
        if road is None:
            raise NotFoundError("road", road_id)
        return road

    def _with_vendors(self, location: Location) -> LocationWithVendors:
        vendors = [v for v in self._vendors.values() if v.location_id == location.id]
        return LocationWithVendors.compose(location, vendors)

    def _set_location_published(self, location_id: str, published: bool) -> Location:
        with self._lock:
            location = self._require_location(location_id)
            updated = location.model_copy(update={"is_published": published})
            self._locations[location_id] = updated
            return updated

    def _set_road_published(self, road_id: str, published: bool) -> Road:
        with self._lock:
            road = self._require_road(road_id)
            updated = road.model_copy(update={"is_published": published})
            self._roads[road_id] = updated
            return updated

    def _load_locations(self, published_only: bool) -> List[LocationWithVendors]:
        return [
            self._with_vendors(loc) for loc in self._locations.values()
            if loc.is_published or not published_only
        ]

    def _load_roads(self, published_only: bool) -> List[Road]:
        return [r for r in self._roads.values() if r.is_published or not published_only]

    # --- Locations ---

    def get_locations(self) -> List[LocationWithVendors]:
        with self._lock:
            return self._load_locations(published_only=False)

    def get_published_locations(self) -> List[LocationWithVendors]:
        with self._lock:
            return self._load_locations(published_only=True)

    def get_location(self, location_id: str) -> Optional[LocationWithVendors]:
        with self._lock:
            location = self._locations.get(location_id)
            if location is None:
                return None
            return self._with_vendors(location)

    def create_location(self, data: LocationInput, location_id: Optional[str] = None) -> Location:
        location = build_location(data, location_id)
        with self._lock:
            self._locations[location.id] = location
        logger.info(f"Created location {location.id} ({location.name})")
        return location

    def update_location(self, location_id: str, changes: LocationUpdate) -> Location:
        with self._lock:
            location = self._require_location(location_id)
            updated = location.model_copy(update=changes_of(changes))
            self._locations[location_id] = updated
            return updated

    def update_location_with_vendors(
        self, location_id: str, changes: LocationUpdate, vendors: List[VendorInput]
    ) -> LocationWithVendors:
        with self._lock:
            location = self._require_location(location_id)
            updated = location.model_copy(update=changes_of(changes))
            created = [build_vendor(location_id, data) for data in vendors]
            self._locations[location_id] = updated
            self._swap_vendors(location_id, created)
            return self._with_vendors(updated)

    def delete_location(self, location_id: str) -> None:
        with self._lock:
            self._require_location(location_id)
            vendor_ids = [vid for vid, v in self._vendors.items() if v.location_id == location_id]
            road_ids = [
                rid for rid, r in self._roads.items()
                if r.from_location_id == location_id or r.to_location_id == location_id
            ]
            for vid in vendor_ids:
                del self._vendors[vid]
            for rid in road_ids:
                del self._roads[rid]
            del self._locations[location_id]
        logger.info(
            f"Deleted location {location_id} with {len(vendor_ids)} vendors and {len(road_ids)} roads"
        )

    def publish_location(self, location_id: str) -> Location:
        return self._set_location_published(location_id, True)

    def unpublish_location(self, location_id: str) -> Location:
        return self._set_location_published(location_id, False)

    # --- Vendors ---

    def get_vendors_by_location(self, location_id: str) -> List[Vendor]:
        with self._lock:
            return [v for v in self._vendors.values() if v.location_id == location_id]

    def create_vendor(self, location_id: str, data: VendorInput) -> Vendor:
        with self._lock:
            self._require_location(location_id)
            vendor = build_vendor(location_id, data)
            self._vendors[vendor.id] = vendor
            return vendor

    def update_vendor(self, vendor_id: str, changes: VendorUpdate) -> Vendor:
        with self._lock:
            vendor = self._require_vendor(vendor_id)
            updated = vendor.model_copy(update=changes_of(changes))
            self._vendors[vendor_id] = updated
            return updated

    def delete_vendor(self, vendor_id: str) -> None:
        with self._lock:
            self._require_vendor(vendor_id)
            del self._vendors[vendor_id]

    def replace_vendors(self, location_id: str, vendors: List[VendorInput]) -> List[Vendor]:
        with self._lock:
            self._require_location(location_id)
            created = [build_vendor(location_id, data) for data in vendors]
            self._swap_vendors(location_id, created)
            return created

    def _swap_vendors(self, location_id: str, created: List[Vendor]) -> None:
        for vid in [vid for vid, v in self._vendors.items() if v.location_id == location_id]:
            del self._vendors[vid]
        for vendor in created:
            self._vendors[vendor.id] = vendor

    # --- Roads ---

    def get_roads(self) -> List[Road]:
        with self._lock:
            return self._load_roads(published_only=False)

    def get_published_roads(self) -> List[Road]:
        with self._lock:
            return self._load_roads(published_only=True)

    def get_road(self, road_id: str) -> Optional[Road]:
        with self._lock:
            return self._roads.get(road_id)

    def create_road(self, data: RoadInput) -> Road:
        with self._lock:
            start = self._locations.get(data.from_location_id)
            end = self._locations.get(data.to_location_id)
            if start is None or end is None:
                raise missing_endpoints_error(
                    None if start else data.from_location_id,
                    None if end else data.to_location_id,
                )
            road = build_road(data, start, end, self._path_generator)
            self._roads[road.id] = road
        logger.info(f"Created road {road.id} ({road.from_location_id} -> {road.to_location_id})")
        return road

    def update_road(self, road_id: str, changes: RoadUpdate) -> Road:
        with self._lock:
            road = self._require_road(road_id)
            fields = changes_of(changes)
            from_id = fields.get("from_location_id", road.from_location_id)
            to_id = fields.get("to_location_id", road.to_location_id)
            start = self._locations.get(from_id)
            end = self._locations.get(to_id)
            if start is None or end is None:
                raise missing_endpoints_error(
                    None if start else from_id,
                    None if end else to_id,
                )
            endpoints_moved = (from_id, to_id) != (road.from_location_id, road.to_location_id)
            if endpoints_moved and "path_data" not in fields:
                fields["path_data"] = build_road(
                    RoadInput(from_location_id=from_id, to_location_id=to_id),
                    start, end, self._path_generator,
                ).path_data
            updated = road.model_copy(update=fields)
            self._roads[road_id] = updated
            return updated

    def delete_road(self, road_id: str) -> None:
        with self._lock:
            self._require_road(road_id)
            del self._roads[road_id]

    def publish_road(self, road_id: str) -> Road:
        return self._set_road_published(road_id, True)

    def unpublish_road(self, road_id: str) -> Road:
        return self._set_road_published(road_id, False)

    # --- Map State ---

    def get_map_data(self, published_only: bool = False) -> MapData:
        with self._lock:
            return MapData(
                locations=self._load_locations(published_only),
                roads=self._load_roads(published_only),
                last_published_at=self._map_state.last_published_at if self._map_state else None,
            )

    def get_map_state(self) -> MapState:
        with self._lock:
            if self._map_state is None:
                self._map_state = MapState(id=MAP_STATE_ID, admin_code=self._initial_admin_code)
            return self._map_state

    def update_admin_code(self, code: str) -> MapState:
        with self._lock:
            self._map_state = self.get_map_state().model_copy(update={"admin_code": code})
            return self._map_state

    def publish_all(self, published_at: datetime) -> MapState:
        with self._lock:
            for lid, location in self._locations.items():
                self._locations[lid] = location.model_copy(update={"is_published": True})
            for rid, road in self._roads.items():
                self._roads[rid] = road.model_copy(update={"is_published": True})
            self._map_state = self.get_map_state().model_copy(
                update={"last_published_at": published_at}
            )
            return self._map_state
