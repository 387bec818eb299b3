"""
Composite map views.

Joins locations with their vendors and roads into the MapData returned to
clients: the public view (published entities only) and the admin view
(everything).
"""

from typing import Iterable, List

from wasteland_map.models import LocationWithVendors, MapData, Road
from wasteland_map.storage.protocol import MapStorage


def visible_roads(locations: Iterable[LocationWithVendors], roads: Iterable[Road]) -> List[Road]:
    """
    Roads that can be drawn for the given location set.

    A road whose endpoint is not in ``locations`` (filtered out, or a draft
    in the public view) is dropped silently.
    """
    ids = {location.id for location in locations}
    return [road for road in roads if road.from_location_id in ids and road.to_location_id in ids]


class MapDataAssembler:
    """Builds MapData read models from the store."""

    def __init__(self, storage: MapStorage):
        self._storage = storage

    def get_published_map_data(self) -> MapData:
        """
        Public view.

        Published locations with ALL of their vendors (vendors have no
        publish flag of their own) and published roads, read as one
        snapshot so a concurrent publish is never half visible.
        """
        return self._storage.get_map_data(published_only=True)

    def get_admin_map_data(self) -> MapData:
        """Admin view: every location and road regardless of publish state."""
        return self._storage.get_map_data(published_only=False)
