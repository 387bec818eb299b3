"""
Publish workflow for Wasteland Map.

Draft edits are only visible to admins until published. "Publish all" is
global and monotonic: every location and road becomes public and the
publish time is recorded. Single entities can still be toggled.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from wasteland_map.models import Location, MapState, Road
from wasteland_map.storage.protocol import MapStorage

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PublishController:
    """Moves draft entities into the public view."""

    def __init__(self, storage: MapStorage, clock: Optional[Callable[[], datetime]] = None):
        self._storage = storage
        self._clock = clock or utc_now

    def publish_all_changes(self) -> MapState:
        """
        Publish every location and road and stamp last_published_at.

        Idempotent. Runs as one unit in the backend; a failure raises
        PersistenceError and nothing is reported as published.
        """
        state = self._storage.publish_all(self._clock())
        logger.info(f"Published all changes at {state.last_published_at.isoformat()}")
        return state

    def publish_location(self, location_id: str) -> Location:
        return self._storage.publish_location(location_id)

    def unpublish_location(self, location_id: str) -> Location:
        return self._storage.unpublish_location(location_id)

    def publish_road(self, road_id: str) -> Road:
        return self._storage.publish_road(road_id)

    def unpublish_road(self, road_id: str) -> Road:
        return self._storage.unpublish_road(road_id)
