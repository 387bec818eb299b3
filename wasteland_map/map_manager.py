"""
Editor workflows for Wasteland Map.

MapManager wires the store, access guard, publish controller and view
assembler together and implements the multi-step operations the editor
performs (location + vendor set, settings).
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from wasteland_map.assembler import MapDataAssembler
from wasteland_map.auth.guard import AccessGuard
from wasteland_map.config import get_app_settings, set_app_settings
from wasteland_map.errors import NotFoundError
from wasteland_map.models import LocationEditor, LocationWithVendors, Road, RoadInput, SettingsUpdate
from wasteland_map.publishing import PublishController
from wasteland_map.storage.protocol import MapStorage

logger = logging.getLogger(__name__)


class MapManager:
    """
    Facade over one MapStorage instance.

    Attributes:
        storage: The backing MapStorage
        guard: AccessGuard bound to the same store
        publisher: PublishController bound to the same store
        assembler: MapDataAssembler bound to the same store
    """

    def __init__(
        self,
        storage: MapStorage,
        config_path: Optional[Union[str, Path]] = None,
        publisher: Optional[PublishController] = None,
    ):
        self.storage = storage
        self.guard = AccessGuard(storage)
        self.publisher = publisher or PublishController(storage)
        self.assembler = MapDataAssembler(storage)
        self._config_path = config_path

    def _reload(self, location_id: str) -> LocationWithVendors:
        location = self.storage.get_location(location_id)
        if location is None:
            raise NotFoundError("location", location_id)
        return location

    # --- Locations ---

    def create_location_with_vendors(self, editor: LocationEditor) -> LocationWithVendors:
        """Create the location, then each of its vendors."""
        location = self.storage.create_location(editor.location_fields())
        if editor.vendors:
            self.storage.replace_vendors(location.id, editor.vendors)
        return self._reload(location.id)

    def replace_location(self, location_id: str, editor: LocationEditor) -> LocationWithVendors:
        """
        Update a location and replace its ENTIRE vendor set.

        Vendors are not diffed: existing ones are deleted and the submitted
        list is recreated (an omitted list leaves the location with none).
        Fields and vendors change together or not at all.
        """
        vendors = editor.vendors or []
        location = self.storage.update_location_with_vendors(location_id, editor.location_changes(), vendors)
        logger.info(f"Replaced location {location_id} with {len(vendors)} vendors")
        return location

    # --- Roads ---

    def create_road(self, data: RoadInput) -> Road:
        """Create a road; endpoints must exist and path_data is generated if omitted."""
        return self.storage.create_road(data)

    # --- Settings ---

    def get_settings(self, include_admin_code: bool = False) -> Dict[str, str]:
        settings = get_app_settings(self._config_path)
        if include_admin_code:
            settings["admin_code"] = self.storage.get_map_state().admin_code
        return settings

    def update_settings(self, update: SettingsUpdate) -> Dict[str, str]:
        """Apply a settings change; the admin code goes to MapState, the rest to config.json."""
        if update.admin_code is not None:
            self.guard.update_admin_code(update.admin_code)
        if update.app_name is not None or update.version is not None:
            set_app_settings(update.app_name, update.version, self._config_path)
        return self.get_settings(include_admin_code=True)
