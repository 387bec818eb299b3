"""
Tests for MapManager editor workflows and app settings.
"""

import json
import pytest
from pathlib import Path
import sys

from pydantic import ValidationError as PydanticValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasteland_map.config import APP_NAME, APP_VERSION, DEFAULT_ADMIN_CODE
from wasteland_map.errors import NotFoundError, ValidationError
from wasteland_map.map_manager import MapManager
from wasteland_map.models import LocationEditor, RoadInput, SettingsUpdate
from wasteland_map.storage import MemoryBackend


@pytest.fixture
def manager(tmp_path):
    return MapManager(MemoryBackend(), config_path=tmp_path / "config.json")


def editor(**overrides):
    payload = {"name": "New Vegas Strip", "type": "settlement", "x": 45, "y": 30}
    payload.update(overrides)
    return LocationEditor(**payload)


class TestLocationWorkflows:
    """Tests for location + vendor set operations."""

    def test_create_with_vendors(self, manager):
        location = manager.create_location_with_vendors(editor(vendors=[
            {"name": "The Tops Casino", "services": ["Gambling"]},
            {"name": "Ultra-Luxe"},
        ]))

        assert location.icon == "home"
        assert sorted(v.name for v in location.vendors) == ["The Tops Casino", "Ultra-Luxe"]
        assert all(v.location_id == location.id for v in location.vendors)

    def test_create_without_vendors(self, manager):
        location = manager.create_location_with_vendors(editor())
        assert location.vendors == []

    def test_replace_swaps_vendor_set(self, manager):
        location = manager.create_location_with_vendors(editor(vendors=[{"name": "Gomorrah"}]))

        replaced = manager.replace_location(location.id, editor(
            name="The Strip", safetyRating=5, vendors=[{"name": "Lucky 38", "hours": "Always"}],
        ))

        assert replaced.name == "The Strip"
        assert replaced.safety_rating == 5
        assert [(v.name, v.hours) for v in replaced.vendors] == [("Lucky 38", "Always")]

    def test_replace_without_vendor_list_clears_vendors(self, manager):
        location = manager.create_location_with_vendors(editor(vendors=[{"name": "Gomorrah"}]))

        replaced = manager.replace_location(location.id, editor())

        assert replaced.vendors == []

    def test_replace_missing_location(self, manager):
        with pytest.raises(NotFoundError):
            manager.replace_location("nowhere", editor())

    def test_editor_only_sends_supplied_fields(self, manager):
        location = manager.create_location_with_vendors(editor(icon="casino", safetyRating=4))

        replaced = manager.replace_location(location.id, LocationEditor(name="Renamed", type="landmark", x=1, y=2))

        assert replaced.icon == "casino"
        assert replaced.safety_rating == 4

    def test_create_road_between_locations(self, manager):
        a = manager.create_location_with_vendors(editor(name="Goodsprings", x=25, y=60))
        b = manager.create_location_with_vendors(editor())

        road = manager.create_road(RoadInput(from_location_id=a.id, to_location_id=b.id))

        assert road.path_data.startswith("M 25% 60% Q ")


class TestSettings:
    """Tests for app settings and admin code updates."""

    def test_defaults_without_config_file(self, manager):
        assert manager.get_settings() == {"app_name": APP_NAME, "version": APP_VERSION}

    def test_admin_view_includes_code(self, manager):
        settings = manager.get_settings(include_admin_code=True)
        assert settings["admin_code"] == DEFAULT_ADMIN_CODE

    def test_update_name_and_version(self, manager, tmp_path):
        settings = manager.update_settings(SettingsUpdate(app_name="Mojave Atlas", version="v3"))

        assert settings["app_name"] == "Mojave Atlas"
        assert settings["version"] == "v3"
        saved = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert saved == {"app_name": "Mojave Atlas", "version": "v3"}

    def test_admin_code_stays_out_of_config_file(self, manager, tmp_path):
        manager.update_settings(SettingsUpdate(admin_code="NEW-CODE"))

        assert manager.guard.verify("NEW-CODE") is True
        assert manager.guard.verify(DEFAULT_ADMIN_CODE) is False
        assert not (tmp_path / "config.json").exists()

    def test_partial_update_keeps_other_fields(self, manager):
        manager.update_settings(SettingsUpdate(app_name="Mojave Atlas"))

        settings = manager.update_settings(SettingsUpdate(version="v4"))

        assert settings["app_name"] == "Mojave Atlas"
        assert settings["version"] == "v4"

    def test_blank_admin_code_rejected_by_model(self):
        with pytest.raises(PydanticValidationError):
            SettingsUpdate(admin_code="   ")

    def test_guard_rejects_empty_code(self, manager):
        with pytest.raises(ValidationError):
            manager.guard.update_admin_code("")
