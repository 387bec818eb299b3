"""
Tests for the publish workflow and the composite map views.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasteland_map.assembler import MapDataAssembler, visible_roads
from wasteland_map.errors import PersistenceError
from wasteland_map.models import LocationInput, MapData, RoadInput, VendorInput
from wasteland_map.publishing import PublishController
from wasteland_map.storage import MemoryBackend


@pytest.fixture
def storage():
    return MemoryBackend()


@pytest.fixture
def mojave(storage):
    """Two draft locations joined by a draft road, one vendor."""
    goodsprings = storage.create_location(
        LocationInput(name="Goodsprings", type="settlement", x=25, y=60), location_id="goodsprings"
    )
    strip = storage.create_location(
        LocationInput(name="New Vegas Strip", type="settlement", x=45, y=30), location_id="vegas-strip"
    )
    storage.create_vendor(strip.id, VendorInput(name="The Tops Casino"))
    road = storage.create_road(RoadInput(from_location_id=goodsprings.id, to_location_id=strip.id))
    return {"goodsprings": goodsprings, "strip": strip, "road": road}


class TestPublishController:
    """Tests for PublishController."""

    def test_drafts_hidden_until_published(self, storage, mojave):
        assembler = MapDataAssembler(storage)

        public = assembler.get_published_map_data()

        assert public.locations == []
        assert public.roads == []
        assert public.last_published_at is None

    def test_publish_all_changes(self, storage, mojave):
        before = datetime.now(timezone.utc)

        state = PublishController(storage).publish_all_changes()

        assert state.last_published_at >= before
        public = MapDataAssembler(storage).get_published_map_data()
        assert {loc.id for loc in public.locations} == {"goodsprings", "vegas-strip"}
        assert [r.id for r in public.roads] == [mojave["road"].id]
        assert public.last_published_at == state.last_published_at

    def test_uses_injected_clock(self, storage, mojave):
        fixed = datetime(2281, 10, 19, 12, 0, tzinfo=timezone.utc)

        state = PublishController(storage, clock=lambda: fixed).publish_all_changes()

        assert state.last_published_at == fixed

    def test_repeat_publish_moves_timestamp_forward(self, storage, mojave):
        times = iter([
            datetime(2281, 1, 1, tzinfo=timezone.utc),
            datetime(2281, 1, 2, tzinfo=timezone.utc),
        ])
        publisher = PublishController(storage, clock=lambda: next(times))

        publisher.publish_all_changes()
        state = publisher.publish_all_changes()

        assert state.last_published_at == datetime(2281, 1, 2, tzinfo=timezone.utc)

    def test_failure_propagates(self):
        storage = MagicMock()
        storage.publish_all.side_effect = PersistenceError("Failed to publish all changes")

        with pytest.raises(PersistenceError):
            PublishController(storage).publish_all_changes()

    def test_single_entity_toggles(self, storage, mojave):
        publisher = PublishController(storage)

        publisher.publish_location("goodsprings")
        publisher.publish_location("vegas-strip")
        publisher.publish_road(mojave["road"].id)
        public = MapDataAssembler(storage).get_published_map_data()
        assert len(public.locations) == 2
        assert len(public.roads) == 1

        publisher.unpublish_road(mojave["road"].id)
        publisher.unpublish_location("goodsprings")
        public = MapDataAssembler(storage).get_published_map_data()
        assert [loc.id for loc in public.locations] == ["vegas-strip"]
        assert public.roads == []


class TestMapDataAssembler:
    """Tests for the public and admin views."""

    def test_admin_view_includes_drafts(self, storage, mojave):
        admin = MapDataAssembler(storage).get_admin_map_data()

        assert len(admin.locations) == 2
        assert len(admin.roads) == 1

    def test_public_view_includes_all_vendors(self, storage, mojave):
        PublishController(storage).publish_all_changes()

        public = MapDataAssembler(storage).get_published_map_data()
        strip = next(loc for loc in public.locations if loc.id == "vegas-strip")

        assert [v.name for v in strip.vendors] == ["The Tops Casino"]

    def test_wire_format_is_camel_case(self, storage, mojave):
        PublishController(storage).publish_all_changes()

        wire = MapDataAssembler(storage).get_published_map_data().to_wire()

        assert set(wire) == {"locations", "roads", "lastPublishedAt"}
        location = wire["locations"][0]
        assert {"safetyRating", "isPublished", "vendors"} <= set(location)
        road = wire["roads"][0]
        assert {"fromLocationId", "toLocationId", "pathData", "isPublished"} <= set(road)
        assert isinstance(wire["lastPublishedAt"], str)

    def test_views_come_from_one_snapshot_read(self):
        storage = MagicMock()
        stamp = datetime(2281, 5, 5, tzinfo=timezone.utc)
        storage.get_map_data.return_value = MapData(last_published_at=stamp)
        assembler = MapDataAssembler(storage)

        assert assembler.get_published_map_data().last_published_at == stamp
        storage.get_map_data.assert_called_with(published_only=True)

        assembler.get_admin_map_data()
        storage.get_map_data.assert_called_with(published_only=False)

        storage.get_published_locations.assert_not_called()
        storage.get_published_roads.assert_not_called()
        storage.get_map_state.assert_not_called()


class TestVisibleRoads:
    """Tests for road filtering by endpoint visibility."""

    def test_drops_roads_with_hidden_endpoint(self, storage, mojave):
        primm = storage.create_location(LocationInput(name="Primm", type="settlement", x=40, y=90))
        hidden = storage.create_road(RoadInput(from_location_id="goodsprings", to_location_id=primm.id))
        locations = [loc for loc in storage.get_locations() if loc.id != primm.id]

        roads = visible_roads(locations, storage.get_roads())

        assert [r.id for r in roads] == [mojave["road"].id]
        assert hidden.id not in {r.id for r in roads}

    def test_empty_location_set(self, storage, mojave):
        assert visible_roads([], storage.get_roads()) == []
