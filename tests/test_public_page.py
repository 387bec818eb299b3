"""
Tests for the public map page chart options.
"""

from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasteland_map.models import Location, LocationType, LocationWithVendors, MapData, Road, Vendor
from wasteland_map.public_page import TYPE_COLORS, build_map_chart_options


def make_location(location_id, x, y, location_type="settlement", vendors=()):
    location = Location(id=location_id, name=location_id.title(), type=location_type, x=x, y=y, safety_rating=4)
    return LocationWithVendors.compose(location, list(vendors))


def series_of(options, series_type):
    return next(s for s in options['series'] if s['type'] == series_type)


class TestBuildMapChartOptions:

    def test_empty_map(self):
        options = build_map_chart_options(MapData())

        assert series_of(options, 'scatter')['data'] == []
        assert series_of(options, 'lines')['data'] == []

    def test_locations_become_points(self):
        vendor = Vendor(id="v1", location_id="strip", name="The Tops Casino")
        data = MapData(locations=[
            make_location("strip", 45, 30, vendors=[vendor]),
            make_location("quarry", 65, 15, location_type="dungeon"),
        ])

        points = series_of(build_map_chart_options(data), 'scatter')['data']

        assert points[0]['value'] == [45, 30]
        assert points[0]['vendors'] == ["The Tops Casino"]
        assert points[0]['safety'] == "SAFE"
        assert points[1]['itemStyle']['color'] == TYPE_COLORS[LocationType.DUNGEON]

    def test_roads_become_segments(self):
        data = MapData(
            locations=[make_location("goodsprings", 25, 60), make_location("strip", 45, 30)],
            roads=[Road(id="r1", from_location_id="goodsprings", to_location_id="strip", path_data="M 25% 60%")],
        )

        segments = series_of(build_map_chart_options(data), 'lines')['data']

        assert segments == [{'coords': [[25, 60], [45, 30]]}]

    def test_road_to_hidden_location_is_skipped(self):
        data = MapData(
            locations=[make_location("goodsprings", 25, 60)],
            roads=[Road(id="r1", from_location_id="goodsprings", to_location_id="strip", path_data="M 25% 60%")],
        )

        assert series_of(build_map_chart_options(data), 'lines')['data'] == []

    def test_y_axis_grows_downward(self):
        options = build_map_chart_options(MapData())
        assert options['yAxis']['inverse'] is True
