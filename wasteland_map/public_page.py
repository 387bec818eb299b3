"""
Public Page for Wasteland Map.

A read-only NiceGUI view of the published map at '/'. Editing happens
through the JSON API; this page only shows what visitors would see.
"""

import logging
from typing import Any, Dict

from nicegui import ui

from wasteland_map.assembler import visible_roads
from wasteland_map.map_utils import safety_rating_text
from wasteland_map.models import LocationType, MapData

logger = logging.getLogger(__name__)

TYPE_COLORS = {
    LocationType.SETTLEMENT: '#22c55e',
    LocationType.DUNGEON: '#ef4444',
    LocationType.LANDMARK: '#a855f7',
    LocationType.TRADER: '#eab308',
    LocationType.FACTION: '#eab308',
}


def build_map_chart_options(map_data: MapData) -> Dict[str, Any]:
    """
    Build ECharts options for the map.

    Locations become scatter points on a 0-100 grid (y grows downward like
    the map image); roads become straight segments. Roads with an endpoint
    outside the shown locations are skipped.
    """
    by_id = {location.id: location for location in map_data.locations}

    points = []
    for location in map_data.locations:
        points.append({
            'name': location.name,
            'value': [location.x, location.y],
            'itemStyle': {'color': TYPE_COLORS.get(location.type, '#808080')},
            'safety': safety_rating_text(location.safety_rating),
            'vendors': [vendor.name for vendor in location.vendors],
        })

    segments = []
    for road in visible_roads(map_data.locations, map_data.roads):
        start = by_id[road.from_location_id]
        end = by_id[road.to_location_id]
        segments.append({'coords': [[start.x, start.y], [end.x, end.y]]})

    return {
        'tooltip': {'trigger': 'item', 'formatter': '{b}'},
        'xAxis': {'type': 'value', 'min': 0, 'max': 100, 'show': False},
        'yAxis': {'type': 'value', 'min': 0, 'max': 100, 'inverse': True, 'show': False},
        'series': [
            {
                'type': 'lines',
                'coordinateSystem': 'cartesian2d',
                'data': segments,
                'lineStyle': {'color': '#d97706', 'type': 'dashed', 'width': 2},
                'silent': True,
            },
            {
                'type': 'scatter',
                'data': points,
                'symbolSize': 18,
                'label': {'show': True, 'position': 'right', 'formatter': '{b}'},
            },
        ],
    }


def create_public_page(manager) -> None:
    """
    Register the public map page.

    Call this function during app setup.
    """

    @ui.page('/')
    def public_map_page():
        settings = manager.get_settings()
        map_data = manager.assembler.get_published_map_data()

        with ui.header().classes('bg-slate-800 px-4 py-2'):
            with ui.row().classes('items-center gap-4 w-full'):
                ui.label(settings['app_name']).classes('text-xl font-bold')
                ui.label(settings['version']).classes('text-sm text-gray-400')
                ui.space()
                if map_data.last_published_at:
                    ui.label(f"Last updated {map_data.last_published_at:%Y-%m-%d %H:%M} UTC").classes('text-sm')

        with ui.column().classes('w-full h-full p-4'):
            if not map_data.locations:
                ui.label('Nothing has been published yet.').classes('text-gray-400')
                return

            def on_point_click(e):
                data = e.data
                if not isinstance(data, dict) or 'safety' not in data:
                    return
                vendors = ', '.join(data.get('vendors', [])) or 'No vendors'
                ui.notify(f"{data['name']}: {data['safety']} | {vendors}")

            ui.echart(build_map_chart_options(map_data), on_point_click=on_point_click).classes('w-full h-[70vh]')
