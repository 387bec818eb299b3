"""
Wasteland Map: public map viewer and admin editor for locations, vendors and roads.
"""

from wasteland_map.map_manager import MapManager
from wasteland_map.storage import create_backend

__all__ = [
    'MapManager',
    'create_backend',
]
