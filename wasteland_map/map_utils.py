"""
Coordinate helpers for the map.

Coordinates are percentages of map space (0-100 on both axes). Road paths
are SVG quadratic curves expressed in those percentages.
"""

import math
import random
from typing import NamedTuple, Optional, Protocol, Union

from wasteland_map.models import DEFAULT_ICON, TYPE_ICONS, LocationType

MAX_CURVE_OFFSET = 20.0


class HasCoordinates(Protocol):
    x: float
    y: float


class Coordinates(NamedTuple):
    x: float
    y: float


def calculate_distance(start: HasCoordinates, end: HasCoordinates) -> float:
    """Euclidean distance between two points in map space."""
    return math.hypot(end.x - start.x, end.y - start.y)


def _fmt(value: float) -> str:
    return f"{round(value, 2):g}"


def generate_road_path(
    start: HasCoordinates,
    end: HasCoordinates,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Generate a curved SVG path between two points.

    The control point is the midpoint nudged by a random offset of at most
    min(20, distance / 4) so roads look hand-drawn. Pass a seeded ``rng``
    for reproducible paths.

    Returns:
        Path string like ``M 25% 60% Q 35% 45% 45% 30%``
    """
    rng = rng or random
    mid_x = (start.x + end.x) / 2
    mid_y = (start.y + end.y) / 2

    offset = min(MAX_CURVE_OFFSET, calculate_distance(start, end) / 4)
    control_x = mid_x + (rng.random() - 0.5) * offset
    control_y = mid_y + (rng.random() - 0.5) * offset

    return (
        f"M {_fmt(start.x)}% {_fmt(start.y)}% "
        f"Q {_fmt(control_x)}% {_fmt(control_y)}% "
        f"{_fmt(end.x)}% {_fmt(end.y)}%"
    )


def default_icon_for(location_type: Union[LocationType, str]) -> str:
    """Icon used when a location is created without one."""
    try:
        return TYPE_ICONS[LocationType(location_type)]
    except ValueError:
        return DEFAULT_ICON


def safety_rating_text(rating: int) -> str:
    return {
        5: "VERY SAFE",
        4: "SAFE",
        3: "MODERATE",
        2: "DANGEROUS",
        1: "EXTREMELY DANGEROUS",
    }.get(rating, "UNKNOWN")
