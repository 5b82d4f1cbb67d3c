"""Terrain module: room grid, distance transform and map loading."""

from .grid import (
    ROOM_SIZE,
    ROOM_AREA,
    Direction,
    InvalidCoordinateError,
    RoomTerrain,
    RoomXY,
    Terrain,
    linear_index_to_xy,
    room_edges_xy,
    surrounding_xy,
    taxicab_adjacent,
    to_room_xy,
    xy_to_linear_index,
)
from .distance_field import (
    MAX_DIST,
    DistanceField,
    Metric,
    format_distance_field,
)
from .loader import (
    TerrainFormatError,
    format_terrain,
    load_terrain,
    parse_terrain,
)

__all__ = [
    "ROOM_SIZE",
    "ROOM_AREA",
    "Direction",
    "InvalidCoordinateError",
    "RoomTerrain",
    "RoomXY",
    "Terrain",
    "linear_index_to_xy",
    "room_edges_xy",
    "surrounding_xy",
    "taxicab_adjacent",
    "to_room_xy",
    "xy_to_linear_index",
    "MAX_DIST",
    "DistanceField",
    "Metric",
    "format_distance_field",
    "TerrainFormatError",
    "format_terrain",
    "load_terrain",
    "parse_terrain",
]
