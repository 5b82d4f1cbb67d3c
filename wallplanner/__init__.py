"""Wall planning for 50x50 rooms via distance-transform watershed and min cut."""

from .pipeline import (
    Advisory,
    PlannerConfig,
    PlanResult,
    WallPlanner,
    plan_walls,
)
from .segmentation.watershed import SegmentationError
from .terrain.distance_field import Metric
from .terrain.grid import InvalidCoordinateError, RoomTerrain, RoomXY
from .terrain.loader import TerrainFormatError, load_terrain, parse_terrain

__all__ = [
    "Advisory",
    "PlannerConfig",
    "PlanResult",
    "WallPlanner",
    "plan_walls",
    "SegmentationError",
    "Metric",
    "InvalidCoordinateError",
    "RoomTerrain",
    "RoomXY",
    "TerrainFormatError",
    "load_terrain",
    "parse_terrain",
]
