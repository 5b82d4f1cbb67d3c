"""Segmentation module: basins of the distance field."""

from .color_map import CellState, ColorMap
from .disjoint_set import DisjointTileSet
from .maxima import (
    MaximaLinker,
    color_partition,
    find_local_maxima,
)
from .watershed import (
    BucketQueue,
    SegmentationError,
    WatershedResult,
    flood_color_map,
)

__all__ = [
    "CellState",
    "ColorMap",
    "DisjointTileSet",
    "MaximaLinker",
    "color_partition",
    "find_local_maxima",
    "BucketQueue",
    "SegmentationError",
    "WatershedResult",
    "flood_color_map",
]
