"""
Distance transform for a room.

Associates every tile with its distance to the nearest wall. Two raster
passes over the room, adapted from the city block transform described in
https://arxiv.org/pdf/2106.03503.pdf
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import logging

import numpy as np

from .grid import (
    ROOM_AREA,
    ROOM_SIZE,
    Direction,
    RoomTerrain,
    RoomXY,
    xy_to_linear_index,
)

logger = logging.getLogger(__name__)


# Initial value for every open tile; no distance can be larger.
MAX_DIST = ROOM_SIZE


class Metric(Enum):
    """Adjacency used when measuring distance."""
    TAXICAB = "taxicab"        # 4 neighbours
    CHESSBOARD = "chessboard"  # 8 neighbours


# Forward pass walks x then y ascending, so every "leading" neighbour has
# already been finalized for this pass. The backward pass mirrors it.
_PASS_DIRECTIONS = {
    Metric.TAXICAB: (
        (Direction.LEFT, Direction.TOP),
        (Direction.RIGHT, Direction.BOTTOM),
    ),
    Metric.CHESSBOARD: (
        (Direction.TOP_LEFT, Direction.LEFT, Direction.BOTTOM_LEFT, Direction.TOP),
        (Direction.BOTTOM_RIGHT, Direction.RIGHT, Direction.TOP_RIGHT, Direction.BOTTOM),
    ),
}


def _apply_directions(
    data: np.ndarray,
    x: int,
    y: int,
    directions: Tuple[Direction, ...],
):
    """Lower a tile to min(neighbour + 1) over the given directions."""
    idx = x * ROOM_SIZE + y
    best = data[idx]
    if best == 0:
        return
    for d in directions:
        nx = x + d.dx
        ny = y + d.dy
        # Off-grid tiles never contribute, so edge tiles keep their real height.
        if 0 <= nx < ROOM_SIZE and 0 <= ny < ROOM_SIZE:
            candidate = data[nx * ROOM_SIZE + ny] + 1
            if candidate < best:
                best = candidate
    data[idx] = best


@dataclass
class DistanceField:
    """Per-tile distance to the nearest wall under one metric."""
    array: np.ndarray
    metric: Metric = Metric.TAXICAB

    @classmethod
    def build(cls, terrain: RoomTerrain, metric: Metric = Metric.TAXICAB) -> "DistanceField":
        forward, backward = _PASS_DIRECTIONS[metric]

        data = np.where(terrain.wall_mask(), 0, MAX_DIST).astype(np.int16)

        for x in range(ROOM_SIZE):
            for y in range(ROOM_SIZE):
                _apply_directions(data, x, y, forward)

        for x in range(ROOM_SIZE - 1, -1, -1):
            for y in range(ROOM_SIZE - 1, -1, -1):
                _apply_directions(data, x, y, backward)

        field = cls(array=data.astype(np.uint8), metric=metric)
        logger.debug(f"Distance field ({metric.value}): max height {field.max_height}")
        return field

    @classmethod
    def from_array(cls, values, metric: Metric = Metric.TAXICAB) -> "DistanceField":
        """Wrap precomputed heights (flat, linear index order)."""
        array = np.asarray(values, dtype=np.uint8).reshape(ROOM_AREA)
        return cls(array=array.copy(), metric=metric)

    def get(self, xy: RoomXY) -> int:
        return int(self.array[xy_to_linear_index(xy)])

    def get_index(self, idx: int) -> int:
        return int(self.array[idx])

    def is_open_index(self, idx: int) -> bool:
        return self.array[idx] != 0

    @property
    def max_height(self) -> int:
        return int(self.array.max())

    def as_grid(self) -> np.ndarray:
        """2-D view with rows indexed by y and columns by x."""
        return self.array.reshape(ROOM_SIZE, ROOM_SIZE).T

    def __str__(self) -> str:
        return format_distance_field(self)


def format_distance_field(field: DistanceField) -> str:
    """One text row per y, heights right-aligned in two columns."""
    grid = field.as_grid()
    return "\n".join(
        " ".join(f"{int(v):2}" for v in row) for row in grid
    ) + "\n"
