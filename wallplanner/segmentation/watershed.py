"""Priority flood that grows one segment out of every maxima."""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional, Tuple
import logging

from ..terrain.distance_field import DistanceField
from ..terrain.grid import (
    CHESSBOARD_NEIGHBOURS,
    ROOM_AREA,
    RoomXY,
    linear_index_to_xy,
    xy_to_linear_index,
)
from .color_map import CellState, ColorMap

logger = logging.getLogger(__name__)


class SegmentationError(RuntimeError):
    """An internal invariant of the segmentation was broken."""


class BucketQueue:
    """
    Max-priority queue for small integer priorities.

    Items of equal priority come out in insertion order.
    """

    def __init__(self, max_priority: int):
        self._buckets: List[Deque[int]] = [deque() for _ in range(max_priority + 1)]
        self._top = -1
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def push(self, item: int, priority: int):
        self._buckets[priority].append(item)
        if priority > self._top:
            self._top = priority
        self._size += 1

    def pop(self) -> Tuple[int, int]:
        if self._size == 0:
            raise IndexError("pop from empty BucketQueue")
        while not self._buckets[self._top]:
            self._top -= 1
        self._size -= 1
        return self._buckets[self._top].popleft(), self._top


@dataclass
class WatershedResult:
    """Output of the flood: every open tile is a border or has a segment."""
    color_map: ColorMap
    color_count: int
    borders: List[RoomXY] = field(default_factory=list)
    seeds: List[RoomXY] = field(default_factory=list)

    def segment_of(self, xy: RoomXY) -> Optional[int]:
        return self.color_map.resolved_color_xy(xy)


def _touches_other_color(color_map: ColorMap, idx: int, color: int) -> bool:
    """True when a resolved neighbour has a different color."""
    states = color_map.states
    colors = color_map.colors
    for adj in CHESSBOARD_NEIGHBOURS[idx]:
        if states[adj] == CellState.RESOLVED and colors[adj] != color:
            return True
    return False


def flood_color_map(height_map: DistanceField, maximas: Iterable[RoomXY]) -> WatershedResult:
    """
    Flood a color map outward from the maxima, highest tiles first.

    A pending tile that would touch (diagonals included) a tile resolved to
    another color becomes a border instead and is not expanded. Because tiles
    come out strictly by descending height, two equally tall basins grow at
    the same pace regardless of the order they were seeded in.
    """
    heights = height_map.array.tolist()
    queue = BucketQueue(max(heights))
    color_map = ColorMap()
    borders: List[RoomXY] = []
    seeds: List[RoomXY] = []

    color_count = 0
    for maxima in maximas:
        idx = xy_to_linear_index(maxima)
        if heights[idx] == 0:
            raise SegmentationError(f"maxima at {maxima} is a wall")
        if color_map.state(idx) is not CellState.EMPTY:
            continue
        color_map.set_resolved(idx, color_count)
        color_count += 1
        seeds.append(maxima)
        queue.push(idx, heights[idx])

    while True:
        _drain(queue, heights, color_map, borders)

        # Open tiles walled off by borders never get reached from a maxima;
        # they become segments of their own.
        leftover = _highest_empty(heights, color_map)
        if leftover < 0:
            break
        logger.debug(f"Seeding unreached tile {linear_index_to_xy(leftover)} as segment {color_count}")
        color_map.set_resolved(leftover, color_count)
        color_count += 1
        seeds.append(linear_index_to_xy(leftover))
        queue.push(leftover, heights[leftover])

    logger.debug(f"Flood produced {color_count} segments and {len(borders)} border tiles")
    return WatershedResult(
        color_map=color_map,
        color_count=color_count,
        borders=borders,
        seeds=seeds,
    )


def _drain(
    queue: BucketQueue,
    heights: List[int],
    color_map: ColorMap,
    borders: List[RoomXY],
):
    while len(queue):
        idx, _ = queue.pop()
        state = color_map.state(idx)

        if state is CellState.PENDING:
            color = color_map.color(idx)
            # If it's a pending neighbour, we'll look at this tile again from there.
            if _touches_other_color(color_map, idx, color):
                color_map.set_border(idx)
                borders.append(linear_index_to_xy(idx))
                continue
            color_map.set_resolved(idx, color)
        elif state is CellState.RESOLVED:
            # only the seeds are resolved when they come out of the queue
            color = color_map.color(idx)
        else:
            raise SegmentationError(
                f"tile {linear_index_to_xy(idx)} was {color_map.label(idx)} "
                f"when it should be pending or resolved"
            )

        for adj in CHESSBOARD_NEIGHBOURS[idx]:
            # we skip walls
            if heights[adj] == 0:
                continue
            if color_map.states[adj] == CellState.EMPTY:
                color_map.set_pending(adj, color)
                queue.push(adj, heights[adj])


def _highest_empty(heights: List[int], color_map: ColorMap) -> int:
    best = -1
    best_height = 0
    states = color_map.states
    for idx in range(ROOM_AREA):
        if heights[idx] > best_height and states[idx] == CellState.EMPTY:
            best = idx
            best_height = heights[idx]
    return best
