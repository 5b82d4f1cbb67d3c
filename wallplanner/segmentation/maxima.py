"""Linking every open tile to the local maximum it climbs to."""

from collections import deque
from typing import Dict, List, Tuple
import logging

from ..terrain.distance_field import DistanceField
from ..terrain.grid import (
    CHESSBOARD_NEIGHBOURS,
    ROOM_AREA,
    RoomXY,
    linear_index_to_xy,
)
from .color_map import ColorMap
from .disjoint_set import DisjointTileSet

logger = logging.getLogger(__name__)


class MaximaLinker:
    """
    Builds a DisjointTileSet where every set is one basin of the height map.

    A tile with a strictly higher neighbour joins its steepest neighbour and
    the walk continues uphill. A tile without one sits on an equal-height
    plateau. If no tile of the plateau has a way up, the plateau is a local
    maximum and becomes one set. Otherwise every plateau tile joins the
    basin of the nearest exit tile, so a ridge between two basins is split
    between them instead of merging them.

    The walk uses an explicit stack; nothing recurses.
    """

    def __init__(self, height_map: DistanceField):
        self.height_map = height_map
        self.heights: List[int] = height_map.array.tolist()
        self.dts = DisjointTileSet(height_map)
        self.visited = [False] * ROOM_AREA

    def link_all(self) -> DisjointTileSet:
        for idx in range(ROOM_AREA):
            # skip walls and tiles we have already placed
            if self.heights[idx] == 0 or self.visited[idx]:
                continue
            self.link_to_maxima(idx)
        return self.dts

    def steepest_higher(self, idx: int) -> int:
        """Index of the highest strictly higher neighbour, or -1."""
        heights = self.heights
        best = -1
        best_height = heights[idx]
        for adj in CHESSBOARD_NEIGHBOURS[idx]:
            if heights[adj] > best_height:
                best = adj
                best_height = heights[adj]
        return best

    def link_to_maxima(self, start: int):
        stack = [start]
        while stack:
            idx = stack.pop()
            if self.visited[idx]:
                continue

            higher = self.steepest_higher(idx)
            if higher >= 0:
                self.visited[idx] = True
                self.dts.union(higher, idx)
                if not self.visited[higher]:
                    stack.append(higher)
                continue

            stack.extend(self._link_plateau(idx))

    def _link_plateau(self, start: int) -> List[int]:
        """
        Link the plateau containing `start`.

        Returns the uphill tiles that still need to be walked.
        """
        heights = self.heights
        visited = self.visited
        height = heights[start]

        interior = [start]
        seen = {start}
        exits = []
        queue = deque([start])

        while queue:
            idx = queue.popleft()
            for adj in CHESSBOARD_NEIGHBOURS[idx]:
                if heights[adj] != height or adj in seen:
                    continue
                seen.add(adj)
                if visited[adj] or self.steepest_higher(adj) >= 0:
                    exits.append(adj)
                else:
                    interior.append(adj)
                    queue.append(adj)

        for idx in interior:
            visited[idx] = True

        if not exits:
            for idx in interior[1:]:
                self.dts.union(start, idx)
            return []

        exits.sort()
        uphill = []
        for idx in exits:
            if visited[idx]:
                continue
            visited[idx] = True
            higher = self.steepest_higher(idx)
            self.dts.union(higher, idx)
            if not visited[higher]:
                uphill.append(higher)

        # Split the plateau between the exits, nearest exit first.
        unclaimed = set(interior)
        queue = deque(exits)
        while queue:
            idx = queue.popleft()
            for adj in CHESSBOARD_NEIGHBOURS[idx]:
                if adj in unclaimed:
                    unclaimed.discard(adj)
                    self.dts.union(idx, adj)
                    queue.append(adj)

        return uphill


def find_local_maxima(height_map: DistanceField) -> Tuple[List[RoomXY], DisjointTileSet]:
    """
    Get the list of maxima, one per basin.

    Returns:
        Sorted, deduplicated maxima and the DisjointTileSet they came from
    """
    dts = MaximaLinker(height_map).link_all()

    maxima = set()
    for idx in range(ROOM_AREA):
        if height_map.get_index(idx) == 0:
            continue
        maxima.add(dts.maxima_index_for(idx))

    logger.debug(f"Found {len(maxima)} local maxima")
    return [linear_index_to_xy(idx) for idx in sorted(maxima)], dts


def color_partition(height_map: DistanceField, dts: DisjointTileSet) -> Tuple[ColorMap, int]:
    """
    Color every open tile by its disjoint set.

    This is the provisional partition before flooding; useful for debugging.
    Returns the color map and the number of colors used.
    """
    color_map = ColorMap()
    color_index: Dict[int, int] = {}

    for idx in range(ROOM_AREA):
        if height_map.get_index(idx) == 0:
            continue
        root = dts.find(idx)
        if root not in color_index:
            color_index[root] = len(color_index)
        color_map.set_resolved(idx, color_index[root])

    logger.debug(f"Partition uses {len(color_index)} colors")
    return color_map, len(color_index)
