"""Disjoint tile set that remembers the highest tile of every set."""

from typing import Tuple

import numpy as np

from ..terrain.distance_field import DistanceField
from ..terrain.grid import ROOM_AREA, RoomXY, linear_index_to_xy, xy_to_linear_index


class DisjointTileSet:
    """
    Union-find over every tile of the room.

    Besides parent and rank, each root caches the index of its maxima: the
    member with the greatest height. When two sets merge the higher of the
    two maxima wins; equal heights keep the lower linear index so results do
    not depend on union order.
    """

    def __init__(self, height_map: DistanceField):
        self.height_map = height_map
        self.parent = np.arange(ROOM_AREA, dtype=np.int32)
        self.rank = np.zeros(ROOM_AREA, dtype=np.int32)
        self.maxima = np.arange(ROOM_AREA, dtype=np.int32)

    def is_singleton(self, index: int) -> bool:
        return self.rank[index] == 0 and self.parent[index] == index

    def find(self, index: int) -> int:
        parent = self.parent
        root = index
        while parent[root] != root:
            root = int(parent[root])
        # Path compression
        while parent[index] != root:
            next_index = int(parent[index])
            parent[index] = root
            index = next_index
        return root

    def same_set(self, a: int, b: int) -> bool:
        return self.find(a) == self.find(b)

    def maxima_index_for(self, index: int) -> int:
        return int(self.maxima[self.find(index)])

    def maxima_for(self, index: int) -> RoomXY:
        """Gets the maxima for the set containing the index."""
        return linear_index_to_xy(self.maxima_index_for(index))

    def maxima_and_height_for(self, index: int) -> Tuple[RoomXY, int]:
        maxima = self.maxima_index_for(index)
        return linear_index_to_xy(maxima), self.height_map.get_index(maxima)

    def maxima_height_for_xy(self, xy: RoomXY) -> int:
        return self.maxima_and_height_for(xy_to_linear_index(xy))[1]

    def _higher_maxima(self, a: int, b: int) -> int:
        height_a = self.height_map.get_index(a)
        height_b = self.height_map.get_index(b)
        if height_a != height_b:
            return a if height_a > height_b else b
        return min(a, b)

    def union(self, a: int, b: int):
        aset = self.find(a)
        bset = self.find(b)

        if aset == bset:
            return

        new_maxima = self._higher_maxima(int(self.maxima[aset]), int(self.maxima[bset]))

        if self.rank[aset] < self.rank[bset]:
            self.parent[aset] = bset
            self.maxima[bset] = new_maxima
        elif self.rank[aset] > self.rank[bset]:
            self.parent[bset] = aset
            self.maxima[aset] = new_maxima
        else:
            self.parent[bset] = aset
            self.rank[aset] += 1
            self.maxima[aset] = new_maxima

    def union_xy(self, a: RoomXY, b: RoomXY):
        self.union(xy_to_linear_index(a), xy_to_linear_index(b))
