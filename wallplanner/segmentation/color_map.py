"""Per-tile segment coloring."""

from enum import IntEnum
from typing import Optional

import numpy as np

from ..terrain.grid import ROOM_AREA, RoomXY, xy_to_linear_index


class CellState(IntEnum):
    """Coloring state of a tile."""
    EMPTY = 0
    PENDING = 1
    RESOLVED = 2
    BORDER = 3


class ColorMap:
    """
    Dense map from tile to coloring state plus segment id.

    The segment id is only meaningful for PENDING and RESOLVED tiles.
    """

    def __init__(self):
        self.states = np.full(ROOM_AREA, CellState.EMPTY, dtype=np.int8)
        self.colors = np.full(ROOM_AREA, -1, dtype=np.int32)

    def state(self, idx: int) -> CellState:
        return CellState(int(self.states[idx]))

    def state_xy(self, xy: RoomXY) -> CellState:
        return self.state(xy_to_linear_index(xy))

    def color(self, idx: int) -> int:
        return int(self.colors[idx])

    def resolved_color(self, idx: int) -> Optional[int]:
        """Segment id of a resolved tile, None for anything else."""
        if self.states[idx] == CellState.RESOLVED:
            return int(self.colors[idx])
        return None

    def resolved_color_xy(self, xy: RoomXY) -> Optional[int]:
        return self.resolved_color(xy_to_linear_index(xy))

    def is_border(self, idx: int) -> bool:
        return self.states[idx] == CellState.BORDER

    def set_pending(self, idx: int, color: int):
        self.states[idx] = CellState.PENDING
        self.colors[idx] = color

    def set_resolved(self, idx: int, color: int):
        self.states[idx] = CellState.RESOLVED
        self.colors[idx] = color

    def set_border(self, idx: int):
        self.states[idx] = CellState.BORDER
        self.colors[idx] = -1

    def label(self, idx: int) -> str:
        """Short text form: E, B, P<id> or <id>."""
        state = self.state(idx)
        if state is CellState.EMPTY:
            return "E"
        if state is CellState.BORDER:
            return "B"
        if state is CellState.PENDING:
            return f"P{self.colors[idx]}"
        return str(int(self.colors[idx]))

    def count(self, state: CellState) -> int:
        return int(np.count_nonzero(self.states == state))
