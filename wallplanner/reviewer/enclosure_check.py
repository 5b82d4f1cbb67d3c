"""Flood-fill check that planned walls really enclose the protected tiles."""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, Iterable, Optional

from ..terrain.grid import (
    CHESSBOARD_NEIGHBOURS,
    RoomTerrain,
    RoomXY,
    linear_index_to_xy,
    to_room_xy,
    xy_to_linear_index,
)


class EnclosureResult(Enum):
    """Result of the enclosure check."""
    PASS = "pass"
    FAIL = "fail"


@dataclass
class EnclosureCheckResult:
    """Result of running the enclosure check."""
    result: EnclosureResult
    reached_count: int = 0
    leaked_from: Optional[RoomXY] = None  # protected tile the leak starts at
    reached_edge: Optional[RoomXY] = None

    @property
    def passed(self) -> bool:
        return self.result is EnclosureResult.PASS


def check_enclosure(
    terrain: RoomTerrain,
    walls: Iterable[RoomXY],
    protected: Iterable,
) -> EnclosureCheckResult:
    """
    Walk from every protected tile through open tiles, diagonals included.

    Returns FAIL as soon as the walk reaches the outer ring. Protected tiles
    that are themselves barriers are not walked from.
    """
    blocked = terrain.wall_mask().copy()
    for xy in walls:
        blocked[xy_to_linear_index(xy)] = True

    origin: Dict[int, int] = {}
    queue: Deque[int] = deque()
    for raw in protected:
        idx = xy_to_linear_index(to_room_xy(raw))
        if blocked[idx] or idx in origin:
            continue
        origin[idx] = idx
        queue.append(idx)

    while queue:
        idx = queue.popleft()
        xy = linear_index_to_xy(idx)
        if xy.on_edge:
            return EnclosureCheckResult(
                result=EnclosureResult.FAIL,
                reached_count=len(origin),
                leaked_from=linear_index_to_xy(origin[idx]),
                reached_edge=xy,
            )
        for adj in CHESSBOARD_NEIGHBOURS[idx]:
            if blocked[adj] or adj in origin:
                continue
            origin[adj] = origin[idx]
            queue.append(adj)

    return EnclosureCheckResult(result=EnclosureResult.PASS, reached_count=len(origin))
