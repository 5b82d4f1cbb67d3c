"""
Tile-level minimum vertex cut between protected tiles and the room exits.

Used when the segment plan does not hold up, or when asked for directly.
Every open tile is split into an in node and an out node joined by an edge
of capacity 1, so cutting that edge means building on the tile. Moving
between neighbouring tiles is free.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional
import logging

from ..terrain.grid import (
    CHESSBOARD_NEIGHBOURS,
    EDGE_INDICES,
    ROOM_AREA,
    RoomTerrain,
    RoomXY,
    linear_index_to_xy,
    to_room_xy,
    xy_to_linear_index,
)

logger = logging.getLogger(__name__)

INF = ROOM_AREA + 1


@dataclass
class TileCutConfig:
    """Configuration for the tile-level cut."""
    keep_exit_margin: bool = True  # also keep tiles next to exits free


@dataclass
class TileCutResult:
    walls: List[RoomXY] = field(default_factory=list)
    flow_value: int = 0
    exposed: List[RoomXY] = field(default_factory=list)  # protected tiles that cannot be enclosed


def build_exits(terrain: RoomTerrain, keep_exit_margin: bool = True) -> List[bool]:
    """Open ring tiles, optionally with their open neighbours."""
    exits = [False] * ROOM_AREA
    for idx in EDGE_INDICES:
        if terrain.is_wall_index(idx):
            continue
        exits[idx] = True
        if keep_exit_margin:
            for adj in CHESSBOARD_NEIGHBOURS[idx]:
                if not terrain.is_wall_index(adj):
                    exits[adj] = True
    return exits


def _in(idx: int) -> int:
    return 2 * idx


def _out(idx: int) -> int:
    return 2 * idx + 1


def min_cut_to_exit(
    terrain: RoomTerrain,
    protected: Iterable,
    config: Optional[TileCutConfig] = None,
) -> TileCutResult:
    config = config or TileCutConfig()
    exits = build_exits(terrain, config.keep_exit_margin)

    guarded = set()
    exposed: List[RoomXY] = []
    for raw in protected:
        xy = to_room_xy(raw)
        idx = xy_to_linear_index(xy)
        if terrain.is_wall_index(idx):
            continue
        # A protected tile on or touching an exit can't be cut off from it.
        if exits[idx] or any(exits[adj] for adj in CHESSBOARD_NEIGHBOURS[idx]):
            exposed.append(xy)
            continue
        guarded.add(idx)

    if exposed:
        logger.warning(f"{len(exposed)} protected tiles touch an exit: {exposed}")
    if not guarded:
        return TileCutResult(exposed=sorted(exposed))

    residual = _build_residual(terrain, guarded)
    sources = [_in(idx) for idx in sorted(guarded)]

    flow_value = 0
    while True:
        path = _augmenting_path(residual, sources, exits)
        if path is None:
            break
        parent, sink = path

        bottleneck = INF
        node = sink
        while parent[node] >= 0:
            prev = parent[node]
            bottleneck = min(bottleneck, residual[prev][node])
            node = prev

        node = sink
        while parent[node] >= 0:
            prev = parent[node]
            residual[prev][node] -= bottleneck
            residual[node][prev] += bottleneck
            node = prev
        flow_value += bottleneck

    reachable = _reachable(residual, sources)
    walls = [
        linear_index_to_xy(idx)
        for idx in range(ROOM_AREA)
        if _in(idx) in reachable and _out(idx) not in reachable
    ]

    logger.debug(f"Tile cut: flow {flow_value}, {len(walls)} walls")
    return TileCutResult(walls=sorted(walls), flow_value=flow_value, exposed=sorted(exposed))


def _build_residual(terrain: RoomTerrain, guarded) -> List[Dict[int, int]]:
    residual: List[Dict[int, int]] = [dict() for _ in range(2 * ROOM_AREA)]
    for idx in range(ROOM_AREA):
        if terrain.is_wall_index(idx):
            continue
        inner = INF if idx in guarded else 1
        residual[_in(idx)][_out(idx)] = inner
        residual[_out(idx)].setdefault(_in(idx), 0)
        for adj in CHESSBOARD_NEIGHBOURS[idx]:
            if terrain.is_wall_index(adj):
                continue
            residual[_out(idx)][_in(adj)] = INF
            residual[_in(adj)].setdefault(_out(idx), 0)
    return residual


def _augmenting_path(residual, sources, exits):
    parent: Dict[int, int] = {s: -1 for s in sources}
    queue: Deque[int] = deque(sources)
    while queue:
        u = queue.popleft()
        for v, cap in residual[u].items():
            if cap <= 0 or v in parent:
                continue
            parent[v] = u
            # reaching the in node of an exit is reaching the sink
            if v % 2 == 0 and exits[v // 2]:
                return parent, v
            queue.append(v)
    return None


def _reachable(residual, sources) -> set:
    seen = set(sources)
    queue: Deque[int] = deque(sources)
    while queue:
        u = queue.popleft()
        for v, cap in residual[u].items():
            if cap > 0 and v not in seen:
                seen.add(v)
                queue.append(v)
    return seen
