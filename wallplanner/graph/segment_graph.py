"""Capacitated graph over segments."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Set, Tuple
import logging

import numpy as np

from ..segmentation.color_map import CellState
from ..segmentation.watershed import WatershedResult
from ..terrain.grid import (
    CHESSBOARD_NEIGHBOURS,
    EDGE_INDICES,
    RoomXY,
    xy_to_linear_index,
)
from .borders import BorderRegistry

logger = logging.getLogger(__name__)


class NodeKind(Enum):
    """Role of a segment in the cut problem."""
    NORMAL = "normal"
    SOURCE = "source"  # holds a protected point
    SINK = "sink"      # touches the outer ring


@dataclass
class SegmentGraph:
    """
    Dense capacity matrix over segment ids.

    capacity[a, b] is the cost of walling off the border between a and b; it
    starts symmetric. Segment counts stay in the tens, so a dense matrix is
    fine here.
    """
    capacity: np.ndarray
    kinds: List[NodeKind]
    protected_segments: Set[int] = field(default_factory=set)

    @property
    def node_count(self) -> int:
        return len(self.kinds)

    @classmethod
    def empty(cls, node_count: int) -> "SegmentGraph":
        return cls(
            capacity=np.zeros((node_count, node_count), dtype=np.int64),
            kinds=[NodeKind.NORMAL] * node_count,
        )

    @classmethod
    def from_edges(
        cls,
        node_count: int,
        edges: Iterable[Tuple[int, int, int]],
        sources: Iterable[int] = (),
        sinks: Iterable[int] = (),
    ) -> "SegmentGraph":
        """Build a graph directly from (a, b, capacity) triples."""
        graph = cls.empty(node_count)
        for a, b, cap in edges:
            graph.add_edge(a, b, cap)
        for node in sources:
            graph.mark_source(node)
        for node in sinks:
            graph.mark_sink(node)
        return graph

    @classmethod
    def build(
        cls,
        watershed: WatershedResult,
        registry: BorderRegistry,
        protected: Iterable[RoomXY],
    ) -> "SegmentGraph":
        graph = cls.empty(watershed.color_count)

        for (a, b), record in registry.records.items():
            graph.add_edge(a, b, record.cost)

        color_map = watershed.color_map

        # === Sources ===
        for xy in protected:
            idx = xy_to_linear_index(xy)
            state = color_map.state(idx)
            if state is CellState.RESOLVED:
                graph.mark_source(color_map.color(idx))
            elif state is CellState.BORDER:
                for color in _adjacent_colors(watershed, idx):
                    graph.mark_source(color)

        # === Sinks (after sources, so exposure is visible) ===
        for idx in EDGE_INDICES:
            state = color_map.state(idx)
            if state is CellState.RESOLVED:
                graph.mark_sink(color_map.color(idx))
            elif state is CellState.BORDER:
                for color in _adjacent_colors(watershed, idx):
                    graph.mark_sink(color)

        logger.debug(
            f"Segment graph: {graph.node_count} nodes, {len(registry)} edges, "
            f"{len(graph.sources())} sources, {len(graph.sinks())} sinks"
        )
        return graph

    def add_edge(self, a: int, b: int, cap: int):
        if a == b:
            raise ValueError(f"Segment {a} cannot border itself")
        self.capacity[a, b] = cap
        self.capacity[b, a] = cap

    def mark_source(self, node: int):
        self.protected_segments.add(node)
        self.kinds[node] = NodeKind.SOURCE

    def mark_sink(self, node: int):
        self.kinds[node] = NodeKind.SINK

    def sources(self) -> List[int]:
        return [n for n, kind in enumerate(self.kinds) if kind is NodeKind.SOURCE]

    def sinks(self) -> List[int]:
        return [n for n, kind in enumerate(self.kinds) if kind is NodeKind.SINK]

    def exposed_segments(self) -> List[int]:
        """Protected segments that also touch the outer ring."""
        return sorted(
            n for n in self.protected_segments if self.kinds[n] is NodeKind.SINK
        )

    def neighbours(self, node: int) -> List[int]:
        return [int(n) for n in np.flatnonzero(self.capacity[node])]


def _adjacent_colors(watershed: WatershedResult, idx: int) -> List[int]:
    color_map = watershed.color_map
    found = set()
    for adj in CHESSBOARD_NEIGHBOURS[idx]:
        color = color_map.resolved_color(adj)
        if color is not None:
            found.add(color)
    return sorted(found)
