"""Maximum flow / minimum cut over the segment graph."""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set, Tuple
import logging

import numpy as np

from ..graph.segment_graph import NodeKind, SegmentGraph
from ..segmentation.watershed import SegmentationError

logger = logging.getLogger(__name__)


@dataclass
class FlowResult:
    """Outcome of a max-flow run."""
    flow_value: int
    cut_edges: List[Tuple[int, int]] = field(default_factory=list)  # (source side, sink side)
    cut_capacity: int = 0
    source_side: Set[int] = field(default_factory=set)
    augmentations: int = 0


def max_flow(graph: SegmentGraph) -> FlowResult:
    """
    Edmonds-Karp from all sources at once to any sink.

    The cut is read off the final residual graph: every original edge from a
    node still reachable from the sources to a node that is not. Its capacity
    always equals the flow value.
    """
    capacity = graph.capacity
    residual = capacity.astype(np.int64, copy=True)
    sources = graph.sources()
    is_sink = [kind is NodeKind.SINK for kind in graph.kinds]

    if not sources:
        logger.debug("No source segments, nothing to cut")
        return FlowResult(flow_value=0)

    flow_value = 0
    augmentations = 0
    while True:
        parents = _augmenting_path(residual, sources, is_sink)
        if parents is None:
            break
        parent, sink = parents

        # Bottleneck along the path
        bottleneck = None
        node = sink
        while parent[node] >= 0:
            prev = parent[node]
            cap = int(residual[prev, node])
            bottleneck = cap if bottleneck is None else min(bottleneck, cap)
            node = prev

        node = sink
        while parent[node] >= 0:
            prev = parent[node]
            residual[prev, node] -= bottleneck
            residual[node, prev] += bottleneck
            node = prev

        flow_value += bottleneck
        augmentations += 1

    source_side = _reachable(residual, sources)
    cut_edges = []
    for a in sorted(source_side):
        for b in np.flatnonzero(capacity[a]):
            b = int(b)
            if b not in source_side:
                cut_edges.append((a, b))

    cut_capacity = int(sum(capacity[a, b] for a, b in cut_edges))
    if cut_capacity != flow_value:
        raise SegmentationError(
            f"Cut capacity {cut_capacity} does not match flow value {flow_value}"
        )

    logger.debug(
        f"Max flow {flow_value} after {augmentations} augmentations, "
        f"{len(cut_edges)} cut edges"
    )
    return FlowResult(
        flow_value=flow_value,
        cut_edges=cut_edges,
        cut_capacity=cut_capacity,
        source_side=source_side,
        augmentations=augmentations,
    )


def _augmenting_path(
    residual: np.ndarray,
    sources: List[int],
    is_sink: List[bool],
) -> Optional[Tuple[List[int], int]]:
    """Shortest path from any source to any sink, as a parent list."""
    parent = [-2] * len(is_sink)
    queue: Deque[int] = deque()
    for s in sources:
        parent[s] = -1
        queue.append(s)

    while queue:
        u = queue.popleft()
        for v in np.flatnonzero(residual[u] > 0):
            v = int(v)
            if parent[v] != -2:
                continue
            parent[v] = u
            if is_sink[v]:
                return parent, v
            queue.append(v)
    return None


def _reachable(residual: np.ndarray, sources: List[int]) -> Set[int]:
    seen = set(sources)
    queue: Deque[int] = deque(sources)
    while queue:
        u = queue.popleft()
        for v in np.flatnonzero(residual[u] > 0):
            v = int(v)
            if v not in seen:
                seen.add(v)
                queue.append(v)
    return seen
