"""Graph module for segment borders and the cut graph."""

from .borders import (
    BorderRecord,
    BorderRegistry,
    SegmentPair,
    segment_pair,
)
from .segment_graph import (
    NodeKind,
    SegmentGraph,
)

__all__ = [
    "BorderRecord",
    "BorderRegistry",
    "SegmentPair",
    "segment_pair",
    "NodeKind",
    "SegmentGraph",
]
