"""Border tiles grouped by the pair of segments they separate."""

from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Set, Tuple
import logging

from ..segmentation.color_map import CellState, ColorMap
from ..segmentation.watershed import SegmentationError
from ..terrain.grid import (
    CHESSBOARD_NEIGHBOURS,
    TAXICAB_NEIGHBOURS,
    RoomXY,
    xy_to_linear_index,
)

logger = logging.getLogger(__name__)


SegmentPair = Tuple[int, int]


def segment_pair(a: int, b: int) -> SegmentPair:
    """Unordered pair key, smaller id first."""
    return (a, b) if a < b else (b, a)


@dataclass
class BorderRecord:
    """The border tiles between exactly two segments."""
    pair: SegmentPair
    cells: List[RoomXY] = field(default_factory=list)

    @property
    def cost(self) -> int:
        return len(self.cells)


def _resolved_colors(color_map: ColorMap, neighbours: Iterable[int]) -> List[int]:
    states = color_map.states
    colors = color_map.colors
    found: Set[int] = set()
    for adj in neighbours:
        if states[adj] == CellState.RESOLVED:
            found.add(int(colors[adj]))
    return sorted(found)


@dataclass
class BorderRegistry:
    """
    All border records of a segmented room.

    Built in two passes over the border tiles:
    1. Orthogonal neighbours decide which segment pairs are linked. Two
       segments meeting only across a corner do not get linked here.
    2. Every border tile is added to each already linked pair among its
       eight neighbours, so corner tiles of a wall are included.
    """
    records: Dict[SegmentPair, BorderRecord] = field(default_factory=dict)

    @classmethod
    def build(cls, color_map: ColorMap, borders: Iterable[RoomXY]) -> "BorderRegistry":
        registry = cls()
        borders = list(borders)
        linked_by: Dict[RoomXY, List[SegmentPair]] = {}

        # === Pass 1: link pairs through orthogonal contact ===
        for xy in borders:
            idx = xy_to_linear_index(xy)
            colors = _resolved_colors(color_map, TAXICAB_NEIGHBOURS[idx])
            pairs = list(combinations(colors, 2))
            for pair in pairs:
                if pair not in registry.records:
                    registry.records[pair] = BorderRecord(pair=pair)
            linked_by[xy] = pairs

        # === Pass 2: collect tiles, diagonals included ===
        for xy in borders:
            idx = xy_to_linear_index(xy)
            colors = _resolved_colors(color_map, CHESSBOARD_NEIGHBOURS[idx])
            added = set()
            for pair in combinations(colors, 2):
                record = registry.records.get(pair)
                if record is not None:
                    record.cells.append(xy)
                    added.add(pair)

            missing = [pair for pair in linked_by[xy] if pair not in added]
            if missing:
                raise SegmentationError(
                    f"border tile {xy} linked {missing} but was not recorded for them"
                )

        logger.debug(
            f"Border registry: {len(registry.records)} segment pairs "
            f"from {len(borders)} border tiles"
        )
        return registry

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, pair) -> bool:
        a, b = pair
        return segment_pair(a, b) in self.records

    def pairs(self) -> List[SegmentPair]:
        return sorted(self.records)

    def get(self, a: int, b: int) -> BorderRecord:
        return self.records[segment_pair(a, b)]

    def cost(self, a: int, b: int) -> int:
        record = self.records.get(segment_pair(a, b))
        return record.cost if record else 0

    def cells(self, a: int, b: int) -> List[RoomXY]:
        record = self.records.get(segment_pair(a, b))
        return list(record.cells) if record else []

    def neighbours(self, color: int) -> List[int]:
        """Segments linked to the given one."""
        found = set()
        for a, b in self.records:
            if a == color:
                found.add(b)
            elif b == color:
                found.add(a)
        return sorted(found)

    def records_for(self, xy: RoomXY) -> List[SegmentPair]:
        """Every pair whose record contains the tile."""
        return sorted(
            pair for pair, record in self.records.items() if xy in record.cells
        )
