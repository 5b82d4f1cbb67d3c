"""Turn cut segment pairs into wall tiles."""

from typing import Iterable, List, Tuple

from ..graph.borders import BorderRegistry
from ..terrain.grid import RoomXY


def extract_walls(
    cut_edges: Iterable[Tuple[int, int]],
    registry: BorderRegistry,
) -> List[RoomXY]:
    """Union of the border tiles of every cut pair, sorted by (x, y)."""
    walls = set()
    for a, b in cut_edges:
        walls.update(registry.cells(a, b))
    return sorted(walls)
