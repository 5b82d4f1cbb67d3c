"""Room grid coordinates, directions and terrain."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple
import logging

import numpy as np

logger = logging.getLogger(__name__)


ROOM_SIZE = 50
ROOM_AREA = ROOM_SIZE * ROOM_SIZE


class InvalidCoordinateError(ValueError):
    """Raised when raw input cannot be turned into a room coordinate."""


class Direction(Enum):
    """The eight compass directions, as (dx, dy) offsets. y grows downwards."""
    TOP = (0, -1)
    TOP_RIGHT = (1, -1)
    RIGHT = (1, 0)
    BOTTOM_RIGHT = (1, 1)
    BOTTOM = (0, 1)
    BOTTOM_LEFT = (-1, 1)
    LEFT = (-1, 0)
    TOP_LEFT = (-1, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]


ALL_DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)

TAXICAB_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.TOP,
    Direction.BOTTOM,
    Direction.LEFT,
    Direction.RIGHT,
)


class RoomXY(NamedTuple):
    """A coordinate inside the room."""
    x: int
    y: int

    @classmethod
    def checked(cls, x, y) -> "RoomXY":
        """Build a coordinate from raw input, rejecting anything off the grid."""
        if isinstance(x, bool) or isinstance(y, bool):
            raise InvalidCoordinateError(f"Coordinates must be integers, got ({x!r}, {y!r})")
        try:
            ix, iy = int(x), int(y)
        except (TypeError, ValueError) as e:
            raise InvalidCoordinateError(f"Coordinates must be integers, got ({x!r}, {y!r})") from e
        if ix != x or iy != y:
            raise InvalidCoordinateError(f"Coordinates must be integers, got ({x!r}, {y!r})")
        if not (0 <= ix < ROOM_SIZE and 0 <= iy < ROOM_SIZE):
            raise InvalidCoordinateError(
                f"({ix}, {iy}) is outside the {ROOM_SIZE}x{ROOM_SIZE} room"
            )
        return cls(ix, iy)

    def checked_add(self, direction: Direction) -> Optional["RoomXY"]:
        """Step in a direction, or None when the step leaves the room."""
        nx = self.x + direction.dx
        ny = self.y + direction.dy
        if 0 <= nx < ROOM_SIZE and 0 <= ny < ROOM_SIZE:
            return RoomXY(nx, ny)
        return None

    @property
    def on_edge(self) -> bool:
        return self.x in (0, ROOM_SIZE - 1) or self.y in (0, ROOM_SIZE - 1)

    def __str__(self) -> str:
        return f"[{self.x}, {self.y}]"


def xy_to_linear_index(xy: RoomXY) -> int:
    return xy.x * ROOM_SIZE + xy.y


def linear_index_to_xy(idx: int) -> RoomXY:
    return RoomXY(idx // ROOM_SIZE, idx % ROOM_SIZE)


def to_room_xy(raw) -> RoomXY:
    """Accept a RoomXY or any (x, y) pair from a collaborator."""
    if isinstance(raw, RoomXY):
        return RoomXY.checked(raw.x, raw.y)
    try:
        x, y = raw
    except (TypeError, ValueError) as e:
        raise InvalidCoordinateError(f"Expected an (x, y) pair, got {raw!r}") from e
    return RoomXY.checked(x, y)


def room_edges_xy() -> Iterator[RoomXY]:
    """Every coordinate on the outer ring, each exactly once."""
    last = ROOM_SIZE - 1
    for y in range(ROOM_SIZE):
        yield RoomXY(0, y)
    for x in range(1, last):
        yield RoomXY(x, 0)
        yield RoomXY(x, last)
    for y in range(ROOM_SIZE):
        yield RoomXY(last, y)


def surrounding_xy(xy: RoomXY) -> Iterator[RoomXY]:
    """In-bounds chessboard neighbours."""
    for direction in ALL_DIRECTIONS:
        adj = xy.checked_add(direction)
        if adj is not None:
            yield adj


def taxicab_adjacent(xy: RoomXY) -> Iterator[RoomXY]:
    for direction in TAXICAB_DIRECTIONS:
        adj = xy.checked_add(direction)
        if adj is not None:
            yield adj


def _build_neighbour_table(directions: Iterable[Direction]) -> List[Tuple[int, ...]]:
    table: List[Tuple[int, ...]] = []
    directions = tuple(directions)
    for idx in range(ROOM_AREA):
        xy = linear_index_to_xy(idx)
        adj = (xy.checked_add(d) for d in directions)
        table.append(tuple(xy_to_linear_index(a) for a in adj if a is not None))
    return table


# Index-space neighbour lookups used by the hot loops of the pipeline.
CHESSBOARD_NEIGHBOURS: List[Tuple[int, ...]] = _build_neighbour_table(ALL_DIRECTIONS)
TAXICAB_NEIGHBOURS: List[Tuple[int, ...]] = _build_neighbour_table(TAXICAB_DIRECTIONS)

EDGE_INDICES: Tuple[int, ...] = tuple(xy_to_linear_index(xy) for xy in room_edges_xy())


class Terrain(Enum):
    """Terrain kind of a single tile."""
    PLAIN = "plain"
    SWAMP = "swamp"
    WALL = "wall"

    @property
    def is_barrier(self) -> bool:
        return self is Terrain.WALL


# Compact codes for the numpy terrain array.
_TERRAIN_CODES = {Terrain.PLAIN: 0, Terrain.WALL: 1, Terrain.SWAMP: 2}
_CODE_TERRAIN = {code: terrain for terrain, code in _TERRAIN_CODES.items()}


@dataclass
class RoomTerrain:
    """
    Static terrain snapshot of one room.

    Stored as a flat array indexed by linear index. Treated as read-only by
    every pipeline stage.
    """
    codes: np.ndarray = field(
        default_factory=lambda: np.zeros(ROOM_AREA, dtype=np.uint8)
    )

    def __post_init__(self):
        if self.codes.shape != (ROOM_AREA,):
            raise ValueError(
                f"Terrain needs {ROOM_AREA} tiles, got array of shape {self.codes.shape}"
            )

    @classmethod
    def open_room(cls) -> "RoomTerrain":
        """A room with no walls at all."""
        return cls()

    @classmethod
    def from_walls(cls, walls: Iterable) -> "RoomTerrain":
        terrain = cls()
        for raw in walls:
            terrain.set(to_room_xy(raw), Terrain.WALL)
        return terrain

    def get(self, xy: RoomXY) -> Terrain:
        return _CODE_TERRAIN[int(self.codes[xy_to_linear_index(xy)])]

    def get_index(self, idx: int) -> Terrain:
        return _CODE_TERRAIN[int(self.codes[idx])]

    def is_wall_index(self, idx: int) -> bool:
        return self.codes[idx] == _TERRAIN_CODES[Terrain.WALL]

    def is_wall(self, xy: RoomXY) -> bool:
        return self.is_wall_index(xy_to_linear_index(xy))

    def set(self, xy: RoomXY, terrain: Terrain):
        """Set a tile. Only used while constructing a snapshot."""
        self.codes[xy_to_linear_index(xy)] = _TERRAIN_CODES[terrain]

    def wall_mask(self) -> np.ndarray:
        return self.codes == _TERRAIN_CODES[Terrain.WALL]

    def with_walls(self, walls: Iterable[RoomXY]) -> "RoomTerrain":
        """Copy of this terrain with extra barrier tiles."""
        terrain = RoomTerrain(codes=self.codes.copy())
        for xy in walls:
            terrain.set(xy, Terrain.WALL)
        return terrain
