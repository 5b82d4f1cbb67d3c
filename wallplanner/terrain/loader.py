"""Text room maps."""

from pathlib import Path
from typing import List, Tuple
import logging

from .grid import ROOM_SIZE, RoomTerrain, RoomXY, Terrain

logger = logging.getLogger(__name__)


class TerrainFormatError(ValueError):
    """Raised when a room map cannot be parsed."""


# Map characters
WALL_CHAR = "#"
PLAIN_CHAR = "."
SWAMP_CHAR = "~"
PROTECTED_CHAR = "P"

_CHAR_TERRAIN = {
    WALL_CHAR: Terrain.WALL,
    PLAIN_CHAR: Terrain.PLAIN,
    SWAMP_CHAR: Terrain.SWAMP,
    PROTECTED_CHAR: Terrain.PLAIN,
}


def parse_terrain(text: str) -> Tuple[RoomTerrain, List[RoomXY]]:
    """
    Parse a room map.

    The map is ROOM_SIZE lines of ROOM_SIZE characters, one line per y:
    '#' wall, '.' plain, '~' swamp, 'P' a protected plain tile.
    Blank lines are ignored.

    Returns:
        Terrain snapshot and the protected points found in the map
    """
    rows = [line.rstrip("\r\n") for line in text.splitlines() if line.strip()]

    if len(rows) != ROOM_SIZE:
        raise TerrainFormatError(f"Expected {ROOM_SIZE} rows, got {len(rows)}")

    terrain = RoomTerrain()
    protected: List[RoomXY] = []

    for y, row in enumerate(rows):
        if len(row) != ROOM_SIZE:
            raise TerrainFormatError(
                f"Row {y} has {len(row)} columns, expected {ROOM_SIZE}"
            )
        for x, char in enumerate(row):
            kind = _CHAR_TERRAIN.get(char)
            if kind is None:
                raise TerrainFormatError(f"Unknown terrain character {char!r} at ({x}, {y})")
            xy = RoomXY(x, y)
            terrain.set(xy, kind)
            if char == PROTECTED_CHAR:
                protected.append(xy)

    logger.debug(f"Parsed room map with {len(protected)} protected points")
    return terrain, protected


def load_terrain(path: Path) -> Tuple[RoomTerrain, List[RoomXY]]:
    """Load a room map from a text file."""
    path = Path(path)
    logger.info(f"Loading room map: {path}")
    return parse_terrain(path.read_text())


def format_terrain(terrain: RoomTerrain, walls=(), protected=()) -> str:
    """Render terrain back to map text, with planned walls drawn as 'W'."""
    walls = set(walls)
    protected = set(protected)
    lines = []
    for y in range(ROOM_SIZE):
        chars = []
        for x in range(ROOM_SIZE):
            xy = RoomXY(x, y)
            if xy in protected:
                chars.append(PROTECTED_CHAR)
            elif xy in walls:
                chars.append("W")
            else:
                kind = terrain.get(xy)
                if kind is Terrain.WALL:
                    chars.append(WALL_CHAR)
                elif kind is Terrain.SWAMP:
                    chars.append(SWAMP_CHAR)
                else:
                    chars.append(PLAIN_CHAR)
        lines.append("".join(chars))
    return "\n".join(lines) + "\n"
