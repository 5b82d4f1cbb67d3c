"""Plain-text visual sink."""

from pathlib import Path
from typing import Dict
import logging

from ..terrain.grid import ROOM_SIZE, RoomXY

logger = logging.getLogger(__name__)


class TextGridSink:
    """
    Collects labels into a 50x50 character grid.

    Labels are right-aligned and cut to `cell_width` characters. Colors are
    kept so callers can export them, but the text output ignores them.
    """

    def __init__(self, cell_width: int = 3):
        self.cell_width = cell_width
        self.labels: Dict[RoomXY, str] = {}
        self.colors: Dict[RoomXY, str] = {}

    def text(self, xy: RoomXY, label: str, color: str) -> None:
        self.labels[xy] = label
        self.colors[xy] = color

    def to_text(self) -> str:
        width = self.cell_width
        rows = []
        for y in range(ROOM_SIZE):
            cells = []
            for x in range(ROOM_SIZE):
                label = self.labels.get(RoomXY(x, y), "")
                cells.append(label[-width:].rjust(width))
            rows.append("".join(cells).rstrip())
        return "\n".join(rows) + "\n"

    def write(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_text())
        logger.info(f"Wrote rendering of {len(self.labels)} tiles to {path}")
        return path
