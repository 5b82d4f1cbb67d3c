"""Per-tile visualisation of the pipeline stages."""

from typing import Iterable, Optional, Protocol
import math

from ..segmentation.color_map import CellState, ColorMap
from ..segmentation.watershed import WatershedResult
from ..terrain.distance_field import DistanceField
from ..terrain.grid import ROOM_AREA, RoomXY, linear_index_to_xy, xy_to_linear_index

BORDER_COLOR = "#000000"
PENDING_COLOR = "#FF0000"
MAXIMA_COLOR = "#FFFFFF"
WALL_COLOR = "#FF0000"


class VisualSink(Protocol):
    """Anything that can draw a short label on a tile."""

    def text(self, xy: RoomXY, label: str, color: str) -> None:
        ...


def segment_color(color_count: int, color: Optional[int]) -> str:
    """
    Evenly spaced hue for a segment id, as "#RRGGBB".

    Picks a point on the color wheel, maps it onto the U/V plane at fixed
    brightness and converts back to RGB. None (border or empty) is black.
    """
    if color is None:
        return BORDER_COLOR
    radians = (color / max(color_count, 1)) * math.tau
    u = math.cos(radians)
    v = math.sin(radians)
    y = 1.0

    red = y + v / 0.88
    green = y - 0.38 * u - 0.58 * v
    blue = y + u / 0.49

    def convert(val: float) -> int:
        return int(math.floor(min(max(val, 0.0), 2.0) / 2.0 * 255.0))

    return f"#{convert(red):02X}{convert(green):02X}{convert(blue):02X}"


def render_distance_field(
    sink: VisualSink,
    field: DistanceField,
    maxima: Iterable[RoomXY] = (),
):
    """Label every open tile with its height, maxima highlighted."""
    peaks = {xy_to_linear_index(xy) for xy in maxima}
    top = max(field.max_height, 1)
    for idx in range(ROOM_AREA):
        height = field.get_index(idx)
        if height == 0:
            continue
        if idx in peaks:
            color = MAXIMA_COLOR
        else:
            shade = int(255 * height / top)
            color = f"#{shade:02X}{shade:02X}{shade:02X}"
        sink.text(linear_index_to_xy(idx), str(height), color)


def render_partition(
    sink: VisualSink,
    color_map: ColorMap,
    color_count: int,
    maxima: Iterable[RoomXY] = (),
):
    peaks = {xy_to_linear_index(xy) for xy in maxima}
    for idx in range(ROOM_AREA):
        state = color_map.state(idx)
        if state is CellState.EMPTY:
            continue
        xy = linear_index_to_xy(idx)
        if state is CellState.BORDER:
            sink.text(xy, "B", BORDER_COLOR)
        elif state is CellState.PENDING:
            sink.text(xy, color_map.label(idx), PENDING_COLOR)
        else:
            color = color_map.color(idx)
            fill = MAXIMA_COLOR if idx in peaks else segment_color(color_count, color)
            sink.text(xy, str(color), fill)


def render_color_map(sink: VisualSink, watershed: WatershedResult):
    """Segments colored by id, seeds highlighted, borders black."""
    render_partition(sink, watershed.color_map, watershed.color_count, watershed.seeds)


def render_walls(sink: VisualSink, walls: Iterable[RoomXY]):
    for xy in walls:
        sink.text(xy, "W", WALL_COLOR)
