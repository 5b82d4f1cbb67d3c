"""Render module for per-tile visualisation."""

from .text_sink import TextGridSink
from .visual import (
    VisualSink,
    render_color_map,
    render_distance_field,
    render_walls,
    render_partition,
    segment_color,
)

__all__ = [
    "TextGridSink",
    "VisualSink",
    "render_color_map",
    "render_distance_field",
    "render_walls",
    "render_partition",
    "segment_color",
]
