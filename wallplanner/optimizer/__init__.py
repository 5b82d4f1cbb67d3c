"""Optimizer module for cut computation and wall extraction."""

from .max_flow import FlowResult, max_flow
from .tile_cut import (
    TileCutConfig,
    TileCutResult,
    build_exits,
    min_cut_to_exit,
)
from .walls import extract_walls

__all__ = [
    "FlowResult",
    "max_flow",
    "TileCutConfig",
    "TileCutResult",
    "build_exits",
    "min_cut_to_exit",
    "extract_walls",
]
