"""Tests for border registry, segment graph, cuts and the enclosure check."""

import importlib

import pytest

from wallplanner import WallPlanner
from wallplanner.graph import BorderRegistry, NodeKind, SegmentGraph, segment_pair
from wallplanner.optimizer import (
    TileCutConfig,
    build_exits,
    extract_walls,
    max_flow,
    min_cut_to_exit,
)
from wallplanner.reviewer import EnclosureResult, check_enclosure
from wallplanner.segmentation import ColorMap, SegmentationError, find_local_maxima, flood_color_map
from wallplanner.terrain import (
    ROOM_AREA,
    DistanceField,
    RoomTerrain,
    RoomXY,
    surrounding_xy,
    xy_to_linear_index,
)

borders_module = importlib.import_module("wallplanner.graph.borders")
flow_module = importlib.import_module("wallplanner.optimizer.max_flow")


def corridor_room() -> RoomTerrain:
    """A 10x10 pocket joined to the open east half by a 3-wide corridor."""
    open_tiles = set()
    for x in range(5, 15):
        for y in range(20, 30):
            open_tiles.add((x, y))
    for x in range(15, 25):
        for y in range(24, 27):
            open_tiles.add((x, y))
    for x in range(25, 50):
        for y in range(50):
            open_tiles.add((x, y))
    return RoomTerrain.from_walls(
        (x, y) for x in range(50) for y in range(50) if (x, y) not in open_tiles
    )


def segment(terrain: RoomTerrain):
    field = DistanceField.build(terrain)
    maxima, _ = find_local_maxima(field)
    watershed = flood_color_map(field, maxima)
    registry = BorderRegistry.build(watershed.color_map, watershed.borders)
    return watershed, registry


class TestBorderRegistry:
    """Tests for BorderRegistry."""

    def test_corridor_single_pair(self):
        watershed, registry = segment(corridor_room())
        assert registry.pairs() == [(0, 1)]
        assert registry.cost(0, 1) == 3
        assert registry.cost(1, 0) == 3
        assert sorted(registry.cells(1, 0)) == sorted(watershed.borders)
        assert registry.neighbours(0) == [1]
        assert registry.records_for(watershed.borders[0]) == [(0, 1)]
        assert (1, 0) in registry

    def test_unknown_pair(self):
        _, registry = segment(corridor_room())
        assert registry.cost(0, 5) == 0
        assert registry.cells(0, 5) == []

    def test_diagonal_only_contact_not_linked(self):
        # Border at (10, 10); color 0 to its left, color 1 only across a corner.
        color_map = ColorMap()
        color_map.set_border(xy_to_linear_index(RoomXY(10, 10)))
        color_map.set_resolved(xy_to_linear_index(RoomXY(9, 10)), 0)
        color_map.set_resolved(xy_to_linear_index(RoomXY(11, 11)), 1)
        registry = BorderRegistry.build(color_map, [RoomXY(10, 10)])
        assert len(registry) == 0

    def test_diagonal_cells_join_linked_pairs(self):
        color_map = ColorMap()
        for xy in (RoomXY(10, 10), RoomXY(11, 11)):
            color_map.set_border(xy_to_linear_index(xy))
        color_map.set_resolved(xy_to_linear_index(RoomXY(9, 10)), 0)
        color_map.set_resolved(xy_to_linear_index(RoomXY(11, 10)), 1)
        color_map.set_resolved(xy_to_linear_index(RoomXY(12, 12)), 0)
        registry = BorderRegistry.build(color_map, [RoomXY(10, 10), RoomXY(11, 11)])
        # (11, 11) only sees color 0 across a corner, but the pair is already linked.
        assert registry.cells(0, 1) == [RoomXY(10, 10), RoomXY(11, 11)]

    def test_segment_pair(self):
        assert segment_pair(4, 2) == (2, 4)


class TestSegmentGraph:
    """Tests for SegmentGraph."""

    def test_corridor_kinds(self):
        watershed, registry = segment(corridor_room())
        graph = SegmentGraph.build(watershed, registry, [RoomXY(9, 24)])
        assert graph.kinds == [NodeKind.SOURCE, NodeKind.SINK]
        assert graph.capacity[0, 1] == graph.capacity[1, 0] == 3
        assert graph.neighbours(0) == [1]
        assert graph.exposed_segments() == []

    def test_protected_on_border_tags_neighbours(self):
        watershed, registry = segment(corridor_room())
        graph = SegmentGraph.build(watershed, registry, [watershed.borders[1]])
        assert graph.protected_segments == {0, 1}
        # The exterior segment touches the edge, so the sink tag wins.
        assert graph.kinds[1] is NodeKind.SINK
        assert graph.exposed_segments() == [1]

    def test_open_room_exposed(self):
        watershed, registry = segment(RoomTerrain.open_room())
        graph = SegmentGraph.build(watershed, registry, [RoomXY(25, 25)])
        assert graph.node_count == 1
        assert graph.sources() == []
        assert graph.exposed_segments() == [0]

    def test_self_edge_rejected(self):
        with pytest.raises(ValueError):
            SegmentGraph.from_edges(2, [(1, 1, 3)])


class TestMaxFlow:
    """Tests for Edmonds-Karp and cut extraction."""

    def test_two_sources_one_sink(self):
        graph = SegmentGraph.from_edges(3, [(0, 2, 3), (1, 2, 5)], sources=[0, 1], sinks=[2])
        result = max_flow(graph)
        assert result.flow_value == 8
        assert sorted(result.cut_edges) == [(0, 2), (1, 2)]
        assert result.cut_capacity == 8

    def test_series_bottleneck(self):
        graph = SegmentGraph.from_edges(3, [(0, 1, 4), (1, 2, 2)], sources=[0], sinks=[2])
        result = max_flow(graph)
        assert result.flow_value == 2
        assert result.cut_edges == [(1, 2)]
        assert result.source_side == {0, 1}

    def test_flow_equals_cut(self):
        edges = [(0, 1, 3), (0, 2, 2), (1, 3, 2), (2, 3, 3), (1, 2, 1)]
        graph = SegmentGraph.from_edges(4, edges, sources=[0], sinks=[3])
        result = max_flow(graph)
        assert result.flow_value == 5
        assert result.cut_capacity == 5

    def test_no_sources(self):
        graph = SegmentGraph.from_edges(2, [(0, 1, 4)], sinks=[1])
        result = max_flow(graph)
        assert result.flow_value == 0
        assert result.cut_edges == []

    def test_unreachable_sink(self):
        graph = SegmentGraph.from_edges(3, [(0, 1, 4)], sources=[0], sinks=[2])
        result = max_flow(graph)
        assert result.flow_value == 0
        assert result.cut_edges == []
        assert result.source_side == {0, 1}


class TestWalls:
    """Tests for wall extraction."""

    def test_corridor_walls(self):
        watershed, registry = segment(corridor_room())
        graph = SegmentGraph.build(watershed, registry, [RoomXY(9, 24)])
        result = max_flow(graph)
        walls = extract_walls(result.cut_edges, registry)
        assert result.flow_value == 3
        assert walls == sorted(watershed.borders)

    def test_empty_cut(self):
        _, registry = segment(corridor_room())
        assert extract_walls([], registry) == []


class TestTileCut:
    """Tests for the tile-level cut."""

    def test_exits_with_margin(self):
        exits = build_exits(RoomTerrain.open_room(), keep_exit_margin=True)
        assert exits[xy_to_linear_index(RoomXY(0, 10))]
        assert exits[xy_to_linear_index(RoomXY(1, 10))]
        assert not exits[xy_to_linear_index(RoomXY(2, 10))]

    def test_exits_without_margin(self):
        exits = build_exits(RoomTerrain.open_room(), keep_exit_margin=False)
        assert not exits[xy_to_linear_index(RoomXY(1, 10))]

    def test_open_room_ring(self):
        result = min_cut_to_exit(RoomTerrain.open_room(), [(25, 25)])
        assert result.flow_value == 8
        assert result.walls == sorted(surrounding_xy(RoomXY(25, 25)))

    def test_corridor(self):
        result = min_cut_to_exit(corridor_room(), [RoomXY(9, 24)], TileCutConfig())
        assert result.flow_value == 3
        assert len(result.walls) == 3
        assert check_enclosure(corridor_room(), result.walls, [RoomXY(9, 24)]).passed

    def test_protected_next_to_exit(self):
        result = min_cut_to_exit(RoomTerrain.open_room(), [(2, 10)])
        assert result.exposed == [RoomXY(2, 10)]
        assert result.walls == []


class TestEnclosureCheck:
    """Tests for the enclosure review."""

    def test_open_room_leaks(self):
        check = check_enclosure(RoomTerrain.open_room(), [], [RoomXY(25, 25)])
        assert check.result is EnclosureResult.FAIL
        assert check.leaked_from == RoomXY(25, 25)
        assert check.reached_edge.on_edge

    def test_ring_encloses(self):
        walls = list(surrounding_xy(RoomXY(25, 25)))
        check = check_enclosure(RoomTerrain.open_room(), walls, [RoomXY(25, 25)])
        assert check.passed
        assert check.reached_count == 1

    def test_diagonal_gap_leaks(self):
        walls = [xy for xy in surrounding_xy(RoomXY(25, 25)) if xy != RoomXY(26, 26)]
        check = check_enclosure(RoomTerrain.open_room(), walls, [RoomXY(25, 25)])
        assert not check.passed


class TestInvariantErrors:
    """Invariant violations abort with SegmentationError."""

    def test_border_tile_missing_from_second_pass(self, monkeypatch):
        color_map = ColorMap()
        color_map.set_border(xy_to_linear_index(RoomXY(10, 10)))
        color_map.set_resolved(xy_to_linear_index(RoomXY(9, 10)), 0)
        color_map.set_resolved(xy_to_linear_index(RoomXY(11, 10)), 1)
        # Second pass sees no neighbours at all, so the linked pair goes unrecorded.
        monkeypatch.setattr(borders_module, "CHESSBOARD_NEIGHBOURS", [()] * ROOM_AREA)
        with pytest.raises(SegmentationError):
            BorderRegistry.build(color_map, [RoomXY(10, 10)])

    def test_planning_aborts(self, monkeypatch):
        monkeypatch.setattr(borders_module, "CHESSBOARD_NEIGHBOURS", [()] * ROOM_AREA)
        with pytest.raises(SegmentationError):
            WallPlanner().plan(corridor_room(), [RoomXY(9, 24)])

    def test_cut_not_matching_flow(self, monkeypatch):
        graph = SegmentGraph.from_edges(3, [(0, 1, 4), (1, 2, 2)], sources=[0], sinks=[2])
        # Stopping the residual walk at the sources yields a cut of capacity 4.
        monkeypatch.setattr(flow_module, "_reachable", lambda residual, sources: set(sources))
        with pytest.raises(SegmentationError):
            max_flow(graph)

    def test_is_runtime_error(self):
        assert issubclass(SegmentationError, RuntimeError)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
