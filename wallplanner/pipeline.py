"""Main wall planning orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Literal, Optional, Tuple
import logging

from .graph.borders import BorderRegistry
from .graph.segment_graph import SegmentGraph
from .optimizer.max_flow import max_flow
from .optimizer.tile_cut import TileCutConfig, min_cut_to_exit
from .optimizer.walls import extract_walls
from .render.visual import (
    VisualSink,
    render_color_map,
    render_distance_field,
    render_partition,
    render_walls,
)
from .reviewer.enclosure_check import EnclosureCheckResult, check_enclosure
from .segmentation.disjoint_set import DisjointTileSet
from .segmentation.maxima import color_partition, find_local_maxima
from .segmentation.watershed import WatershedResult, flood_color_map
from .terrain.distance_field import DistanceField, Metric
from .terrain.grid import RoomTerrain, RoomXY, to_room_xy

logger = logging.getLogger(__name__)


class Advisory(Enum):
    """Non-fatal findings attached to a plan."""
    NO_PROTECTED_POINTS = "no_protected_points"
    PROTECTED_POINT_ON_BARRIER = "protected_point_on_barrier"
    PROTECTED_SEGMENT_EXPOSED = "protected_segment_exposed"
    ENCLOSURE_LEAK = "enclosure_leak"


@dataclass
class PlannerConfig:
    """Configuration for the wall planner."""
    # Distance metric for the height map
    metric: Metric = Metric.TAXICAB

    # "segments" cuts between watershed segments, "tiles" cuts single tiles
    mode: Literal["segments", "tiles"] = "segments"

    # Review settings
    verify: bool = True
    fallback_to_tiles: bool = True  # when the segment plan leaks

    # Tile mode settings
    keep_exit_margin: bool = True

    # Render settings
    render: Optional[Literal["height", "colors", "partition"]] = None


@dataclass
class Segmentation:
    """Intermediate products of the segment stages."""
    height_map: DistanceField
    maxima: List[RoomXY]
    dts: DisjointTileSet
    watershed: WatershedResult
    registry: BorderRegistry


@dataclass
class PlanResult:
    """Planned walls plus diagnostics."""
    walls: List[RoomXY] = field(default_factory=list)
    mode: str = "segments"
    advisories: List[Advisory] = field(default_factory=list)
    segment_count: int = 0
    border_pairs: int = 0
    flow_value: int = 0
    cut_edges: List[Tuple[int, int]] = field(default_factory=list)
    enclosure: Optional[EnclosureCheckResult] = None
    segmentation: Optional[Segmentation] = None

    @property
    def enclosed(self) -> Optional[bool]:
        return None if self.enclosure is None else self.enclosure.passed


class WallPlanner:
    """
    Plans the cheapest set of wall tiles sealing protected tiles off from
    the room exits.

    Flow:
    1. Validate protected points
    2. Distance field and local maxima
    3. Watershed segments and border registry
    4. Segment graph and min cut
    5. Walls from the cut
    6. Enclosure review (tile cut fallback on leaks)
    7. Optional rendering
    """

    def __init__(self, config: Optional[PlannerConfig] = None):
        self.config = config or PlannerConfig()
        self.tile_config = TileCutConfig(keep_exit_margin=self.config.keep_exit_margin)

    def plan(
        self,
        terrain: RoomTerrain,
        protected_points: Iterable,
        visual: Optional[VisualSink] = None,
    ) -> PlanResult:
        """
        Plan walls for one room.

        Args:
            terrain: Room terrain snapshot
            protected_points: RoomXY or raw (x, y) pairs
            visual: Optional sink for a per-tile rendering

        Returns:
            PlanResult with walls sorted by (x, y)
        """
        # === Step 1: Validate protected points ===
        protected: List[RoomXY] = []
        for raw in protected_points:
            xy = to_room_xy(raw)
            if xy not in protected:
                protected.append(xy)

        result = PlanResult(mode=self.config.mode)

        open_protected = [xy for xy in protected if not terrain.is_wall(xy)]
        if len(open_protected) < len(protected):
            on_barrier = [xy for xy in protected if terrain.is_wall(xy)]
            self._advise(result, Advisory.PROTECTED_POINT_ON_BARRIER, f"skipping {on_barrier}")

        if not open_protected:
            self._advise(result, Advisory.NO_PROTECTED_POINTS, "nothing to enclose")
            if visual is not None and self.config.render:
                result.segmentation = self._segment(terrain)
                self._render(visual, result)
            return result

        logger.info(
            f"Planning walls for {len(open_protected)} protected tiles "
            f"(mode={self.config.mode}, metric={self.config.metric.value})"
        )

        if self.config.mode == "tiles":
            self._plan_tiles(terrain, open_protected, result)
        else:
            self._plan_segments(terrain, open_protected, result)

        # === Step 6: Enclosure review ===
        if self.config.verify:
            result.enclosure = check_enclosure(terrain, result.walls, open_protected)
            if result.enclosure.passed:
                logger.info(f"Enclosure review passed ({result.enclosure.reached_count} tiles inside)")
            elif Advisory.PROTECTED_SEGMENT_EXPOSED in result.advisories:
                logger.info("Enclosure review failed, protected segments were already exposed")
            elif result.mode == "segments":
                self._advise(
                    result,
                    Advisory.ENCLOSURE_LEAK,
                    f"{result.enclosure.leaked_from} reaches {result.enclosure.reached_edge}",
                )
                if self.config.fallback_to_tiles:
                    logger.info("Falling back to tile cut")
                    self._plan_tiles(terrain, open_protected, result)
                    result.enclosure = check_enclosure(terrain, result.walls, open_protected)
            else:
                logger.warning(
                    f"Tile cut leaks from {result.enclosure.leaked_from} "
                    f"to {result.enclosure.reached_edge}"
                )

        # === Step 7: Render ===
        if visual is not None and self.config.render:
            if result.segmentation is None:
                result.segmentation = self._segment(terrain)
            self._render(visual, result)

        logger.info(f"Done! {len(result.walls)} walls (mode={result.mode}, flow={result.flow_value})")
        return result

    def _segment(self, terrain: RoomTerrain) -> Segmentation:
        # === Step 2: Distance field and local maxima ===
        height_map = DistanceField.build(terrain, self.config.metric)
        maxima, dts = find_local_maxima(height_map)
        logger.debug(f"Distance field max {height_map.max_height}, {len(maxima)} maxima")

        # === Step 3: Watershed and border registry ===
        watershed = flood_color_map(height_map, maxima)
        registry = BorderRegistry.build(watershed.color_map, watershed.borders)
        logger.info(
            f"Segmented into {watershed.color_count} segments, "
            f"{len(registry)} bordering pairs"
        )
        return Segmentation(
            height_map=height_map,
            maxima=maxima,
            dts=dts,
            watershed=watershed,
            registry=registry,
        )

    def _plan_segments(self, terrain: RoomTerrain, protected: List[RoomXY], result: PlanResult):
        segmentation = self._segment(terrain)
        result.segmentation = segmentation
        result.segment_count = segmentation.watershed.color_count
        result.border_pairs = len(segmentation.registry)

        # === Step 4: Segment graph and min cut ===
        graph = SegmentGraph.build(segmentation.watershed, segmentation.registry, protected)
        exposed = graph.exposed_segments()
        if exposed:
            self._advise(
                result,
                Advisory.PROTECTED_SEGMENT_EXPOSED,
                f"segments {exposed} hold protected tiles and touch the room edge",
            )
        flow = max_flow(graph)

        # === Step 5: Walls ===
        result.flow_value = flow.flow_value
        result.cut_edges = flow.cut_edges
        result.walls = extract_walls(flow.cut_edges, segmentation.registry)
        result.mode = "segments"

    def _plan_tiles(self, terrain: RoomTerrain, protected: List[RoomXY], result: PlanResult):
        cut = min_cut_to_exit(terrain, protected, self.tile_config)
        if cut.exposed and Advisory.PROTECTED_SEGMENT_EXPOSED not in result.advisories:
            self._advise(
                result,
                Advisory.PROTECTED_SEGMENT_EXPOSED,
                f"tiles {cut.exposed} touch an exit",
            )
        result.walls = cut.walls
        result.flow_value = cut.flow_value
        result.cut_edges = []
        result.mode = "tiles"

    def _render(self, visual: VisualSink, result: PlanResult):
        segmentation = result.segmentation
        view = self.config.render
        if view == "height":
            render_distance_field(visual, segmentation.height_map, segmentation.maxima)
        elif view == "colors":
            render_color_map(visual, segmentation.watershed)
        elif view == "partition":
            color_map, count = color_partition(segmentation.height_map, segmentation.dts)
            render_partition(visual, color_map, count, segmentation.maxima)
        else:
            raise ValueError(f"Unknown render view: {view}")
        render_walls(visual, result.walls)

    @staticmethod
    def _advise(result: PlanResult, advisory: Advisory, detail: str):
        result.advisories.append(advisory)
        logger.warning(f"{advisory.name}: {detail}")


def plan_walls(
    terrain: RoomTerrain,
    protected_points: Iterable,
    metric: Metric = Metric.TAXICAB,
) -> List[RoomXY]:
    """Walls sealing the protected points off from the room edge."""
    return WallPlanner(PlannerConfig(metric=metric)).plan(terrain, protected_points).walls
