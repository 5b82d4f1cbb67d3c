#!/usr/bin/env python3
"""
Wall Planner - minimum wall sets that seal protected tiles off from the room edge.

Usage:
    python main.py room.txt --protect 25,25
    python main.py room.txt --mode tiles --render colors
"""

import argparse
import logging
import sys
from pathlib import Path

from wallplanner.pipeline import WallPlanner, PlannerConfig
from wallplanner.render.text_sink import TextGridSink
from wallplanner.terrain.distance_field import Metric
from wallplanner.terrain.grid import RoomXY
from wallplanner.terrain.loader import format_terrain, load_terrain


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Wall Planner - minimum cut walls around protected tiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Protected tiles marked with 'P' in the map
    python main.py room.txt

    # Extra protected tiles
    python main.py room.txt --protect 25,25 --protect 26,25

    # Chessboard distances
    python main.py room.txt --metric chessboard

    # Cut single tiles instead of segment borders
    python main.py room.txt --mode tiles

    # Dump the watershed segments
    python main.py room.txt --render colors --render-output segments.txt
        """,
    )

    # Required
    parser.add_argument(
        "room",
        type=Path,
        help="Room map: 50 lines of 50 characters ('#' wall, '.' plain, '~' swamp, 'P' protected)",
    )

    # Protected tiles
    parser.add_argument(
        "--protect",
        action="append",
        default=[],
        metavar="X,Y",
        help="Protected tile, may be repeated",
    )

    # Planning
    parser.add_argument(
        "--metric",
        choices=[m.value for m in Metric],
        default=Metric.TAXICAB.value,
        help="Distance metric for the height map (default: taxicab)",
    )
    parser.add_argument(
        "--mode",
        choices=["segments", "tiles"],
        default="segments",
        help="Cut between watershed segments or single tiles (default: segments)",
    )

    # Review
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip the enclosure review",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Keep a leaking segment plan instead of falling back to tiles",
    )

    # Render
    parser.add_argument(
        "--render",
        choices=["height", "colors", "partition"],
        default=None,
        help="Print a per-tile rendering of a pipeline stage",
    )
    parser.add_argument(
        "--render-output",
        type=Path,
        default=None,
        help="Write the rendering to a file instead of stdout",
    )

    # Misc
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )

    return parser.parse_args()


def parse_point(raw: str) -> RoomXY:
    parts = raw.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected X,Y but got {raw!r}")
    return RoomXY.checked(int(parts[0].strip()), int(parts[1].strip()))


def main():
    """Main entry point."""
    args = parse_args()

    # Setup logging
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    # Validate input
    if not args.room.exists():
        logger.error(f"Room file not found: {args.room}")
        sys.exit(1)

    try:
        terrain, protected = load_terrain(args.room)
        for raw in args.protect:
            protected.append(parse_point(raw))
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)

    # Create config
    config = PlannerConfig(
        metric=Metric(args.metric),
        mode=args.mode,
        verify=not args.no_verify,
        fallback_to_tiles=not args.no_fallback,
        render=args.render,
    )

    planner = WallPlanner(config)
    sink = TextGridSink() if args.render else None

    # Plan
    try:
        result = planner.plan(terrain, protected, visual=sink)
    except Exception as e:
        logger.error(f"Planning failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    if sink is not None:
        if args.render_output:
            sink.write(args.render_output)
        else:
            print(sink.to_text())

    # Print summary
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)

    print(f"\nMode: {result.mode}")
    if result.mode == "segments":
        print(f"Segments: {result.segment_count} ({result.border_pairs} bordering pairs)")
    print(f"Flow value: {result.flow_value}")
    print(f"Walls: {len(result.walls)}")
    for xy in result.walls:
        print(f"  {xy}")

    if result.enclosure is not None:
        status = "✓ PASS" if result.enclosure.passed else "✗ FAIL"
        print(f"\nEnclosure review: {status}")

    if result.advisories:
        print("\nAdvisories:")
        for advisory in result.advisories:
            print(f"  - {advisory.name}")

    if args.verbose:
        print()
        print(format_terrain(terrain, walls=result.walls, protected=protected))
    print("=" * 60)


if __name__ == "__main__":
    main()
