"""
Command Line Interface
======================

Entry point for the supply-unit simulator.

Usage:
    supplyunit-sim run --nodesrv 127.0.0.1:9990 --port 1070 --num 11
    supplyunit-sim sample startPoints.geojson --count 5
    supplyunit-sim --config config.yaml run

``run`` is the default command. ``sample`` prints one JSON object per
sampled point:

    {"polygon": 0, "lon": 136.88, "lat": 35.16}
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from supplyunit_sim.config import Settings, load_config, setup_logging
from supplyunit_sim.geometry import (
    DegeneratePolygonError,
    GeometryLoadError,
    InteriorPointSampler,
    load_polygons,
)
from supplyunit_sim.service import make_rng


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="supplyunit-sim",
        description="Synthetic supply-level reading publisher",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--log-level", help="Override log level")

    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Register with the broker and publish readings")
    run.add_argument("--nodesrv", help="Node ID server address (host:port)")
    run.add_argument("--port", type=int, help="Listening port")
    run.add_argument("--num", type=int, help="Number of agents")

    sample = sub.add_parser("sample", help="Sample interior points of boundary polygons")
    sample.add_argument("boundary", nargs="?", help="GeoJSON file (default: geometry.start_points_path)")
    sample.add_argument("--count", type=int, default=1, help="Points per polygon")
    sample.add_argument("--polygon", type=int, help="Only sample this polygon index")
    sample.add_argument("--max-attempts", type=int, help="Retry bound per point")
    sample.add_argument("--seed", type=int, help="Random seed")

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "logging.level": args.log_level,
        "node.server": getattr(args, "nodesrv", None),
        "server.port": getattr(args, "port", None),
        "simulation.agent_count": getattr(args, "num", None),
        "sampler.max_attempts": getattr(args, "max_attempts", None),
        "simulation.seed": getattr(args, "seed", None),
    }
    return load_config(args.config, overrides=overrides)


def sample_command(settings: Settings, args: argparse.Namespace) -> int:
    """Load polygons and print sampled interior points."""
    path = args.boundary or settings.geometry.start_points_path
    try:
        polygons = load_polygons(path)
    except GeometryLoadError as e:
        logger.error(f"Can't load boundary geometry: {e}")
        return 1

    if args.polygon is not None:
        if not 0 <= args.polygon < len(polygons):
            logger.error(f"Polygon index {args.polygon} out of range (0..{len(polygons) - 1})")
            return 1
        selected = [(args.polygon, polygons[args.polygon])]
    else:
        selected = list(enumerate(polygons))

    sampler = InteriorPointSampler(
        max_attempts=settings.sampler.max_attempts,
        log_every=settings.sampler.log_every,
        rng=make_rng(settings.simulation.seed),
    )

    for index, polygon in selected:
        try:
            points = sampler.sample_many(polygon, args.count)
        except DegeneratePolygonError as e:
            logger.warning(f"Skipping polygon {index}: {e}")
            continue
        for point in points:
            print(json.dumps({"polygon": index, "lon": point.lon, "lat": point.lat}))

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args([*argv, "run"])

    try:
        settings = _settings_from_args(args)
    except (FileNotFoundError, ValidationError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)

    if args.command == "sample":
        return sample_command(settings, args)

    from supplyunit_sim.main import run

    run(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
