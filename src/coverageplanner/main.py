"""
Application Entry Point
=======================
Loads a scene, runs the router optimizer and reports the coverage.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging.
2. Instantiates the Model (from a scene file).
3. Hands the Model to the optimizer and the IOManager.

Usage:
    $ python -m coverageplanner assets/examples/example1.json --routers 2
"""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from coverageplanner import config
from coverageplanner.controller.optimizer import OptimizationManager, OptimizerSettings
from coverageplanner.logging_config import setup_logging
from coverageplanner.model.io import IOManager

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coverageplanner",
        description="Place routers over the rooms of a scene to maximize average signal strength.",
    )
    parser.add_argument("scene", nargs="?", default=config.DEFAULT_SCENE_PATH,
                        help="Scene JSON file (default: bundled example)")
    parser.add_argument("-n", "--routers", type=int, default=None,
                        help="Number of routers (default: one per room)")
    parser.add_argument("--density", type=float, default=None,
                        help="Samples per unit length along every axis")
    parser.add_argument("--iterations", type=int, default=config.MAX_ITERATIONS,
                        help="Maximum number of k-means iterations")
    parser.add_argument("--save", metavar="FILE.h5", default=None,
                        help="Save the optimized project to an HDF5 file")
    parser.add_argument("--export", metavar="FILE.json", default=None,
                        help="Write the optimized scene as JSON")
    parser.add_argument("--tree", action="store_true", help="Print the scene hierarchy")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.WARNING, log_file=args.log_file)

    # 2. Initialize the Data Model
    settings = OptimizerSettings(max_iterations=args.iterations)
    if args.density is not None:
        settings.density = args.density
    model = IOManager.load_scene(args.scene, settings=settings)

    # 3. Optimize
    result = model.optimization_manager.optimize(args.routers)

    print(f"Rooms: {model.room_count()}  Routers: {len(result.routers)}  "
          f"Observation points: {result.observation_count}")
    print(f"Iterations: {result.iterations}{'' if result.converged else ' (not converged)'}")
    print(f"Average speed: {OptimizationManager.format_speed(result.score)}")
    if args.tree:
        print(model.tree())

    # 4. Persist
    if args.save:
        IOManager.save_project(model, args.save)
    if args.export:
        IOManager.save_scene(model, args.export)

    return 0
