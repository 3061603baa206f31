"""
Application Entry Point
=======================
Wires the scene model, the engine and the output sink together for one run.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Loads settings and the scene.
2. Validates the run-wide preconditions (MEP source model, opening family
   type, 3D view) before any geometry work.
3. Builds RayCaster -> PlacementCalculator -> BatchOrchestrator.
4. Hands the openings to the sink and reports failures.

Exit codes: 0 all crossings placed, 1 some crossings failed, 2 the run was
aborted (precondition or invalid input).
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from openingplacer.config import EngineSettings, load_settings
from openingplacer.engine.interfaces import OpeningSink
from openingplacer.engine.orchestrator import BatchOrchestrator, BatchResult, place_openings
from openingplacer.engine.placement import PlacementCalculator
from openingplacer.engine.ray_caster import RayCaster
from openingplacer.errors import PreconditionError
from openingplacer.logging_config import setup_logging
from openingplacer.model.io import HDF5OpeningSink
from openingplacer.scene.model import SceneModel
from openingplacer.scene.sinks import ListOpeningSink

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_ABORTED = 2


def build_orchestrator(scene: SceneModel, settings: EngineSettings) -> BatchOrchestrator:
    ray_caster = RayCaster(
        query=scene.spatial_index(),
        context=scene.find_search_context(),
        barrier_class=settings.barrier_class,
    )
    calculator = PlacementCalculator(resolver=scene, clearance=settings.clearance)
    return BatchOrchestrator(
        provider=scene,
        ray_caster=ray_caster,
        calculator=calculator,
        kinds=settings.element_kinds,
        max_workers=settings.max_workers,
    )


def run_scene(scene: SceneModel, settings: EngineSettings, sink: OpeningSink) -> BatchResult:
    """
    Raises:
        PreconditionError: No MEP source model, opening family type or 3D view.
    """
    if not scene.has_source_model(settings.source_model_token):
        raise PreconditionError(f"MEP model with '{settings.source_model_token}' in its title not found.")

    template = scene.find_template(settings.opening_family_name, settings.opening_category)
    if template is None:
        raise PreconditionError(f"Family \"{settings.opening_family_name}\" not found.")

    orchestrator = build_orchestrator(scene, settings)
    return place_openings(orchestrator, sink, template)


def print_report(result: BatchResult, settings: EngineSettings) -> None:
    summary = result.summary()
    print(f"Elements processed: {summary['elements']}")
    print(f"Openings computed:  {summary['openings']}")
    for spec in result.openings:
        params = spec.parameters(settings.width_parameter, settings.height_parameter)
        sizes = ", ".join(f"{k}={v:g}" for k, v in params.items())
        print(
            f"  {spec.element_kind} {spec.element_id} -> barrier {spec.barrier_id} "
            f"@ ({spec.position.x:.3f}, {spec.position.y:.3f}, {spec.position.z:.3f}) "
            f"level {spec.level_id}: {sizes}"
        )
    if result.failures:
        print(f"Unresolved crossings: {len(result.failures)}")
        for failure in result.failures:
            print(f"  {failure}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="openingplacer",
        description="Compute wall openings where ducts and pipes cross walls.",
    )
    parser.add_argument("scene", help="Scene JSON file")
    parser.add_argument("-o", "--output", help="Write openings and failures to this HDF5 file")
    parser.add_argument("--settings", help="Settings JSON file (default: bundled settings)")
    parser.add_argument("--workers", type=int, help="Number of worker threads")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-file", help="Also write the log to this file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(args.settings)
        if args.workers is not None:
            settings.max_workers = args.workers
        if args.log_level is not None:
            settings.log_level = args.log_level
        # Re-run validation on the CLI overrides
        settings = EngineSettings.from_dict(settings.to_dict())
    except (OSError, ValueError) as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return EXIT_ABORTED

    setup_logging(level=settings.log_level, log_file=args.log_file)

    try:
        scene = SceneModel.from_file(args.scene)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Could not load scene '{args.scene}': {e}")
        return EXIT_ABORTED

    sink: OpeningSink
    if args.output:
        sink = HDF5OpeningSink(args.output, attrs={"scene": scene.title, "settings": settings.to_dict()})
    else:
        sink = ListOpeningSink()

    try:
        result = run_scene(scene, settings, sink)
    except PreconditionError as e:
        logger.error(f"Run aborted: {e}")
        return EXIT_ABORTED

    if isinstance(sink, HDF5OpeningSink) and result.failures:
        sink.report_failures(result.failures)

    print_report(result, settings)
    return EXIT_OK if result.ok else EXIT_FAILURES


if __name__ == "__main__":
    sys.exit(main())
