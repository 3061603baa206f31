"""
Opening Placer
==============
Computes where wall openings must be placed for ducts and pipes crossing
walls, and how big each opening must be.
"""
from openingplacer.engine.deduplicator import canonical_hits, deduplicate, within_length
from openingplacer.engine.orchestrator import BatchOrchestrator, BatchResult, place_openings
from openingplacer.engine.placement import PlacementCalculator
from openingplacer.engine.ray_caster import RayCaster
from openingplacer.errors import BarrierResolutionError, GeometryQueryError, OpeningPlacerError, PreconditionError
from openingplacer.model.elements import (
    Barrier,
    BarrierClass,
    CanonicalHit,
    ElementKind,
    LinearElement,
    OpeningSpec,
    OpeningTemplate,
    PlacementFailure,
    RayHit,
    SearchContext,
)
from openingplacer.model.geometry_primitives import BoundingBox, LineSegment, Point, Vector

__all__ = [
    "Barrier",
    "BarrierClass",
    "BarrierResolutionError",
    "BatchOrchestrator",
    "BatchResult",
    "BoundingBox",
    "CanonicalHit",
    "ElementKind",
    "GeometryQueryError",
    "LineSegment",
    "LinearElement",
    "OpeningPlacerError",
    "OpeningSpec",
    "OpeningTemplate",
    "PlacementCalculator",
    "PlacementFailure",
    "Point",
    "PreconditionError",
    "RayCaster",
    "RayHit",
    "SearchContext",
    "Vector",
    "canonical_hits",
    "deduplicate",
    "place_openings",
    "within_length",
]
